"""
api/responses.py -- ServiceResponse -> HTTP translation.

This is the only place error codes become status codes:

  DUPLICATE_USERNAME, INVALID_CREDENTIALS -> 400
  any token error                         -> 401
  NOT_FOUND                               -> 404

Token failures normally never reach here (auth.dependencies raises 401 before
the handler runs), but the mapping is total so a stray code cannot turn into
a 200.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Optional

from fastapi.responses import JSONResponse

from api.models import Envelope
from core.errors import TOKEN_ERRORS, ErrorCode
from core.responses import ServiceResponse

_STATUS_BY_ERROR: dict[ErrorCode, int] = {
    ErrorCode.DUPLICATE_USERNAME: 400,
    ErrorCode.INVALID_CREDENTIALS: 400,
    ErrorCode.NOT_FOUND: 404,
    **{code: 401 for code in TOKEN_ERRORS},
}


def status_for(error: Optional[ErrorCode]) -> int:
    if error is None:
        return 200
    return _STATUS_BY_ERROR[error]


def error_envelope(status_code: int, message: str, headers: Optional[dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Envelope[Any](data=None, success=False, message=message).model_dump(),
        headers=headers,
    )


def envelope_response(
    result: ServiceResponse[Any],
    convert: Callable[[Any], Any] = lambda data: data,
) -> JSONResponse:
    """Serialize a ServiceResponse as {data, success, message}.

    convert maps domain data to its API model (e.g. Character -> CharacterOut)
    and only runs on success.
    """
    data = convert(result.data) if result.success and result.data is not None else None
    envelope = Envelope[Any](data=data, success=result.success, message=result.message)
    return JSONResponse(
        status_code=status_for(result.error),
        content=envelope.model_dump(mode="json", by_alias=True),
    )
