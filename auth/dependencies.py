"""
auth/dependencies.py -- FastAPI Depends() helper for bearer authentication.

get_caller_id() is the only place that reads the Authorization header off a
request. It hands the raw value to auth.guard.authenticate() together with the
TokenIssuer built at startup (app.state.token_issuer) and converts a failure
into HTTP 401.

Every token failure (missing, malformed, bad signature, expired) produces the
same 401 body. The specific ErrorCode is logged, not returned.

Layer rule: auth/dependencies.py may import from fastapi because it is part
of the FastAPI dependency injection system. No imports from api/ or
characters/.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.guard import authenticate
from auth.tokens import TokenIssuer
from core.errors import ErrorCode

logger = logging.getLogger("charvault.auth")

UNAUTHORIZED_MESSAGE = "Authentication required."


def get_caller_id(request: Request) -> int:
    """Require a valid bearer token. Returns the caller's account id.

    Use as a FastAPI dependency:
        @router.get("/character/GetAll")
        def route(caller_id: int = Depends(get_caller_id)): ...
    """
    issuer: TokenIssuer = request.app.state.token_issuer
    result = authenticate(request.headers.get("Authorization"), issuer)
    if isinstance(result, ErrorCode):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, result.value)
        raise HTTPException(
            status_code=401,
            detail=UNAUTHORIZED_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result
