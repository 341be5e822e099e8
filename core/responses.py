"""
core/responses.py -- The {data, success, message} operation envelope.

Pattern: Data class (pure data container). Every service function in auth/
and characters/ returns a ServiceResponse. The api/ layer serializes
data/success/message and reads `error` only to pick the status code --
`error` itself is never written to a response body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from core.errors import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResponse(Generic[T]):
    """Result of one subsystem operation.

    Invariant: success=False implies data is None. Use ok() / fail() rather
    than the constructor so the invariant cannot be broken by accident.
    """

    data: Optional[T] = None
    success: bool = True
    message: Optional[str] = None
    error: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: T, message: Optional[str] = None) -> ServiceResponse[T]:
        return cls(data=data, success=True, message=message)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> ServiceResponse[T]:
        return cls(data=None, success=False, message=message, error=error)
