"""
auth/guard.py -- Caller identity and ownership scoping.

authenticate() turns a raw Authorization header into the caller's account id.
It takes the header value and the TokenIssuer as plain arguments, so it has no
knowledge of FastAPI; auth/dependencies.py is the only place that reads the
header off a request.

scope_list() and scope_one() are the two ownership checks every character
operation goes through:
  - list reads filter in SQL on owner_id (OwnerScope.owner_id);
  - single-record reads and writes compare owner_id before acting.

Anti-enumeration: a record that exists but belongs to someone else is reported
exactly like a record that does not exist (ErrorCode.NOT_FOUND). There is no
"forbidden" outcome.

Layer rule: no imports from api/ or characters/. Records are matched
structurally via the Owned protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, TypeVar

from auth.models import TokenClaims
from core.errors import ErrorCode

if TYPE_CHECKING:
    from auth.tokens import TokenIssuer

BEARER_SCHEME = "bearer"


class Owned(Protocol):
    owner_id: int


R = TypeVar("R", bound=Owned)


@dataclass(frozen=True)
class OwnerScope:
    """Predicate restricting a read to one owner's records."""

    owner_id: int

    def __call__(self, record: Owned) -> bool:
        return record.owner_id == self.owner_id


def parse_bearer(raw_auth_header: Optional[str]) -> str | ErrorCode:
    """Strip the "Bearer" scheme and return the token text.

    The scheme name is case-insensitive (RFC 7235); the token is returned as-is.
    """
    if raw_auth_header is None or not raw_auth_header.strip():
        return ErrorCode.TOKEN_MISSING
    scheme, _, token = raw_auth_header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        return ErrorCode.TOKEN_MALFORMED
    return token


def authenticate(raw_auth_header: Optional[str], issuer: TokenIssuer) -> int | ErrorCode:
    """Return the caller's account id, or the ErrorCode explaining why not.

    TokenIssuer errors are passed through unchanged.
    """
    token = parse_bearer(raw_auth_header)
    if isinstance(token, ErrorCode):
        return token
    result = issuer.validate(token)
    if isinstance(result, TokenClaims):
        return result.subject
    return result


def scope_list(caller_id: int) -> OwnerScope:
    return OwnerScope(owner_id=caller_id)


def scope_one(caller_id: int, record: Optional[R]) -> R | ErrorCode:
    """Return the record only if the caller owns it; NOT_FOUND otherwise."""
    if record is None or record.owner_id != caller_id:
        return ErrorCode.NOT_FOUND
    return record
