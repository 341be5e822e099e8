"""
core/errors.py -- Tagged error codes shared by every layer.

Subsystem functions (auth/, characters/) return these values instead of
raising for expected failures. Only the HTTP boundary (api/responses.py)
turns them into status codes, and it collapses the token codes into a single
client-facing message so the response never reveals why a token failed.

Layer rule: core/ is the kernel and imports nothing from the project.
"""

from enum import Enum


class ErrorCode(str, Enum):
    DUPLICATE_USERNAME = "duplicate_username"
    # Unknown username and wrong password share this code on purpose.
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_MISSING = "token_missing"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_BAD_SIGNATURE = "token_bad_signature"
    TOKEN_EXPIRED = "token_expired"
    # Absent and owned-by-someone-else share this code on purpose.
    NOT_FOUND = "not_found"


TOKEN_ERRORS: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.TOKEN_MISSING,
        ErrorCode.TOKEN_MALFORMED,
        ErrorCode.TOKEN_BAD_SIGNATURE,
        ErrorCode.TOKEN_EXPIRED,
    }
)
