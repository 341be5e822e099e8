"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in characters/models.py -- dataclasses own domain shape; stores, services and
routes do the work.

Layer rule: no imports from api/ or characters/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Account:
    """A registered identity that owns characters.

    password_hash is HMAC-SHA512(key=password_salt, msg=password) -- 64 raw
    bytes. password_salt is 128 random bytes generated at registration and
    never reused. Neither value is ever logged or returned by the API.

    repr=False on both binary fields keeps them out of tracebacks and debug
    logging that happens to format an Account.

    id is None before the record is written to the database.
    """

    username: str
    password_hash: bytes = field(default=b"", repr=False)
    password_salt: bytes = field(default=b"", repr=False)
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a bearer token.

    Built only by TokenIssuer.validate() after the signature and expiry checks
    pass. Claims are fixed at issuance: renaming or deleting the account does
    not change an outstanding token until it expires.
    """

    subject: int  # Account.id
    display_name: str  # Account.username at issuance
    issued_at: datetime
    expires_at: datetime
