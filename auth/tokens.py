"""
auth/tokens.py -- Bearer token issuance and validation.

Security design decisions:
  Format: JWT via python-jose, HMAC-signed (HS512 by default). Claims are
       sub (account id as a string, per RFC 7519), name (username), iat, exp.

  Config: TokenIssuer takes the secret, algorithm and TTL as constructor
       arguments. The API lifespan builds exactly one issuer from Settings and
       stores it on app.state; nothing in this module reads configuration at
       import time, and an issuer is never mutated after construction.

  Validation order: segment count -> signature -> header/alg -> claims ->
       expiry. The signature is recomputed over the raw "header.payload" text
       with the pinned algorithm and compared, in encoded form, against the
       third segment before anything is decoded. Any edit to the header,
       payload or signature is therefore a bad signature. A token signed with
       our key whose header names another algorithm is malformed. Expiry is
       checked last: an authentic but expired token is still rejected.

  Results: validate() returns TokenClaims or an ErrorCode and never raises.
       The distinction between malformed / bad signature / expired is kept for
       logging; the HTTP layer answers all three with the same 401 body.

  No revocation: a token is honoured until exp. Rotating SECRET_KEY
       invalidates every outstanding token at once.

Layer rule: no imports from api/ or characters/. Import from core/ is allowed.
"""

from __future__ import annotations

import hmac
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwk, jwt
from jose.utils import base64url_encode

from auth.models import Account, TokenClaims
from core.errors import ErrorCode

if TYPE_CHECKING:
    from core.config import Settings

DEFAULT_ALGORITHM = "HS512"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Issues and validates signed bearer tokens with a fixed secret and TTL.

    Usage:
        issuer = TokenIssuer.from_settings(get_settings())
        token = issuer.issue(account)
        result = issuer.validate(token)
        if isinstance(result, ErrorCode): ...
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        # Raises JWKError for unsupported algorithms, so a bad config fails at startup.
        self._key = jwk.construct(secret_key, algorithm)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.token_algorithm,
            ttl_seconds=settings.token_expire_seconds,
        )

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, account: Account) -> str:
        """Encode a signed token for the account as it exists right now."""
        if account.id is None:
            raise ValueError("cannot issue a token for an unsaved account")
        now = self._clock().replace(microsecond=0)
        payload = {
            "sub": str(account.id),
            "name": account.username,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def validate(self, token: str) -> TokenClaims | ErrorCode:
        """Return the verified claims, or the ErrorCode describing the first failure."""
        if token.count(".") != 2:
            return ErrorCode.TOKEN_MALFORMED

        # Compare encoded text: the last base64url character has unused low bits.
        signing_input, _, encoded_signature = token.rpartition(".")
        expected = base64url_encode(self._key.sign(signing_input.encode("utf-8")))
        if not hmac.compare_digest(encoded_signature.encode("utf-8"), expected):
            return ErrorCode.TOKEN_BAD_SIGNATURE

        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.get_unverified_claims(token)
        except JWTError:
            return ErrorCode.TOKEN_MALFORMED
        # Pin the algorithm: a token may not choose how it is verified.
        if header.get("alg") != self._algorithm:
            return ErrorCode.TOKEN_MALFORMED
        claims = _claims_from_payload(payload)
        if claims is None:
            return ErrorCode.TOKEN_MALFORMED

        if self._clock() > claims.expires_at:
            return ErrorCode.TOKEN_EXPIRED
        return claims


def _claims_from_payload(payload: Mapping[str, Any]) -> TokenClaims | None:
    sub = payload.get("sub")
    name = payload.get("name")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
        return None
    if not isinstance(name, str):
        return None
    # bool is an int subclass; reject it explicitly.
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (iat, exp)):
        return None
    try:
        issued_at = datetime.fromtimestamp(iat, tz=timezone.utc)
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return TokenClaims(subject=int(sub), display_name=name, issued_at=issued_at, expires_at=expires_at)
