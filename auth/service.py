"""
auth/service.py -- Registration and login.

Both functions return a ServiceResponse and never raise for expected
failures; api/routes/auth.py maps the error code to a status.

Login conflates "unknown username" and "wrong password" into one
INVALID_CREDENTIALS response with one message, and runs the HMAC against a
dummy hash/salt for unknown usernames so the two cases also cost the same
time. The real reason is logged for operators only.

Layer rule: no imports from api/ or characters/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import Account
from auth.passwords import DUMMY_HASH, DUMMY_SALT, hash_password, verify_password
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.errors import ErrorCode
from core.responses import ServiceResponse

logger = logging.getLogger("charvault.auth")

DUPLICATE_USERNAME_MESSAGE = "User already exists."
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


def register(store: AccountStore, username: str, password: str) -> ServiceResponse[int]:
    """Create an account with a freshly salted password hash; data is the new id."""
    if store.username_exists(username):
        return ServiceResponse.fail(ErrorCode.DUPLICATE_USERNAME, DUPLICATE_USERNAME_MESSAGE)

    password_hash, password_salt = hash_password(password)
    try:
        account_id = store.create_account(
            Account(username=username, password_hash=password_hash, password_salt=password_salt)
        )
    except IntegrityError:
        # Lost the race against a concurrent registration of the same name.
        logger.info("Registration race on username %r resolved by UNIQUE constraint", username)
        return ServiceResponse.fail(ErrorCode.DUPLICATE_USERNAME, DUPLICATE_USERNAME_MESSAGE)

    logger.info("Registered account id=%d", account_id)
    return ServiceResponse.ok(account_id)


def authenticate_account(store: AccountStore, username: str, password: str) -> Account | None:
    """Return the account if the password matches, None otherwise.

    Always runs one HMAC verification, whether or not the username exists.
    """
    account = store.get_by_username(username)
    if account is None:
        verify_password(password, DUMMY_HASH, DUMMY_SALT)
        logger.info("Login failed: unknown username")
        return None
    if not verify_password(password, account.password_hash, account.password_salt):
        logger.info("Login failed: wrong password for account id=%d", account.id)
        return None
    return account


def login(store: AccountStore, issuer: TokenIssuer, username: str, password: str) -> ServiceResponse[str]:
    """Verify credentials and issue a bearer token; data is the token string."""
    account = authenticate_account(store, username, password)
    if account is None:
        return ServiceResponse.fail(ErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
    return ServiceResponse.ok(issuer.issue(account))
