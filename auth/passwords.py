"""
auth/passwords.py -- Salted password hashing.

Construction: HMAC-SHA512 keyed with a per-account random salt, digesting the
UTF-8 password bytes. The salt is 128 bytes (the HMAC-SHA512 block size), the
hash is the 64-byte digest. Both are stored as raw bytes in separate columns.

Verification recomputes the HMAC with the stored salt and compares with
hmac.compare_digest, which runs in time independent of where the first
differing byte is.

Layer rule: stdlib only. No imports from api/, characters/, or core/.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

SALT_BYTES = 128
HASH_BYTES = hashlib.sha512().digest_size


def _digest(password: str, salt: bytes) -> bytes:
    return hmac.new(salt, password.encode("utf-8"), hashlib.sha512).digest()


def hash_password(plain: str) -> tuple[bytes, bytes]:
    """Return (password_hash, password_salt) for a new account.

    A fresh salt is drawn from the OS CSPRNG on every call, so two accounts
    with the same password still get different hashes.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    return _digest(plain, salt), salt


def verify_password(plain: str, password_hash: bytes, password_salt: bytes) -> bool:
    """Return True if the plaintext password matches the stored hash and salt."""
    if not password_salt or len(password_hash) != HASH_BYTES:
        return False
    return hmac.compare_digest(_digest(plain, password_salt), password_hash)


# Timing equalization pair. Login verifies against this when the username does
# not exist, so an unknown user costs the same HMAC as a wrong password.
DUMMY_HASH, DUMMY_SALT = hash_password("charvault_timing_dummy")
