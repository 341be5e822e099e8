"""Unit tests for auth/guard.py -- bearer parsing and ownership scoping.

Covers:
- authenticate() returns the token subject for a valid Bearer header
- missing, wrong-scheme, and empty headers are rejected with distinct codes
- TokenIssuer errors pass through unchanged
- scope_list() predicate and scope_one() anti-enumeration behaviour
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from auth.guard import OwnerScope, authenticate, parse_bearer, scope_list, scope_one
from auth.models import Account
from auth.tokens import TokenIssuer
from conftest import SECRET
from core.errors import ErrorCode


@dataclass
class _Record:
    id: int
    owner_id: int


# ---------------------------------------------------------------------------
# parse_bearer / authenticate
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("header", ["Bearer abc.def.ghi", "bearer abc.def.ghi", "BEARER  abc.def.ghi  "])
def test_parse_bearer_accepts_any_scheme_case(header: str) -> None:
    assert parse_bearer(header) == "abc.def.ghi"


@pytest.mark.parametrize("header", [None, "", "   "])
def test_parse_bearer_missing(header) -> None:
    assert parse_bearer(header) is ErrorCode.TOKEN_MISSING


@pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "Bearer   ", "abc.def.ghi", "Token abc"])
def test_parse_bearer_wrong_shape_is_malformed(header: str) -> None:
    assert parse_bearer(header) is ErrorCode.TOKEN_MALFORMED


def test_authenticate_returns_subject(issuer: TokenIssuer) -> None:
    token = issuer.issue(Account(id=42, username="bob"))
    assert authenticate(f"Bearer {token}", issuer) == 42


def test_authenticate_missing_header(issuer: TokenIssuer) -> None:
    assert authenticate(None, issuer) is ErrorCode.TOKEN_MISSING


def test_authenticate_passes_through_signature_error(issuer: TokenIssuer) -> None:
    token = TokenIssuer("another-secret-that-is-long-enough-000").issue(Account(id=1, username="x"))
    assert authenticate(f"Bearer {token}", issuer) is ErrorCode.TOKEN_BAD_SIGNATURE


def test_authenticate_passes_through_expiry_error(issuer: TokenIssuer) -> None:
    then = datetime.now(timezone.utc) - timedelta(days=2)
    token = TokenIssuer(SECRET, clock=lambda: then).issue(Account(id=1, username="x"))
    assert authenticate(f"Bearer {token}", issuer) is ErrorCode.TOKEN_EXPIRED


def test_authenticate_passes_through_malformed_error(issuer: TokenIssuer) -> None:
    assert authenticate("Bearer not-a-token", issuer) is ErrorCode.TOKEN_MALFORMED


# ---------------------------------------------------------------------------
# Scoping
# ---------------------------------------------------------------------------


def test_scope_list_predicate() -> None:
    scope = scope_list(5)
    assert scope == OwnerScope(owner_id=5)
    records = [_Record(1, 5), _Record(2, 6), _Record(3, 5)]
    assert [r.id for r in records if scope(r)] == [1, 3]


def test_scope_one_returns_owned_record() -> None:
    record = _Record(1, owner_id=5)
    assert scope_one(5, record) is record


def test_scope_one_hides_other_owners_record() -> None:
    assert scope_one(6, _Record(1, owner_id=5)) is ErrorCode.NOT_FOUND


def test_scope_one_absent_record_is_indistinguishable() -> None:
    assert scope_one(6, None) is scope_one(6, _Record(1, owner_id=5))
