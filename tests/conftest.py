"""
tests/conftest.py -- Shared test fixtures for Character Vault tests.

This module provides:
  - SECRET: fixed signing secret used by every test issuer
  - make_stores(): isolated in-memory account + character stores
  - issuer / account_store / character_store: unit-test fixtures
  - api_client: TestClient on the real app with a patched lifespan
  - new_account: factory that registers + logs in a fresh account over HTTP

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

DEBUG must be set before any api/ import so get_settings() auto-generates
SECRET_KEY instead of raising. The rate limits are raised for the same reason
the stores are isolated: tests must not interfere with each other.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any api/ or core/ import so get_settings() builds
# a dev-mode Settings object.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "10000/minute")
os.environ.setdefault("REGISTER_RATE_LIMIT", "10000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from characters.store import CharacterStore

SECRET = "test-secret-key-that-is-at-least-32-characters"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_stores(db_suffix: str) -> tuple[AccountStore, CharacterStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB names so test modules and
                   individual tests don't share state.
    """
    accounts_url = f"sqlite:///file:test_accounts_{db_suffix}?mode=memory&cache=shared&uri=true"
    characters_url = f"sqlite:///file:test_characters_{db_suffix}?mode=memory&cache=shared&uri=true"
    return AccountStore(accounts_url), CharacterStore(characters_url)


def _patch_lifespan(issuer: TokenIssuer, account_store: AccountStore, character_store: CharacterStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the test issuer and stores into app.state so routes see isolated
    in-memory DBs and a known signing secret.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.token_issuer = issuer
        app.state.account_store = account_store
        app.state.character_store = character_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-test fixtures -- fresh state per test
# ---------------------------------------------------------------------------


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(SECRET)


@pytest.fixture
def stores() -> Generator[tuple[AccountStore, CharacterStore], None, None]:
    account_store, character_store = make_stores(uuid.uuid4().hex)
    yield account_store, character_store
    account_store.close()
    character_store.close()


@pytest.fixture
def account_store(stores: tuple[AccountStore, CharacterStore]) -> AccountStore:
    return stores[0]


@pytest.fixture
def character_store(stores: tuple[AccountStore, CharacterStore]) -> CharacterStore:
    return stores[1]


# ---------------------------------------------------------------------------
# Integration fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient on the real FastAPI app with a patched lifespan.

    Tests hit real route handlers, dependencies and exception handlers but use
    isolated in-memory stores and the fixed SECRET.
    """
    account_store, character_store = make_stores(f"api_{uuid.uuid4().hex}")
    app.router.lifespan_context = _patch_lifespan(TokenIssuer(SECRET), account_store, character_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    account_store.close()
    character_store.close()


@pytest.fixture
def new_account(api_client: TestClient) -> Callable[[], tuple[int, dict[str, str]]]:
    """Factory: register and log in a fresh account; return (account_id, auth headers).

    Usernames are random so tests sharing the module-scoped client never collide.
    """

    def _make() -> tuple[int, dict[str, str]]:
        username = f"user-{uuid.uuid4().hex[:12]}"
        password = "pw-" + uuid.uuid4().hex
        reg = api_client.post("/auth/register", json={"username": username, "password": password})
        assert reg.status_code == 200, reg.text
        login = api_client.post("/auth/login", json={"username": username, "password": password})
        assert login.status_code == 200, login.text
        return reg.json()["data"], {"Authorization": f"Bearer {login.json()['data']}"}

    return _make
