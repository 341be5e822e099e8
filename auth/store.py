"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper (same as characters/store.py).
AccountStore is the repository; _row_to_account is the mapper.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(username) is the hard guarantee behind registration. The service
  checks username_exists() first for a friendly error, but two concurrent
  registrations can both pass that check; the constraint makes the second
  insert raise IntegrityError, which the service maps to a duplicate error.

  UNIQUE(password_salt) turns an (astronomically unlikely) salt collision into
  a loud failure instead of two accounts sharing a salt.

Layer rule: no imports from api/ or characters/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, LargeBinary, MetaData, String, Table, select
from sqlalchemy.engine import Engine

from auth.models import Account
from core.database import make_engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", LargeBinary(64), nullable=False),
    Column("password_salt", LargeBinary(128), nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account entities.

    Usage:
        store = AccountStore("sqlite:///charvault.db")
        account_id = store.create_account(Account(username="alice", password_hash=h, password_salt=s))
        account = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def username_exists(self, username: str) -> bool:
        """Case-sensitive existence check. Cheap: selects only the id column."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_accounts.c.id).where(_accounts.c.username == username)).first()
        return row is not None

    def create_account(self, account: Account) -> int:
        """Insert a new account and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.insert().values(
                    username=account.username,
                    password_hash=account.password_hash,
                    password_salt=account.password_salt,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_username(self, username: str) -> Account | None:
        """Look up an account by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.username == username)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_id(self, account_id: int) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.id == account_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        password_hash=bytes(row.password_hash),
        password_salt=bytes(row.password_salt),
        created_at=row.created_at,
    )
