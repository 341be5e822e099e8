"""
core/database.py -- SQLAlchemy engine factory shared by the account and
character stores.

Both stores default to the same DATABASE_URL, but each owns its own engine and
its own MetaData, so either can be pointed at a separate database in tests.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an engine, applying the SQLite-specific connection settings.

    check_same_thread=False because FastAPI runs sync handlers in a thread
    pool and a pooled connection may be used from a different thread.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
