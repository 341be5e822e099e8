"""
characters/store.py -- SQLAlchemy Core persistence layer for characters.

Pattern: Repository + Data Mapper. CharacterStore is the repository;
_row_to_character is the mapper. Service code never touches SQL directly.

Ownership: list reads take an OwnerScope and filter in SQL, so another owner's
rows are never loaded. Single-record reads return the row regardless of owner
-- the caller (characters/service.py) runs auth.guard.scope_one() on it before
acting. Updates and deletes also match owner_id in their WHERE clause, so a
row that changed hands between the check and the write is left alone.

Security: all queries use bound parameters. No f-strings in SQL.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from auth.guard import OwnerScope
from characters.models import Character, CharacterChanges, RpgClass
from core.database import make_engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_characters = Table(
    "characters",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # No ForeignKey to accounts: the two stores own separate MetaData and may
    # live in separate databases.
    Column("owner_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("hit_points", Integer, nullable=False),
    Column("strength", Integer, nullable=False),
    Column("defense", Integer, nullable=False),
    Column("intelligence", Integer, nullable=False),
    Column("rpg_class", String(20), nullable=False, server_default=RpgClass.knight.value),
    Column("created_at", String(32), nullable=False),
    # AUTOINCREMENT: ids of deleted characters are never handed out again.
    sqlite_autoincrement=True,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CharacterStore:
    """Repository for Character entities.

    Usage:
        store = CharacterStore("sqlite:///charvault.db")
        char_id = store.create_character(Character(owner_id=1, name="Percival"))
        mine = store.list_characters(scope_list(1))
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def create_character(self, character: Character) -> int:
        """Insert a new character and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _characters.insert().values(
                    owner_id=character.owner_id,
                    name=character.name,
                    hit_points=character.hit_points,
                    strength=character.strength,
                    defense=character.defense,
                    intelligence=character.intelligence,
                    rpg_class=RpgClass(character.rpg_class).value,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_characters(self, scope: OwnerScope) -> list[Character]:
        """Return the scope owner's characters ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _characters.select().where(_characters.c.owner_id == scope.owner_id).order_by(_characters.c.id)
            ).fetchall()
        return [_row_to_character(r) for r in rows]

    def get_character(self, character_id: int) -> Optional[Character]:
        """Look up a character by primary key, whoever owns it. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_characters.select().where(_characters.c.id == character_id)).fetchone()
        return _row_to_character(row) if row is not None else None

    def update_character(self, owner_id: int, changes: CharacterChanges) -> bool:
        """Overwrite the descriptive fields of one of owner_id's characters.

        owner_id is matched, never written. Returns False if no row with that id
        belongs to owner_id.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _characters.update()
                .where(_characters.c.id == changes.id, _characters.c.owner_id == owner_id)
                .values(
                    name=changes.name,
                    hit_points=changes.hit_points,
                    strength=changes.strength,
                    defense=changes.defense,
                    intelligence=changes.intelligence,
                    rpg_class=RpgClass(changes.rpg_class).value,
                )
            )
            conn.commit()
        return result.rowcount > 0

    def delete_character(self, owner_id: int, character_id: int) -> bool:
        """Delete one of owner_id's characters. Returns False if there is none with that id."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _characters.delete().where(_characters.c.id == character_id, _characters.c.owner_id == owner_id)
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_character(row) -> Character:
    return Character(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        hit_points=row.hit_points,
        strength=row.strength,
        defense=row.defense,
        intelligence=row.intelligence,
        rpg_class=RpgClass(row.rpg_class),
        created_at=row.created_at,
    )
