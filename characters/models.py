"""
characters/models.py -- Domain dataclasses for user-owned characters.

These are pure data containers with zero logic. Ownership checks live in
auth/guard.py; persistence lives in characters/store.py.

id is None before the record is written to the database.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RpgClass(str, Enum):
    knight = "knight"
    mage = "mage"
    cleric = "cleric"


@dataclass
class Character:
    """A character record.

    owner_id is set once at creation from the caller's token and is never
    updated afterwards -- CharacterStore.update_character() does not write it.
    """

    owner_id: int
    name: str = "Frodo"
    hit_points: int = 100
    strength: int = 10
    defense: int = 10
    intelligence: int = 10
    rpg_class: RpgClass = RpgClass.knight
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class CharacterChanges:
    """Descriptive fields a caller may change on an existing character.

    Deliberately has no owner_id: ownership cannot be transferred.
    """

    id: int
    name: str
    hit_points: int
    strength: int
    defense: int
    intelligence: int
    rpg_class: RpgClass
