"""
API request and response models for Character Vault REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
characters/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format: camelCase field names ("hitPoints", "class") for compatibility
with existing clients. populate_by_name=True lets Python code construct
models with snake_case names.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from characters.models import Character, CharacterChanges, RpgClass

T = TypeVar("T")

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Largest value a SQLite INTEGER column can hold.
MAX_DB_INT = 2**63 - 1


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class Envelope(BaseModel, Generic[T]):
    """{data, success, message} wrapper returned by every endpoint.

    success=False always comes with data=None.
    """

    data: Optional[T] = None
    success: bool = True
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """Request body for POST /auth/register and POST /auth/login.

    coerce_numbers_to_str accepts {"password": 123456}, which older clients send.
    Username is not stripped or case-folded: "Alice" and "alice" are different
    accounts.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------


class CharacterCreate(BaseModel):
    """Request body for POST /character. Omitted fields take the defaults."""

    model_config = _CAMEL

    name: str = Field(default="Frodo", min_length=1, max_length=255)
    hit_points: int = Field(default=100, ge=0, le=MAX_DB_INT)
    strength: int = Field(default=10, ge=0, le=MAX_DB_INT)
    defense: int = Field(default=10, ge=0, le=MAX_DB_INT)
    intelligence: int = Field(default=10, ge=0, le=MAX_DB_INT)
    rpg_class: RpgClass = Field(default=RpgClass.knight, alias="class")

    def to_domain(self, owner_id: int) -> Character:
        return Character(
            owner_id=owner_id,
            name=self.name,
            hit_points=self.hit_points,
            strength=self.strength,
            defense=self.defense,
            intelligence=self.intelligence,
            rpg_class=self.rpg_class,
        )


class CharacterUpdate(CharacterCreate):
    """Request body for PUT /character. id selects the record; there is no owner field."""

    id: int = Field(ge=1, le=MAX_DB_INT)

    def to_changes(self) -> CharacterChanges:
        return CharacterChanges(
            id=self.id,
            name=self.name,
            hit_points=self.hit_points,
            strength=self.strength,
            defense=self.defense,
            intelligence=self.intelligence,
            rpg_class=self.rpg_class,
        )


class CharacterOut(BaseModel):
    """A character as returned to its owner. owner_id is not exposed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    name: str
    hit_points: int
    strength: int
    defense: int
    intelligence: int
    rpg_class: RpgClass = Field(alias="class")

    @classmethod
    def from_domain(cls, character: Character) -> "CharacterOut":
        return cls(
            id=character.id,
            name=character.name,
            hit_points=character.hit_points,
            strength=character.strength,
            defense=character.defense,
            intelligence=character.intelligence,
            rpg_class=character.rpg_class,
        )
