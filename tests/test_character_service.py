"""Unit tests for characters/service.py and characters/store.py.

Two owners, A (id 1) and B (id 2), each start with one character. Covers:
- get_all returns only the caller's characters
- get/update/delete of another owner's character is NOT_FOUND and changes nothing
- absent ids produce the same NOT_FOUND as foreign ids
- add forces owner_id to the caller and returns the caller's list
- update never changes owner_id
- store writes match owner_id, so a stale ownership read cannot reach another
  owner's row, and deleted ids are never reissued
- update reports NOT_FOUND if the record is gone when it is re-read
"""

import pytest

from characters import service
from characters.models import Character, CharacterChanges, RpgClass
from characters.store import CharacterStore
from core.errors import ErrorCode

A, B = 1, 2


@pytest.fixture
def seeded(character_store: CharacterStore) -> tuple[CharacterStore, int, int]:
    a_char = character_store.create_character(Character(owner_id=A, name="Aragorn", strength=50))
    b_char = character_store.create_character(Character(owner_id=B, name="Boromir", rpg_class=RpgClass.cleric))
    return character_store, a_char, b_char


def _changes(character_id: int, name: str = "Renamed") -> CharacterChanges:
    return CharacterChanges(
        id=character_id,
        name=name,
        hit_points=1,
        strength=2,
        defense=3,
        intelligence=4,
        rpg_class=RpgClass.mage,
    )


def test_get_all_is_scoped_to_caller(seeded) -> None:
    store, a_char, b_char = seeded
    result = service.get_all(store, B)
    assert result.success
    assert [c.id for c in result.data] == [b_char]
    assert all(c.owner_id == B for c in result.data)


def test_get_all_empty_for_new_owner(seeded) -> None:
    store, _, _ = seeded
    assert service.get_all(store, 99).data == []


def test_get_by_id_own(seeded) -> None:
    store, a_char, _ = seeded
    result = service.get_by_id(store, A, a_char)
    assert result.success
    assert result.data.name == "Aragorn"
    assert result.data.strength == 50


def test_get_by_id_foreign_and_absent_are_identical(seeded) -> None:
    store, a_char, _ = seeded
    foreign = service.get_by_id(store, B, a_char)
    absent = service.get_by_id(store, B, 9999)
    assert foreign == absent
    assert foreign.error is ErrorCode.NOT_FOUND
    assert foreign.data is None


def test_add_forces_owner_and_returns_callers_list(seeded) -> None:
    store, a_char, _ = seeded
    draft = Character(owner_id=B, name="Gimli", id=a_char)  # owner/id in the draft are ignored
    result = service.add(store, A, draft)
    assert result.success
    assert [c.name for c in result.data] == ["Aragorn", "Gimli"]
    assert all(c.owner_id == A for c in result.data)
    assert [c.name for c in service.get_all(store, B).data] == ["Boromir"]


def test_update_own_character(seeded) -> None:
    store, a_char, _ = seeded
    result = service.update(store, A, _changes(a_char))
    assert result.success
    assert result.data.name == "Renamed"
    assert result.data.rpg_class is RpgClass.mage
    assert result.data.owner_id == A


def test_update_foreign_character_is_not_found_and_unchanged(seeded) -> None:
    store, a_char, _ = seeded
    result = service.update(store, B, _changes(a_char, name="Hijacked"))
    assert result.error is ErrorCode.NOT_FOUND
    assert result.message == service.NOT_FOUND_MESSAGE
    assert store.get_character(a_char).name == "Aragorn"
    assert store.get_character(a_char).owner_id == A


def test_delete_foreign_character_is_not_found_and_unchanged(seeded) -> None:
    store, a_char, _ = seeded
    result = service.delete(store, B, a_char)
    assert result.error is ErrorCode.NOT_FOUND
    assert result.data is None
    survivor = store.get_character(a_char)
    assert survivor is not None
    assert survivor.name == "Aragorn"


def test_delete_own_character_returns_remaining(seeded) -> None:
    store, a_char, _ = seeded
    second = store.create_character(Character(owner_id=A, name="Legolas"))
    result = service.delete(store, A, a_char)
    assert result.success
    assert [c.id for c in result.data] == [second]
    assert store.get_character(a_char) is None


def test_delete_twice_is_not_found(seeded) -> None:
    store, a_char, _ = seeded
    service.delete(store, A, a_char)
    assert service.delete(store, A, a_char).error is ErrorCode.NOT_FOUND


def test_store_round_trip_defaults(character_store: CharacterStore) -> None:
    char_id = character_store.create_character(Character(owner_id=A))
    stored = character_store.get_character(char_id)
    assert (stored.name, stored.hit_points, stored.strength, stored.defense, stored.intelligence) == (
        "Frodo",
        100,
        10,
        10,
        10,
    )
    assert stored.rpg_class is RpgClass.knight
    assert stored.created_at


def test_store_update_and_delete_report_missing_rows(character_store: CharacterStore) -> None:
    assert character_store.update_character(A, _changes(12345)) is False
    assert character_store.delete_character(A, 12345) is False


def test_store_writes_only_touch_the_named_owners_rows(seeded) -> None:
    store, a_char, _ = seeded
    assert store.update_character(B, _changes(a_char, name="Hijacked")) is False
    assert store.delete_character(B, a_char) is False
    survivor = store.get_character(a_char)
    assert survivor.name == "Aragorn"
    assert survivor.owner_id == A


def test_stale_ownership_read_cannot_reach_another_owners_row(seeded, monkeypatch) -> None:
    """B's ownership check saw B's record, but by the write the row is A's."""
    store, a_char, _ = seeded
    stale = Character(owner_id=B, name="Stale", id=a_char)
    monkeypatch.setattr(store, "get_character", lambda character_id: stale)
    assert service.update(store, B, _changes(a_char, name="Hijacked")).error is ErrorCode.NOT_FOUND
    assert service.delete(store, B, a_char).error is ErrorCode.NOT_FOUND
    monkeypatch.undo()
    survivor = store.get_character(a_char)
    assert survivor.name == "Aragorn"
    assert survivor.owner_id == A


def test_deleted_ids_are_not_reused(character_store: CharacterStore) -> None:
    first = character_store.create_character(Character(owner_id=A))
    newest = character_store.create_character(Character(owner_id=A))
    character_store.delete_character(A, newest)
    replacement = character_store.create_character(Character(owner_id=B))
    assert replacement > newest > first


def test_update_reports_not_found_when_record_vanishes_after_write(seeded, monkeypatch) -> None:
    store, a_char, _ = seeded
    real_update = store.update_character

    def update_then_delete(owner_id: int, changes: CharacterChanges) -> bool:
        written = real_update(owner_id, changes)
        store.delete_character(owner_id, changes.id)
        return written

    monkeypatch.setattr(store, "update_character", update_then_delete)
    result = service.update(store, A, _changes(a_char))
    assert result.success is False
    assert result.error is ErrorCode.NOT_FOUND
    assert result.data is None
