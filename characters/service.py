"""
characters/service.py -- Owner-scoped character operations.

Every function takes the caller's account id (already authenticated by
auth/dependencies.py) and routes each record through auth.guard before
returning or mutating it:

  get_all   -- scope_list(caller) filters the read in SQL
  get_by_id -- scope_one(caller, record)
  add       -- owner_id is forced to the caller; returns the caller's list
  update    -- scope_one, then descriptive fields only; returns the record
  delete    -- scope_one, then delete; returns the caller's remaining list

A record owned by someone else is reported exactly like a missing one.
"""

from __future__ import annotations

import logging

from auth.guard import scope_list, scope_one
from characters.models import Character, CharacterChanges
from characters.store import CharacterStore
from core.errors import ErrorCode
from core.responses import ServiceResponse

logger = logging.getLogger("charvault.characters")

NOT_FOUND_MESSAGE = "Character not found."


def get_all(store: CharacterStore, caller_id: int) -> ServiceResponse[list[Character]]:
    return ServiceResponse.ok(store.list_characters(scope_list(caller_id)))


def get_by_id(store: CharacterStore, caller_id: int, character_id: int) -> ServiceResponse[Character]:
    owned = scope_one(caller_id, store.get_character(character_id))
    if isinstance(owned, ErrorCode):
        return ServiceResponse.fail(owned, NOT_FOUND_MESSAGE)
    return ServiceResponse.ok(owned)


def add(store: CharacterStore, caller_id: int, draft: Character) -> ServiceResponse[list[Character]]:
    """Create a character owned by the caller.

    Whatever owner_id the draft carries is replaced with the caller's id.
    """
    draft.owner_id = caller_id
    draft.id = None
    character_id = store.create_character(draft)
    logger.info("Account id=%d created character id=%d", caller_id, character_id)
    return ServiceResponse.ok(store.list_characters(scope_list(caller_id)))


def update(store: CharacterStore, caller_id: int, changes: CharacterChanges) -> ServiceResponse[Character]:
    owned = scope_one(caller_id, store.get_character(changes.id))
    if isinstance(owned, ErrorCode):
        return ServiceResponse.fail(owned, NOT_FOUND_MESSAGE)
    if not store.update_character(caller_id, changes):
        # Deleted between the read and the write.
        return ServiceResponse.fail(ErrorCode.NOT_FOUND, NOT_FOUND_MESSAGE)
    updated = scope_one(caller_id, store.get_character(changes.id))
    if isinstance(updated, ErrorCode):
        return ServiceResponse.fail(updated, NOT_FOUND_MESSAGE)
    return ServiceResponse.ok(updated)


def delete(store: CharacterStore, caller_id: int, character_id: int) -> ServiceResponse[list[Character]]:
    owned = scope_one(caller_id, store.get_character(character_id))
    if isinstance(owned, ErrorCode):
        return ServiceResponse.fail(owned, NOT_FOUND_MESSAGE)
    if not store.delete_character(caller_id, character_id):
        return ServiceResponse.fail(ErrorCode.NOT_FOUND, NOT_FOUND_MESSAGE)
    logger.info("Account id=%d deleted character id=%d", caller_id, character_id)
    return ServiceResponse.ok(store.list_characters(scope_list(caller_id)))
