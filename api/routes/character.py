"""
api/routes/character.py -- Owner-scoped character CRUD.

Routes (GetAll is registered before /{character_id} so it is not captured by
the int path parameter):
  GET    /character/GetAll           -- caller's characters
  GET    /character/{character_id}   -- one character; 404 if absent or not owned
  POST   /character                  -- create; data = caller's characters
  PUT    /character                  -- update by body id; 404 if absent or not owned
  DELETE /character/{character_id}   -- delete; data = caller's remaining characters

Every route depends on get_caller_id, so a missing or invalid bearer token is
rejected with 401 before the handler runs. Ownership is enforced in
characters/service.py, never here.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import JSONResponse

from api.models import MAX_DB_INT, CharacterCreate, CharacterOut, CharacterUpdate, Envelope
from api.responses import envelope_response
from auth.dependencies import get_caller_id
from characters import service
from characters.models import Character
from characters.store import CharacterStore

router = APIRouter(prefix="/character")

CharacterId = Annotated[int, Path(ge=1, le=MAX_DB_INT)]


def _out(character: Character) -> dict:
    return CharacterOut.from_domain(character).model_dump(mode="json", by_alias=True)


def _out_list(characters: list[Character]) -> list[dict]:
    return [_out(c) for c in characters]


@router.get("/GetAll", response_model=Envelope[list[CharacterOut]])
def get_all(request: Request, caller_id: int = Depends(get_caller_id)) -> JSONResponse:
    """Return every character owned by the caller."""
    store: CharacterStore = request.app.state.character_store
    return envelope_response(service.get_all(store, caller_id), _out_list)


@router.get("/{character_id}", response_model=Envelope[CharacterOut])
def get_single(request: Request, character_id: CharacterId, caller_id: int = Depends(get_caller_id)) -> JSONResponse:
    """Return one character. A character owned by someone else is a 404."""
    store: CharacterStore = request.app.state.character_store
    return envelope_response(service.get_by_id(store, caller_id, character_id), _out)


@router.post("", response_model=Envelope[list[CharacterOut]])
def add_character(request: Request, body: CharacterCreate, caller_id: int = Depends(get_caller_id)) -> JSONResponse:
    """Create a character owned by the caller and return the caller's full list."""
    store: CharacterStore = request.app.state.character_store
    return envelope_response(service.add(store, caller_id, body.to_domain(caller_id)), _out_list)


@router.put("", response_model=Envelope[CharacterOut])
def update_character(
    request: Request,
    body: CharacterUpdate,
    caller_id: int = Depends(get_caller_id),
) -> JSONResponse:
    """Overwrite a character's descriptive fields. Ownership cannot change."""
    store: CharacterStore = request.app.state.character_store
    return envelope_response(service.update(store, caller_id, body.to_changes()), _out)


@router.delete("/{character_id}", response_model=Envelope[list[CharacterOut]])
def delete_character(request: Request, character_id: CharacterId, caller_id: int = Depends(get_caller_id)) -> JSONResponse:
    """Delete a character and return the caller's remaining list."""
    store: CharacterStore = request.app.state.character_store
    return envelope_response(service.delete(store, caller_id, character_id), _out_list)
