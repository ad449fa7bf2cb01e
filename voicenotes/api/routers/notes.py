"""
Endpoints for `notes`: list, create, update, delete.

Bodies are validated in the service layer so that a bad note answers 400
with the same `{"error": ...}` shape as every other domain error.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body

from voicenotes.api.schemas.note import DeleteOut, NoteOut
from voicenotes.core.errors import InvalidInput
from voicenotes.services import note_service

router = APIRouter(prefix="/notes", tags=["Notes"])


def _body(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidInput("note body must be a JSON object")
    return payload


@router.get(
    "",
    response_model=List[NoteOut],
    response_model_exclude_none=True,
    summary="List notes",
    description="All notes, newest `createdAt` first.",
)
def get_notes() -> List[NoteOut]:
    return [NoteOut.model_validate(n.model_dump()) for n in note_service.list_notes()]


@router.post(
    "",
    response_model=NoteOut,
    response_model_exclude_none=True,
    summary="Create note",
    description="Creates a note. Client placeholder ids are dropped; the backend assigns the id.",
)
def create_note(payload: Any = Body(...)) -> NoteOut:
    note = note_service.create_note(_body(payload))
    return NoteOut.model_validate(note.model_dump())


@router.put(
    "/{note_id}",
    response_model=NoteOut,
    response_model_exclude_none=True,
    summary="Update note",
)
def update_note(note_id: str, payload: Any = Body(...)) -> NoteOut:
    note = note_service.update_note(note_id, _body(payload))
    return NoteOut.model_validate(note.model_dump())


@router.delete("/{note_id}", response_model=DeleteOut, summary="Delete note (idempotent)")
def delete_note(note_id: str) -> DeleteOut:
    note_service.delete_note(note_id)
    return DeleteOut(ok=True)
