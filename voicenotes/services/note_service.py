"""
Service layer for notes: validation at the store boundary over the repository.

Notes are validated with the shared `Note` model before they reach Mongo:
title and content must be non-blank, category and priority must belong to their
enumerations. Persistence errors surface as `StoreFailure`.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from voicenotes.core.errors import NoteNotFound, StoreFailure
from voicenotes.core.time import now_iso
from voicenotes.domain.notes import Note, order_timestamps, validate_note
from voicenotes.repositories import notes_repo as repo

_log = logging.getLogger("voicenotes.notes")


@contextmanager
def _store_errors(op: str) -> Iterator[None]:
    try:
        yield
    except (PyMongoError, RuntimeError) as e:
        _log.error("%s failed: %s", op, e)
        raise StoreFailure(f"{op} failed", detail=str(e)) from e


def _storable(note: Note) -> Dict[str, Any]:
    doc = note.to_wire()
    doc.pop("id", None)
    return doc


def list_notes() -> List[Note]:
    with _store_errors("list notes"):
        docs = repo.list_notes()
    notes: List[Note] = []
    for d in docs:
        try:
            notes.append(Note.model_validate(d))
        except ValidationError:
            _log.warning("Skipping malformed note id=%s", d.get("id"))
    _log.info("GET /notes -> %s notes", len(notes))
    return notes


def create_note(payload: Dict[str, Any]) -> Note:
    """Creates a note; placeholder ids are dropped, valid ObjectIds are kept."""
    data = dict(payload)
    data["createdAt"] = data.get("createdAt") or now_iso()
    data["updatedAt"] = data.get("updatedAt") or data["createdAt"]
    note = order_timestamps(validate_note(data))
    doc = _storable(note)
    client_id = payload.get("id")
    if repo.is_object_id(client_id):
        doc["id"] = str(client_id)
    with _store_errors("create note"):
        stored = repo.insert_note(doc)
    created = Note.model_validate(stored)
    _log.info("Created note id=%s title=%r createdAt=%s", created.id, created.title, created.created_at)
    return created


def update_note(note_id: str, payload: Dict[str, Any]) -> Note:
    """Replaces every provided field; `createdAt` is kept from the stored note."""
    with _store_errors("update note"):
        existing = repo.get_note(note_id)
    if existing is None:
        raise NoteNotFound(f"note {note_id} not found")
    now = now_iso()
    data = {**existing, **payload}
    data["id"] = existing["id"]
    data["createdAt"] = existing.get("createdAt") or payload.get("createdAt") or now
    data["updatedAt"] = payload.get("updatedAt") or now
    note = order_timestamps(validate_note(data), stamp=now)
    with _store_errors("update note"):
        stored = repo.replace_fields(note_id, _storable(note))
    if stored is None:
        raise NoteNotFound(f"note {note_id} not found")
    return Note.model_validate(stored)


def delete_note(note_id: str) -> None:
    """Idempotent: deleting an unknown id is not an error."""
    with _store_errors("delete note"):
        removed = repo.delete_note(note_id)
    if not removed:
        _log.info("Delete no-op for id=%s", note_id)
