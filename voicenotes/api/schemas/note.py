"""
Pydantic schemas for `notes` endpoints (camelCase on the wire).
"""
from pydantic import BaseModel

from voicenotes.domain.notes import Note


class NoteOut(Note):
    """A stored note: `id` is always the backend-assigned identifier."""
    id: str


class DeleteOut(BaseModel):
    ok: bool = True
