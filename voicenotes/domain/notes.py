"""Note shapes shared by the API, the client store and the lifecycle controller.

Wire format is camelCase JSON (`hasNotification`, `createdAt`, ...); Python code
uses snake_case attributes. Category and priority are closed enumerations; the
French values written by older clients (`rdv`, `tache`, `normale`, `urgente`) are
normalized on the way in.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from voicenotes.core.errors import InputMissing, InvalidInput
from voicenotes.core.time import epoch_ms, parse_iso

Category = Literal["appointment", "task", "intervention"]
Priority = Literal["normal", "urgent"]

CATEGORIES: tuple[str, ...] = ("appointment", "task", "intervention")
PRIORITIES: tuple[str, ...] = ("normal", "urgent")

LEGACY_CATEGORIES = {"rdv": "appointment", "tache": "task", "tâche": "task"}
LEGACY_PRIORITIES = {"normale": "normal", "urgente": "urgent"}

PLACEHOLDER_PREFIX = "note_"
FALLBACK_TITLE_CHARS = 60


def normalize_category(value: Any) -> Any:
    if isinstance(value, str):
        v = value.strip().lower()
        return LEGACY_CATEGORIES.get(v, v)
    return value


def normalize_priority(value: Any) -> Any:
    if isinstance(value, str):
        v = value.strip().lower()
        if not v:
            return None
        return LEGACY_PRIORITIES.get(v, v)
    return value


def new_placeholder_id(now_ms: Optional[int] = None) -> str:
    """Client-side id for a note that has never been persisted."""
    return f"{PLACEHOLDER_PREFIX}{now_ms if now_ms is not None else epoch_ms()}"


def is_placeholder_id(note_id: Optional[str]) -> bool:
    return bool(note_id) and str(note_id).startswith(PLACEHOLDER_PREFIX)


def needs_create(note_id: Optional[str]) -> bool:
    """True when an upsert must create: id absent or still a placeholder."""
    return not note_id or is_placeholder_id(note_id)


class Note(BaseModel):
    """The persisted unit. `id` is None (or a placeholder) until stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    title: str
    content: str
    category: Category
    has_notification: bool = False
    notification_date: Optional[str] = None
    created_at: str
    updated_at: str
    completed: bool = False
    priority: Optional[Priority] = None
    audio_path: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> Any:
        return normalize_category(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> Any:
        return normalize_priority(v)

    @field_validator("notification_date", mode="before")
    @classmethod
    def _notification_date(cls, v: Any) -> Any:
        return v or None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_note(data: Dict[str, Any]) -> Note:
    """Store-boundary validation: enumerations plus non-blank title and content."""
    try:
        note = Note.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise InvalidInput("invalid note", detail=f"invalid fields: {', '.join(fields)}") from e
    if not note.title.strip():
        raise InputMissing("title required")
    if not note.content.strip():
        raise InputMissing("content required")
    return note


def order_timestamps(note: Note, stamp: Optional[str] = None) -> Note:
    """Keeps `updatedAt >= createdAt`: an earlier `updatedAt` becomes `stamp`, or `createdAt`."""
    created = parse_iso(note.created_at)
    if parse_iso(note.updated_at) < created:
        note.updated_at = stamp if stamp and parse_iso(stamp) >= created else note.created_at
    return note


class NoteDraft(BaseModel):
    """Structured note extracted from a transcription."""

    title: str
    category: Category
    content: str
    priority: Priority

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> Any:
        return normalize_category(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> Any:
        return normalize_priority(v)


def fallback_draft(text: str) -> NoteDraft:
    """Deterministic draft used when the model reply is unusable. Never raises."""
    text = text or ""
    return NoteDraft(
        title=text[:FALLBACK_TITLE_CHARS],
        category="intervention",
        content=text,
        priority="normal",
    )


@dataclass(frozen=True)
class Parsed:
    draft: NoteDraft


@dataclass(frozen=True)
class Fallback:
    draft: NoteDraft
    reason: str = ""


ExtractionResult = Union[Parsed, Fallback]
