"""Note lifecycle controller: the UI-facing orchestrator.

Owns the loaded note list (single writer) and drives one capture at a time:

    IDLE -> RECORDING -> TRANSCRIBING -> EXTRACTING -> REVIEWING -> IDLE

Failures never leave the controller stuck: a failed transcription still opens
the review form with an error placeholder, a failed extraction falls back to
the deterministic draft, and store failures keep the current state with
`last_error` set for display.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from voicenotes.client.capture import CaptureHandle, Recorder
from voicenotes.client.gateways import ExtractionGateway, TranscriptionGateway
from voicenotes.client.store import NoteStore
from voicenotes.core.errors import (
    DeviceAccessDenied,
    ExtractionFailed,
    PipelineBusy,
    TranscriptionFailed,
    VoiceNotesError,
)
from voicenotes.core.time import now_iso, parse_iso
from voicenotes.domain.notes import (
    CATEGORIES,
    Category,
    Note,
    NoteDraft,
    fallback_draft,
    new_placeholder_id,
    normalize_category,
)

_log = logging.getLogger("voicenotes.client")

ALL_CATEGORIES = "all"
PLACEHOLDER_TITLE = "Voice note"
TRANSCRIPTION_ERROR_CONTENT = "Transcription error"
MAX_EXTRACTED_TITLE = 100


class CaptureState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    EXTRACTING = "extracting"
    REVIEWING = "reviewing"


class ReviewDraft(BaseModel):
    """Editable form shown while reviewing."""

    model_config = ConfigDict(validate_assignment=True)

    title: str = ""
    content: str = ""
    category: Category = "appointment"
    has_notification: bool = False
    notification_date: str = ""
    priority: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v):
        return normalize_category(v)

    @property
    def is_submittable(self) -> bool:
        return bool(self.title.strip() and self.content.strip())


def sort_notes(notes: List[Note]) -> List[Note]:
    """Newest `createdAt` first."""
    return sorted(notes, key=lambda n: parse_iso(n.created_at), reverse=True)


def draft_from_extraction(draft: NoteDraft, transcription: str) -> ReviewDraft:
    return ReviewDraft(
        title=draft.title[:MAX_EXTRACTED_TITLE] or PLACEHOLDER_TITLE,
        content=draft.content or transcription,
        category=draft.category,
        has_notification=draft.priority == "urgent",
        priority=draft.priority,
    )


def transcription_error_draft() -> ReviewDraft:
    return ReviewDraft(title=PLACEHOLDER_TITLE, content=TRANSCRIPTION_ERROR_CONTENT, category="intervention")


class NoteLifecycleController:
    def __init__(
        self,
        store: NoteStore,
        recorder: Optional[Recorder] = None,
        transcriber: Optional[TranscriptionGateway] = None,
        extractor: Optional[ExtractionGateway] = None,
        clock: Callable[[], str] = now_iso,
        id_factory: Callable[[], str] = new_placeholder_id,
    ) -> None:
        self._store = store
        self._recorder = recorder
        self._transcriber = transcriber
        self._extractor = extractor
        self._clock = clock
        self._id_factory = id_factory

        self._notes: List[Note] = []
        self._capture: Optional[CaptureHandle] = None
        self.state = CaptureState.IDLE
        self.draft = ReviewDraft()
        self.editing: Optional[Note] = None
        self.last_error: Optional[str] = None

    # --- list ---

    @property
    def notes(self) -> List[Note]:
        return list(self._notes)

    def reload(self) -> List[Note]:
        self._notes = sort_notes(self._store.list())
        return self.notes

    def search(self, text: str) -> List[Note]:
        q = (text or "").lower()
        return [n for n in self._notes if q in (n.title or "").lower() or q in (n.content or "").lower()]

    def filter_by_category(self, category: str) -> List[Note]:
        if not category or category == ALL_CATEGORIES:
            return self.notes
        return [n for n in self._notes if n.category == category]

    def visible_notes(self, search_text: str = "", category: str = ALL_CATEGORIES) -> List[Note]:
        matching = {id(n) for n in self.search(search_text)}
        return [n for n in self.filter_by_category(category) if id(n) in matching]

    def stats(self) -> Dict[str, int]:
        counts = {c: 0 for c in CATEGORIES}
        for n in self._notes:
            counts[n.category] = counts.get(n.category, 0) + 1
        counts[ALL_CATEGORIES] = len(self._notes)
        return counts

    # --- capture pipeline ---

    @property
    def busy(self) -> bool:
        """True while start must stay disabled."""
        return self.state in (CaptureState.RECORDING, CaptureState.TRANSCRIBING, CaptureState.EXTRACTING)

    def _require(self, *states: CaptureState) -> None:
        if self.state not in states:
            raise PipelineBusy(f"not allowed while {self.state.value}")

    def start_capture(self) -> bool:
        """IDLE -> RECORDING. On device failure reports and stays IDLE."""
        self._require(CaptureState.IDLE)
        self.last_error = None
        try:
            if self._recorder is None:
                raise DeviceAccessDenied("No audio input configured")
            self._capture = self._recorder.start()
        except DeviceAccessDenied as e:
            _log.error("Microphone inaccessible: %s", e.detail or e.message)
            self.last_error = e.message
            self._capture = None
            return False
        self.state = CaptureState.RECORDING
        return True

    def abandon_capture(self) -> None:
        """Drops an in-progress recording; the device is released."""
        self._require(CaptureState.RECORDING)
        handle, self._capture = self._capture, None
        try:
            handle.abandon()
        finally:
            self.state = CaptureState.IDLE

    def stop_capture(self) -> ReviewDraft:
        """RECORDING -> TRANSCRIBING -> EXTRACTING -> REVIEWING."""
        self._require(CaptureState.RECORDING)
        handle, self._capture = self._capture, None
        self.state = CaptureState.TRANSCRIBING
        try:
            audio = handle.stop().result()
            if self._transcriber is None:
                raise TranscriptionFailed("Transcription unavailable: no API endpoint configured")
            text = self._transcriber.transcribe(audio)
        except VoiceNotesError as e:
            return self._open_transcription_error(e.message)
        except Exception as e:  # capture finalization error
            return self._open_transcription_error(str(e))

        if not text.strip():
            return self._open_transcription_error("empty transcription")

        self.state = CaptureState.EXTRACTING
        try:
            if self._extractor is None:
                raise ExtractionFailed("Analyze unavailable: no API endpoint configured")
            extracted = self._extractor.extract(text).draft
        except VoiceNotesError as e:
            _log.warning("Extraction failed, using fallback: %s", e.message)
            extracted = fallback_draft(text)
        return self._open_review(draft_from_extraction(extracted, text))

    def _open_transcription_error(self, reason: str) -> ReviewDraft:
        _log.error("Upload/transcribe error: %s", reason)
        self.last_error = reason
        return self._open_review(transcription_error_draft())

    def _open_review(self, draft: ReviewDraft, editing: Optional[Note] = None) -> ReviewDraft:
        self.draft = draft
        self.editing = editing
        self.state = CaptureState.REVIEWING
        return self.draft

    def new_manual_note(self) -> ReviewDraft:
        self._require(CaptureState.IDLE)
        return self._open_review(ReviewDraft())

    def edit_existing(self, note: Note) -> ReviewDraft:
        self._require(CaptureState.IDLE)
        return self._open_review(
            ReviewDraft(
                title=note.title,
                content=note.content,
                category=note.category,
                has_notification=note.has_notification,
                notification_date=note.notification_date or "",
                priority=note.priority,
            ),
            editing=note,
        )

    def update_draft(self, **fields) -> ReviewDraft:
        self._require(CaptureState.REVIEWING)
        for name, value in fields.items():
            setattr(self.draft, name, value)
        return self.draft

    def _reset(self) -> None:
        self.draft = ReviewDraft()
        self.editing = None
        self.state = CaptureState.IDLE

    def cancel(self) -> None:
        """REVIEWING -> IDLE without touching the store."""
        self._require(CaptureState.REVIEWING)
        self._reset()

    def confirm(self) -> Optional[Note]:
        """REVIEWING -> IDLE: persists the draft and reloads the list.

        Returns None (staying in REVIEWING) when the draft is incomplete or the
        write fails. Once the write succeeds the review is closed even if the
        reload fails; `last_error` then reports the reload failure.
        """
        self._require(CaptureState.REVIEWING)
        draft = self.draft
        if not draft.is_submittable:
            self.last_error = "title and content are required"
            return None
        now = self._clock()
        editing = self.editing
        note = Note(
            id=editing.id if editing else self._id_factory(),
            title=draft.title,
            content=draft.content,
            category=draft.category,
            has_notification=draft.has_notification,
            notification_date=(draft.notification_date or None) if draft.has_notification else None,
            created_at=editing.created_at if editing else now,
            updated_at=now,
            completed=editing.completed if editing else False,
            priority=draft.priority if draft.priority in ("normal", "urgent") else None,
        )
        try:
            stored = self._store.upsert(note)
        except VoiceNotesError as e:
            _log.error("Save error: %s", e.detail or e.message)
            self.last_error = e.message
            return None
        self.last_error = None
        self._reset()
        self._refresh(written=stored)
        return stored

    def _refresh(self, written: Optional[Note] = None, removed_id: Optional[str] = None) -> None:
        """Reloads after a successful write; on failure the write is applied to the local list."""
        try:
            self.reload()
        except VoiceNotesError as e:
            _log.error("Reload error: %s", e.detail or e.message)
            self.last_error = e.message
            stale = {removed_id, written.id if written else None}
            notes = [n for n in self._notes if n.id not in stale]
            if written is not None:
                notes.append(written)
            self._notes = sort_notes(notes)

    # --- non-capture operations ---

    def toggle_completed(self, note: Note) -> Optional[Note]:
        updated = note.model_copy(update={"completed": not note.completed, "updated_at": self._clock()})
        try:
            stored = self._store.upsert(updated)
        except VoiceNotesError as e:
            _log.error("Toggle completed error: %s", e.detail or e.message)
            self.last_error = e.message
            return None
        self.last_error = None
        self._refresh(written=stored)
        return stored

    def remove(self, note_id: str) -> bool:
        try:
            self._store.delete(note_id)
        except VoiceNotesError as e:
            _log.error("Delete error: %s", e.detail or e.message)
            self.last_error = e.message
            return False
        self.last_error = None
        self._refresh(removed_id=note_id)
        return True
