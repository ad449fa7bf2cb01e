"""Note store adapter: one contract, two interchangeable backends.

`RemoteNoteStore` talks to the notes API; `LocalNoteStore` keeps notes in a
JSON key-value file (id -> note) when no API endpoint is configured.
`create_store()` picks one at process start; callers never branch per call.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import requests
from pydantic import ValidationError

from voicenotes.core.config import Settings, settings as default_settings
from voicenotes.core.errors import StoreFailure
from voicenotes.domain.notes import Note, needs_create, order_timestamps, validate_note

_log = logging.getLogger("voicenotes.client")


class NoteStore(Protocol):
    def list(self) -> List[Note]:
        """All notes, no ordering guarantee."""
        ...

    def upsert(self, note: Note) -> Note:
        """Creates when the id is absent or a placeholder, updates otherwise."""
        ...

    def delete(self, note_id: str) -> bool:
        """Idempotent delete."""
        ...


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


def _valid_notes(docs: List[Any]) -> List[Note]:
    """Malformed entries are skipped with a warning."""
    notes: List[Note] = []
    for doc in docs:
        try:
            notes.append(Note.model_validate(doc))
        except ValidationError:
            _log.warning("Skipping malformed note id=%s", doc.get("id") if isinstance(doc, dict) else None)
    return notes


class RemoteNoteStore:
    """Notes API backend (`/api/notes`)."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        api_prefix: str = "/api",
    ) -> None:
        self._base = base_url.rstrip("/") + api_prefix
        self._session = session or requests.Session()
        self._timeout = timeout

    def _request(self, method: str, path: str, op: str, **kwargs: Any) -> Any:
        url = f"{self._base}{path}"
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            _log.error("%s %s failed: %s", method, url, e)
            raise StoreFailure(f"{op} failed", detail=str(e)) from e
        if not resp.ok:
            detail = _error_detail(resp)
            _log.error("%s %s -> %s: %s", method, url, resp.status_code, detail)
            raise StoreFailure(f"{op} failed ({resp.status_code})", detail=detail)
        try:
            return resp.json()
        except ValueError as e:
            raise StoreFailure(f"{op} failed: invalid response", detail=str(e)) from e

    def list(self) -> List[Note]:
        data = self._request("GET", "/notes", "list notes")
        if not isinstance(data, list):
            raise StoreFailure("list notes failed: invalid response", detail="expected a JSON array")
        return _valid_notes(data)

    def upsert(self, note: Note) -> Note:
        payload = note.to_wire()
        if needs_create(note.id):
            # The placeholder id never reaches the backend as a storage key
            payload.pop("id", None)
            data = self._request("POST", "/notes", "create note", json=payload)
        else:
            data = self._request("PUT", f"/notes/{note.id}", "update note", json=payload)
        try:
            return Note.model_validate(data)
        except ValidationError as e:
            raise StoreFailure("save note failed: invalid response", detail=str(e)) from e

    def delete(self, note_id: str) -> bool:
        self._request("DELETE", f"/notes/{note_id}", "delete note")
        return True


class LocalNoteStore:
    """Key-value fallback: a JSON object mapping id to note, or memory only when `path` is None."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path).expanduser() if path else None
        self._memory: Dict[str, Dict[str, Any]] = {}

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._path is None:
            return dict(self._memory)
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise StoreFailure("read local notes failed", detail=str(e)) from e
        return data if isinstance(data, dict) else {}

    def _save(self, items: Dict[str, Dict[str, Any]]) -> None:
        if self._path is None:
            self._memory = dict(items)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            raise StoreFailure("write local notes failed", detail=str(e)) from e

    def list(self) -> List[Note]:
        items = self._load().items()
        return _valid_notes([{**doc, "id": key} if isinstance(doc, dict) else doc for key, doc in items])

    def upsert(self, note: Note) -> Note:
        items = self._load()
        stored = validate_note(note.to_wire())
        if needs_create(note.id):
            stored.id = uuid.uuid4().hex
        else:
            previous = items.get(stored.id)
            if isinstance(previous, dict) and isinstance(previous.get("createdAt"), str):
                stored.created_at = previous["createdAt"]
        order_timestamps(stored)
        items[stored.id] = stored.to_wire()
        self._save(items)
        return stored

    def delete(self, note_id: str) -> bool:
        items = self._load()
        if items.pop(note_id, None) is not None:
            self._save(items)
        return True


def create_store(config: Optional[Settings] = None, session: Optional[requests.Session] = None) -> NoteStore:
    """Chooses the backend once: remote when an API base URL is configured."""
    cfg = config or default_settings
    if cfg.remote_store_configured:
        _log.info("Using remote note store at %s", cfg.api_base_url)
        return RemoteNoteStore(
            cfg.api_base_url,
            session=session,
            timeout=cfg.client_timeout_seconds,
            api_prefix=cfg.api_prefix_normalized,
        )
    _log.info("Using local note store at %s", cfg.local_store_path)
    return LocalNoteStore(cfg.local_store_path)
