"""Client gateways for the capture pipeline endpoints.

Both are single-shot request/response calls with no retry. Transport errors
and non-success statuses become `TranscriptionFailed` / `ExtractionFailed`.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from voicenotes.client.capture import AudioBlob
from voicenotes.core.errors import ExtractionFailed, InvalidInput, TranscriptionFailed
from voicenotes.domain.notes import ExtractionResult, Fallback, NoteDraft, Parsed, fallback_draft

_log = logging.getLogger("voicenotes.client")


class _ApiGateway:
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

    def _post(self, path: str, error_cls: type, label: str, **kwargs: Any) -> Any:
        url = f"{self._base}{path}"
        try:
            resp = self._session.post(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            _log.error("%s request failed: %s", label, e)
            raise error_cls(f"{label} failed: {e}", detail=str(e)) from e
        if not resp.ok:
            _log.error("%s failed status=%s body=%s", label, resp.status_code, resp.text)
            raise error_cls(f"{label} failed: {resp.text}", detail=resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise error_cls(f"{label} failed: invalid response", detail=str(e)) from e


class TranscriptionGateway(_ApiGateway):
    def transcribe(self, audio: AudioBlob) -> str:
        """Uploads the recording; returns the (possibly empty) transcription."""
        data = self._post(
            "/transcribe",
            TranscriptionFailed,
            "Transcription",
            files={"file": (audio.filename, audio.data, audio.content_type)},
        )
        return str((data or {}).get("transcription") or "")


class ExtractionGateway(_ApiGateway):
    def extract(self, text: str) -> ExtractionResult:
        """Structured draft for `text`; empty text is rejected before any call."""
        if not (text or "").strip():
            raise InvalidInput("transcription required")
        data = self._post("/analyze-note", ExtractionFailed, "Analyze", json={"transcription": text})
        try:
            return Parsed(NoteDraft.model_validate(data))
        except ValidationError:
            return Fallback(fallback_draft(text), reason="unexpected analyze response")
