"""Speech-to-text over the OpenAI audio API (single-shot, no retry)."""
from __future__ import annotations

import logging
from pathlib import Path

from openai import OpenAIError

from voicenotes.core.config import settings
from voicenotes.core.errors import TranscriptionFailed
from voicenotes.infrastructure.ai.openai_client import get_openai
from voicenotes.infrastructure.storage.uploads import discard

_log = logging.getLogger("voicenotes.transcribe")


def transcribe_file(path: Path) -> str:
    """Transcribes the audio artifact at `path` and always removes it afterwards.

    Returns the (possibly empty) text; raises `TranscriptionFailed` with the
    upstream detail when the remote call fails.
    """
    try:
        oa = get_openai()
        if oa is None:
            raise TranscriptionFailed("Transcription failed: OpenAI API key not configured")
        try:
            with Path(path).open("rb") as fh:
                result = oa.audio.transcriptions.create(
                    file=fh,
                    model=settings.openai_transcription_model,
                )
        except (OpenAIError, OSError) as e:
            _log.error("Transcription error: %s", e)
            raise TranscriptionFailed(f"Transcription failed: {e}", detail=str(e)) from e
    finally:
        discard(Path(path))

    text = getattr(result, "text", None) or ""
    _log.info("Transcribed %s chars", len(text))
    return text
