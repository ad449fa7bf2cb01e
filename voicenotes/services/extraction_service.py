"""Structured note extraction over the OpenAI chat API.

The model is asked for a JSON object with exactly `title`, `category`,
`content` and `priority`. A reply that does not decode into that shape is not an
error: it yields `Fallback(fallback_draft(text))`. Only transport failures
raise (`ExtractionFailed`).
"""
from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAIError
from pydantic import ValidationError

from voicenotes.core.config import settings
from voicenotes.core.errors import ExtractionFailed, InvalidInput
from voicenotes.domain.notes import (
    CATEGORIES,
    PRIORITIES,
    ExtractionResult,
    Fallback,
    NoteDraft,
    Parsed,
    fallback_draft,
)
from voicenotes.infrastructure.ai.openai_client import get_openai

_log = logging.getLogger("voicenotes.analyze")

DRAFT_KEYS = ("title", "category", "content", "priority")

SYSTEM_PROMPT = (
    "You are an assistant for a site manager. From the transcription of a voice note, "
    "extract a concise title, a category among [" + ", ".join(CATEGORIES) + "], "
    "a structured content and a priority (" + "|".join(PRIORITIES) + "). "
    "Answer only with a JSON object with the keys: title, category, content, priority."
)


def parse_reply(reply: Any, text: str) -> ExtractionResult:
    """Strict decoding of the model reply; anything unusable falls back."""
    try:
        data = json.loads(reply)
    except (TypeError, ValueError) as e:
        return Fallback(fallback_draft(text), reason=f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return Fallback(fallback_draft(text), reason="reply is not an object")
    missing = [k for k in DRAFT_KEYS if k not in data]
    if missing:
        return Fallback(fallback_draft(text), reason=f"missing keys: {', '.join(missing)}")
    try:
        draft = NoteDraft.model_validate({k: data[k] for k in DRAFT_KEYS})
    except ValidationError as e:
        return Fallback(fallback_draft(text), reason=f"invalid fields: {e.error_count()} error(s)")
    return Parsed(draft)


def _complete(text: str) -> str:
    oa = get_openai()
    if oa is None:
        raise ExtractionFailed("Analyze failed: OpenAI API key not configured")
    _log.info("Calling OpenAI chat with transcription: %s", text[:100])
    try:
        chat = oa.chat.completions.create(
            model=settings.openai_extraction_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Transcription: {text}"},
            ],
            max_tokens=settings.extraction_max_tokens,
        )
    except OpenAIError as e:
        _log.error("Analyze error: %s", e)
        raise ExtractionFailed(f"Analyze failed: {e}", detail=str(e)) from e
    choices = getattr(chat, "choices", None) or []
    reply = (choices[0].message.content if choices else None) or ""
    _log.info("OpenAI reply: %s", reply)
    return reply


def analyze(transcription: str) -> ExtractionResult:
    """Extracts a draft note from a transcription.

    Raises `InvalidInput` (no remote call) for empty text and `ExtractionFailed`
    when the model cannot be reached.
    """
    text = transcription if isinstance(transcription, str) else ""
    if not text.strip():
        raise InvalidInput("transcription required")
    result = parse_reply(_complete(text), text)
    if isinstance(result, Fallback):
        _log.warning("Failed to parse model reply, using fallback (%s)", result.reason)
    return result
