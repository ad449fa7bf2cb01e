# voicenotes/infrastructure/ai/openai_client.py
from typing import Optional
from openai import OpenAI
from voicenotes.core.config import settings

_cached: Optional[OpenAI] = None


def get_openai() -> Optional[OpenAI]:
    """Shared OpenAI client, built on first use; None while no API key is set."""
    global _cached
    if _cached is None and settings.openai_configured:
        # No retries: a failed upstream call surfaces to the user who re-initiates it
        _cached = OpenAI(api_key=settings.openai_api_key, max_retries=0)
    return _cached


def set_openai(client: Optional[OpenAI]) -> None:
    """Replaces the cached client (tests inject fakes here)."""
    global _cached
    _cached = client
