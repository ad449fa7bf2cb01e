"""Schemas for the transcription / analysis endpoints."""
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TranscribeOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transcription: str
    audio_path: str


class AnalyzeIn(BaseModel):
    # Optional so that a missing value answers 400 (InvalidInput), not 422
    transcription: Optional[str] = None


class AnalyzeOut(BaseModel):
    title: str
    category: str
    content: str
    priority: str
