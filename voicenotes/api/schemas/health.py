"""Schemas for health/debug endpoints."""
from pydantic import BaseModel


class PingOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    ok: bool
    db: bool


class DebugStatusOut(BaseModel):
    app_name: str
    api_prefix: str
    openai_configured: bool
    transcription_model: str
    extraction_model: str
    mongo_db: str
    mongo_ready: bool
