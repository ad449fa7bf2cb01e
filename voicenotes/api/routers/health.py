"""Health and debug (no auth), typed and stable outputs."""
from fastapi import APIRouter, status

from voicenotes.core.config import settings
from voicenotes.infrastructure.db.mongo import db_ready
from voicenotes.api.schemas.health import PingOut, HealthOut, DebugStatusOut


router = APIRouter(tags=["Health"])  # no prefix to keep paths stable


@router.get("/ping", response_model=PingOut, summary="Basic ping")
def ping() -> PingOut:
    return PingOut(message="pong")


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthOut, summary="Basic health")
def health() -> HealthOut:
    return HealthOut(ok=True, db=db_ready())


@router.get("/_debug/status", status_code=status.HTTP_200_OK, response_model=DebugStatusOut, summary="Configuration status")
def debug_status() -> DebugStatusOut:
    return DebugStatusOut(
        app_name=settings.app_name,
        api_prefix=settings.api_prefix,
        openai_configured=settings.openai_configured,
        transcription_model=settings.openai_transcription_model,
        extraction_model=settings.openai_extraction_model,
        mongo_db=settings.mongo_db,
        mongo_ready=db_ready(),
    )
