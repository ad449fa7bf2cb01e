"""
Endpoints for the capture pipeline: audio transcription and note analysis.
"""
from typing import Optional

from fastapi import APIRouter, File, UploadFile

from voicenotes.api.schemas.ai import AnalyzeIn, AnalyzeOut, TranscribeOut
from voicenotes.core.errors import InputMissing
from voicenotes.infrastructure.storage import uploads
from voicenotes.services import extraction_service, transcription_service

router = APIRouter(tags=["Capture"])


@router.post(
    "/transcribe",
    response_model=TranscribeOut,
    summary="Transcribe audio",
    description="Multipart upload (field `file`). The stored artifact is removed right after the call.",
)
def transcribe(file: Optional[UploadFile] = File(default=None)) -> TranscribeOut:
    if file is None:
        raise InputMissing("No file uploaded")
    path = uploads.save_upload(file)
    text = transcription_service.transcribe_file(path)
    return TranscribeOut(transcription=text, audio_path=uploads.public_path(path))


@router.post(
    "/analyze-note",
    response_model=AnalyzeOut,
    summary="Extract a structured note",
    description="Always answers the four keys; an unparseable model reply falls back to defaults.",
)
def analyze_note(payload: Optional[AnalyzeIn] = None) -> AnalyzeOut:
    result = extraction_service.analyze((payload.transcription if payload else None) or "")
    return AnalyzeOut(**result.draft.model_dump())
