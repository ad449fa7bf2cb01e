"""Domain error taxonomy shared by the server and the client.

Each error knows the HTTP status it maps to; the API layer turns it into an
`{"error": ...}` payload and the client layer raises it from transport failures.
"""
from typing import Optional


class VoiceNotesError(Exception):
    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_payload(self) -> dict:
        body = {"error": self.message}
        if self.detail:
            body["detail"] = self.detail
        return body


class InputMissing(VoiceNotesError):
    """A required field is absent or empty."""
    status_code = 400


class InvalidInput(InputMissing):
    """Input is present but unusable (empty text, value outside an enumeration)."""


class UpstreamFailure(VoiceNotesError):
    """Remote transcription/extraction service failed or was unreachable. Never retried."""
    status_code = 500


class TranscriptionFailed(UpstreamFailure):
    pass


class ExtractionFailed(UpstreamFailure):
    pass


class StoreFailure(VoiceNotesError):
    """Persistence operation failed; no retry, no partial-state repair."""
    status_code = 500


class NoteNotFound(StoreFailure):
    status_code = 404


class DeviceAccessDenied(VoiceNotesError):
    """Microphone unavailable (permission denied, no device)."""
    status_code = 503


class PipelineBusy(VoiceNotesError):
    """A capture is already in flight, or the requested transition is not allowed now."""
    status_code = 409
