from types import SimpleNamespace

import pytest
from openai import OpenAIError

from voicenotes.core.errors import TranscriptionFailed
from voicenotes.services import transcription_service


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "1700000000000-abc123.webm"
    path.write_bytes(b"\x1aE\xdf\xa3fake-webm")
    return path


def test_returns_text_and_removes_artifact(fake_openai, artifact):
    fake_openai.audio.transcriptions.create.return_value = SimpleNamespace(text="Call the plumber")

    text = transcription_service.transcribe_file(artifact)

    assert text == "Call the plumber"
    assert not artifact.exists()
    assert fake_openai.audio.transcriptions.create.call_args.kwargs["model"] == "whisper-1"


def test_no_speech_returns_empty_string(fake_openai, artifact):
    fake_openai.audio.transcriptions.create.return_value = SimpleNamespace(text=None)

    assert transcription_service.transcribe_file(artifact) == ""
    assert not artifact.exists()


def test_upstream_failure_raises_and_still_removes_artifact(fake_openai, artifact):
    fake_openai.audio.transcriptions.create.side_effect = OpenAIError("invalid file format")

    with pytest.raises(TranscriptionFailed) as exc:
        transcription_service.transcribe_file(artifact)

    assert "invalid file format" in exc.value.message
    assert not artifact.exists()


def test_unconfigured_client_fails_and_removes_artifact(no_openai, artifact):
    with pytest.raises(TranscriptionFailed):
        transcription_service.transcribe_file(artifact)
    assert not artifact.exists()
