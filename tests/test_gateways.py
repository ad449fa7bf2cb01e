from unittest.mock import MagicMock

import pytest
import requests

from voicenotes.client.capture import AudioBlob
from voicenotes.client.gateways import ExtractionGateway, TranscriptionGateway
from voicenotes.core.errors import ExtractionFailed, InvalidInput, TranscriptionFailed
from voicenotes.domain.notes import Fallback, Parsed


def response(status=200, body=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    resp.json.return_value = body
    resp.text = text
    return resp


def test_transcribe_uploads_multipart_file():
    session = MagicMock()
    session.post.return_value = response(body={"transcription": "hello there", "audioPath": "/uploads/x.wav"})
    gateway = TranscriptionGateway("http://notes.local:3001", session=session)

    text = gateway.transcribe(AudioBlob(b"RIFF....", filename="memo.wav"))

    assert text == "hello there"
    assert session.post.call_args.args[0] == "http://notes.local:3001/api/transcribe"
    assert session.post.call_args.kwargs["files"] == {"file": ("memo.wav", b"RIFF....", "audio/wav")}


def test_transcribe_empty_result_is_empty_string():
    session = MagicMock()
    session.post.return_value = response(body={"transcription": "", "audioPath": "/uploads/x.wav"})

    assert TranscriptionGateway("http://h", session=session).transcribe(AudioBlob(b"")) == ""


def test_transcribe_error_status_raises():
    session = MagicMock()
    session.post.return_value = response(status=500, text='{"error": "Transcription failed"}')

    with pytest.raises(TranscriptionFailed):
        TranscriptionGateway("http://h", session=session).transcribe(AudioBlob(b"x"))


def test_extract_parses_draft():
    session = MagicMock()
    session.post.return_value = response(
        body={"title": "Call Bob", "category": "task", "content": "Call Bob about the quote", "priority": "normal"}
    )

    result = ExtractionGateway("http://h", session=session).extract("call bob about the quote")

    assert isinstance(result, Parsed)
    assert result.draft.title == "Call Bob"
    assert session.post.call_args.kwargs["json"] == {"transcription": "call bob about the quote"}


def test_extract_unexpected_shape_falls_back():
    session = MagicMock()
    session.post.return_value = response(body={"title": "x"})

    result = ExtractionGateway("http://h", session=session).extract("something to do")

    assert isinstance(result, Fallback)
    assert result.draft.content == "something to do"


def test_extract_empty_text_makes_no_call():
    session = MagicMock()

    with pytest.raises(InvalidInput):
        ExtractionGateway("http://h", session=session).extract("  ")
    session.post.assert_not_called()


def test_extract_transport_error_raises():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("slow")

    with pytest.raises(ExtractionFailed):
        ExtractionGateway("http://h", session=session).extract("text")
