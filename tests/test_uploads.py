"""Transient upload artifacts."""
import io
import re
from types import SimpleNamespace

import pytest

from voicenotes.infrastructure.storage import uploads


class BrokenStream(io.RawIOBase):
    def __init__(self):
        self.calls = 0

    def readable(self):
        return True

    def read(self, size=-1):
        self.calls += 1
        if self.calls == 1:
            return b"first-chunk"
        raise OSError("connection reset")


def test_artifact_name_keeps_extension():
    assert re.fullmatch(r"\d+-[0-9a-z]{6}\.ogg", uploads.artifact_name("memo.ogg"))
    assert uploads.artifact_name(None).endswith(".webm")


def test_save_upload_writes_file():
    path = uploads.save_upload(SimpleNamespace(filename="memo.webm", file=io.BytesIO(b"audio")))

    try:
        assert path.read_bytes() == b"audio"
        assert uploads.public_path(path) == f"/uploads/{path.name}"
    finally:
        uploads.discard(path)


def test_failed_copy_leaves_no_partial_file():
    before = sorted(uploads.uploads_dir().iterdir())

    with pytest.raises(OSError):
        uploads.save_upload(SimpleNamespace(filename="memo.webm", file=BrokenStream()))

    assert sorted(uploads.uploads_dir().iterdir()) == before


def test_discard_missing_file_is_silent(tmp_path):
    uploads.discard(tmp_path / "gone.webm")
