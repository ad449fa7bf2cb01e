"""Transient storage for uploaded audio artifacts.

Files land in `settings.uploads_dir` as `<epoch-ms>-<6 base36 chars><ext>` and
live only for the duration of one transcription call.
"""
from __future__ import annotations

import logging
import os
import random
import shutil
import string
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from voicenotes.core.config import settings
from voicenotes.core.time import epoch_ms

_log = logging.getLogger("voicenotes.uploads")

DEFAULT_EXT = ".webm"
PUBLIC_PREFIX = "/uploads"
_ALPHABET = string.digits + string.ascii_lowercase


def uploads_dir() -> Path:
    path = Path(settings.uploads_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_name(original: Optional[str]) -> str:
    ext = os.path.splitext(original or "")[1] or DEFAULT_EXT
    suffix = "".join(random.choices(_ALPHABET, k=6))
    return f"{epoch_ms()}-{suffix}{ext}"


def save_upload(file: UploadFile) -> Path:
    """Copies the upload to disk and returns its path; a partial copy is removed."""
    target = uploads_dir() / artifact_name(file.filename)
    try:
        with target.open("wb") as out:
            shutil.copyfileobj(file.file, out, 256 * 1024)
    except OSError:
        discard(target)
        raise
    return target


def public_path(path: Path) -> str:
    return f"{PUBLIC_PREFIX}/{path.name}"


def discard(path: Path) -> None:
    """Fire-and-forget removal; a failure is logged, never raised."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        _log.error("cleanup error path=%s: %s", path, e)
