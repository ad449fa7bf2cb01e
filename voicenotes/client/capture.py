"""Microphone capture.

`Recorder.start()` acquires the input device and returns a `CaptureHandle`;
`handle.stop()` releases the device and resolves a future with the recording.
`handle.abandon()` releases the device and cancels the future.
"""
from __future__ import annotations

import io
import logging
import threading
import wave
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional, Protocol, Union

from voicenotes.core.errors import DeviceAccessDenied

_log = logging.getLogger("voicenotes.client")


@dataclass(frozen=True)
class AudioBlob:
    data: bytes
    filename: str = "note.wav"
    content_type: str = "audio/wav"


class CaptureHandle(Protocol):
    def stop(self) -> "Future[AudioBlob]":
        ...

    def abandon(self) -> None:
        ...


class Recorder(Protocol):
    def start(self) -> CaptureHandle:
        """Raises DeviceAccessDenied when no input device can be opened."""
        ...


def encode_wav(frames: bytes, samplerate: int, channels: int, sample_width: int = 2) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(samplerate)
        wf.writeframes(frames)
    return buf.getvalue()


class _StreamCapture:
    """One recording on an open sounddevice input stream."""

    def __init__(self, samplerate: int, channels: int) -> None:
        self._samplerate = samplerate
        self._channels = channels
        self._chunks: List[bytes] = []
        self._lock = threading.Lock()
        self._future: "Future[AudioBlob]" = Future()
        self._closed = False
        self.stream = None

    def callback(self, indata, _frames, _time, status) -> None:
        if status:
            _log.debug("Input status: %s", status)
        with self._lock:
            self._chunks.append(indata.tobytes())

    def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.stream.stop()
        finally:
            self.stream.close()

    def stop(self) -> "Future[AudioBlob]":
        if self._future.done():
            return self._future
        try:
            self._release()
            with self._lock:
                frames = b"".join(self._chunks)
            self._future.set_result(AudioBlob(encode_wav(frames, self._samplerate, self._channels)))
        except Exception as e:  # surfaced through the future
            self._future.set_exception(e)
        return self._future

    def abandon(self) -> None:
        try:
            self._release()
        finally:
            self._future.cancel()


class SoundDeviceRecorder:
    """Default-microphone recorder backed by `sounddevice` (16-bit PCM, WAV container)."""

    def __init__(self, samplerate: int = 16000, channels: int = 1, device: Optional[Union[int, str]] = None) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.device = device

    def start(self) -> _StreamCapture:
        try:
            import sounddevice as sd
        except OSError as e:  # PortAudio library missing
            raise DeviceAccessDenied("Audio input unavailable", detail=str(e)) from e

        capture = _StreamCapture(self.samplerate, self.channels)
        try:
            stream = sd.InputStream(
                samplerate=self.samplerate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                callback=capture.callback,
            )
            try:
                stream.start()
            except sd.PortAudioError:
                stream.close()
                raise
        except (sd.PortAudioError, ValueError) as e:
            _log.error("Microphone inaccessible: %s", e)
            raise DeviceAccessDenied("Cannot access the microphone. Check permissions.", detail=str(e)) from e
        capture.stream = stream
        return capture
