"""
Voice capture session — one microphone recording attempt.

States:
    IDLE -> REQUESTING -> RECORDING <-> PAUSED -> STOPPED
    REQUESTING / RECORDING -> ERROR
    any -> IDLE via clear()

Every acquired handle (device stream, recorder, tick task) is registered on a
single ExitStack, so stop(), failure and clear() all release through the same
path. clear() may run while open_stream() is still pending; the late stream
is closed as soon as it arrives.
"""

import asyncio
import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from hive_chat.capture.devices import select_default_device
from hive_chat.capture.platform import MediaCapturePlatform, MediaRecorder, MediaStream
from hive_chat.errors import CaptureError, FormatUnsupportedError, PermissionDeniedError
from hive_chat.models.message import InputDevice

logger = logging.getLogger("hive_chat.capture.session")

MIME_PREFERENCES = ("audio/webm;codecs=opus", "audio/webm", "audio/mp4", "audio/wav")
TIMESLICE_MS = 1000
TICK_MS = 100

MIME_EXTENSIONS = {
    "audio/webm;codecs=opus": "webm",
    "audio/webm": "webm",
    "audio/mp4": "m4a",
    "audio/wav": "wav",
}


class CaptureState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass(frozen=True)
class FinishedRecording:
    data: bytes
    mime_type: str
    elapsed_ms: int

    @property
    def duration_label(self) -> str:
        return format_time(self.elapsed_ms)

    @property
    def extension(self) -> str:
        return MIME_EXTENSIONS.get(self.mime_type, "bin")


def format_time(elapsed_ms: int) -> str:
    """``m:ss.d`` — minutes, zero-padded seconds, tenths."""
    tenths = int(elapsed_ms) // 100
    minutes, rest = divmod(tenths, 600)
    seconds, decis = divmod(rest, 10)
    return f"{minutes}:{seconds:02d}.{decis}"


def _classify(exc: Exception) -> CaptureError:
    if isinstance(exc, CaptureError):
        return exc
    if isinstance(exc, PermissionError):
        return PermissionDeniedError()
    return CaptureError(f"Recording error: {exc}")


class CaptureSession:
    def __init__(self, platform: MediaCapturePlatform, preferred_device: Optional[str] = None):
        self._platform = platform
        self._preferred_device = preferred_device

        self.state = CaptureState.IDLE
        self.devices: list[InputDevice] = []
        self.device_id: Optional[str] = None
        self.elapsed_ms = 0
        self.chunks: list[bytes] = []
        self.mime_type: Optional[str] = None
        self.finished_blob: Optional[bytes] = None
        self.finished_url: Optional[str] = None
        self.error: Optional[CaptureError] = None

        self._resources = contextlib.ExitStack()
        self._stream: Optional[MediaStream] = None
        self._recorder: Optional[MediaRecorder] = None
        self._ticker: Optional[asyncio.Task] = None
        self._preview_path: Optional[str] = None
        self._generation = 0

    # ── device selection ────────────────────────────────────────────────

    async def enumerate_devices(self) -> list[InputDevice]:
        """List inputs and pick a default. Only refreshes while IDLE."""
        if self.state is not CaptureState.IDLE:
            return list(self.devices)
        self.error = None
        try:
            # Opening a throwaway stream triggers the platform permission grant.
            probe = await self._platform.open_stream(None)
            probe.close()
            devices = await self._platform.list_input_devices()
        except Exception as exc:
            self.error = _classify(exc)
            logger.error("Failed to access audio devices: %s", exc)
            return []

        self.devices = devices
        logger.debug("Available audio devices: %s", [(d.id, d.label) for d in devices])
        chosen = select_default_device(devices, prefer_name=self._preferred_device)
        if chosen is not None:
            self.device_id = chosen.id
            logger.info("Selected input device: %s", chosen.label or chosen.id)
        return list(devices)

    def select_device(self, device_id: Optional[str]) -> None:
        self.device_id = device_id

    # ── lifecycle ───────────────────────────────────────────────────────

    async def start(self) -> None:
        """Begin a new recording. Failures land in ``error`` with state ERROR."""
        if self.state not in (CaptureState.IDLE, CaptureState.STOPPED, CaptureState.ERROR):
            return
        self._release()
        self._revoke_preview()
        self._generation += 1
        generation = self._generation

        self.error = None
        self.elapsed_ms = 0
        self.chunks = []
        self.mime_type = None
        self.finished_blob = None
        self.state = CaptureState.REQUESTING

        try:
            stream = await self._platform.open_stream(self.device_id)
        except Exception as exc:
            if generation == self._generation:
                self._fail(exc)
            return

        if generation != self._generation:
            # cleared or stopped while the device was being acquired
            stream.close()
            return

        self._stream = stream
        self._resources.callback(self._close_stream)
        try:
            mime_type = self._negotiate_format()
            recorder = self._platform.create_recorder(stream, mime_type)
            self._recorder = recorder
            self._resources.callback(self._stop_recorder)
            recorder.start(TIMESLICE_MS, self._on_data, self._on_recorder_error)
        except Exception as exc:
            self._fail(exc)
            return

        self.mime_type = mime_type
        self.state = CaptureState.RECORDING
        self._resources.callback(self._cancel_ticker)
        self._start_ticker()
        logger.info("Recording started (%s, device=%s)", mime_type, self.device_id or "default")

    def pause(self) -> None:
        if self.state is not CaptureState.RECORDING or self._recorder is None:
            return
        self._recorder.pause()
        self._cancel_ticker()
        self.state = CaptureState.PAUSED

    def resume(self) -> None:
        if self.state is not CaptureState.PAUSED or self._recorder is None:
            return
        self._recorder.resume()
        self._start_ticker()
        self.state = CaptureState.RECORDING

    def stop(self) -> Optional[bytes]:
        """Finalize the recording. Returns the blob, or None when not recording."""
        if self.state is CaptureState.REQUESTING:
            # the pending start() closes the stream when it arrives
            self._generation += 1
            self.state = CaptureState.IDLE
            return None
        if self.state not in (CaptureState.RECORDING, CaptureState.PAUSED) or self._recorder is None:
            return None
        self._cancel_ticker()
        recorder = self._recorder
        self._stop_recorder()
        blob = recorder.build_blob(self.chunks)
        self._release()

        self.finished_blob = blob
        self.finished_url = self._write_preview(blob)
        self.state = CaptureState.STOPPED
        logger.info("Recording stopped: %d chunks, %d bytes, %s", len(self.chunks), len(blob), format_time(self.elapsed_ms))
        return blob

    def clear(self) -> None:
        """Release everything and return to IDLE. Safe from any state."""
        self._generation += 1
        self._release()
        self._revoke_preview()
        self.state = CaptureState.IDLE
        self.elapsed_ms = 0
        self.chunks = []
        self.mime_type = None
        self.finished_blob = None
        self.error = None

    async def aclose(self) -> None:
        self.clear()

    async def __aenter__(self) -> "CaptureSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.clear()

    # ── derived state ───────────────────────────────────────────────────

    @property
    def holds_device(self) -> bool:
        return self._stream is not None

    @property
    def finished_recording(self) -> Optional[FinishedRecording]:
        if self.state is not CaptureState.STOPPED or self.finished_blob is None:
            return None
        return FinishedRecording(
            data=self.finished_blob,
            mime_type=self.mime_type or "application/octet-stream",
            elapsed_ms=self.elapsed_ms,
        )

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error else None

    def formatted_time(self) -> str:
        return format_time(self.elapsed_ms)

    # ── internals ───────────────────────────────────────────────────────

    def _negotiate_format(self) -> str:
        for mime_type in MIME_PREFERENCES:
            if self._platform.is_format_supported(mime_type):
                return mime_type
        raise FormatUnsupportedError()

    def _on_data(self, chunk: bytes) -> None:
        if chunk:
            self.chunks.append(chunk)

    def _on_recorder_error(self, exc: Exception) -> None:
        if self.state in (CaptureState.RECORDING, CaptureState.PAUSED):
            self._fail(exc)

    def _fail(self, exc: Exception) -> None:
        self.error = _classify(exc)
        logger.error("Recording failed: %s", self.error)
        self._release()
        self.state = CaptureState.ERROR

    def _start_ticker(self) -> None:
        self._ticker = asyncio.get_running_loop().create_task(self._tick())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(TICK_MS / 1000)
            self.elapsed_ms += TICK_MS

    def _cancel_ticker(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()

    def _stop_recorder(self) -> None:
        recorder, self._recorder = self._recorder, None
        if recorder is not None:
            recorder.stop()

    def _close_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()

    def _release(self) -> None:
        resources, self._resources = self._resources, contextlib.ExitStack()
        try:
            resources.close()
        except Exception as exc:
            logger.warning("Error while releasing capture resources: %s", exc)

    def _write_preview(self, blob: bytes) -> str:
        ext = MIME_EXTENSIONS.get(self.mime_type or "", "bin")
        fd, path = tempfile.mkstemp(prefix="hive-voice-", suffix=f".{ext}")
        with os.fdopen(fd, "wb") as handle:
            handle.write(blob)
        self._preview_path = path
        return Path(path).as_uri()

    def _revoke_preview(self) -> None:
        path, self._preview_path = self._preview_path, None
        self.finished_url = None
        if path:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(path)
