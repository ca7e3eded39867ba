"""
Media capture platform — the device layer under a CaptureSession.

The session only talks to the protocols below. SoundDevicePlatform is the
shipped implementation (PortAudio via sounddevice); tests substitute an
in-memory platform.
"""

import asyncio
import io
import logging
import threading
import wave
from typing import Callable, Optional, Protocol, Sequence

from hive_chat.errors import CaptureError, DeviceNotFoundError, FormatUnsupportedError
from hive_chat.models.message import InputDevice

logger = logging.getLogger("hive_chat.capture.platform")

DataCallback = Callable[[bytes], None]
ErrorCallback = Callable[[Exception], None]


class MediaStream(Protocol):
    device_id: Optional[str]

    def close(self) -> None: ...


class MediaRecorder(Protocol):
    mime_type: str

    def start(self, timeslice_ms: int, on_data: DataCallback, on_error: Optional[ErrorCallback] = None) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def stop(self) -> None:
        """Deliver any buffered audio through on_data, then stop."""

    def build_blob(self, chunks: Sequence[bytes]) -> bytes:
        """Join recorded chunks into one playable payload."""


class MediaCapturePlatform(Protocol):
    async def list_input_devices(self) -> list[InputDevice]: ...

    async def open_stream(self, device_id: Optional[str] = None) -> MediaStream: ...

    def is_format_supported(self, mime_type: str) -> bool: ...

    def create_recorder(self, stream: MediaStream, mime_type: str) -> MediaRecorder: ...


# ── PortAudio implementation ────────────────────────────────────────────────

def _import_sounddevice():
    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:  # pragma: no cover - environment-dependent
        raise FormatUnsupportedError("sounddevice is required for recording.") from exc
    return sd


def _classify_portaudio_error(exc: Exception) -> CaptureError:
    text = str(exc).lower()
    if "invalid device" in text or "device unavailable" in text or "no input device" in text:
        return DeviceNotFoundError()
    if "sample rate" in text or "sample format" in text or "channel count" in text:
        return FormatUnsupportedError(f"Audio format not supported by device: {exc}")
    return CaptureError(f"Recording error: {exc}")


class SoundDeviceStream:
    """An open PortAudio input stream. Audio is dropped until a recorder attaches."""

    def __init__(self, raw_stream, device_id: Optional[str], sample_rate_hz: int, channels: int):
        self._raw = raw_stream
        self.device_id = device_id
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels
        self._sink: Optional[Callable[[bytes], None]] = None
        self._closed = False

    def attach(self, sink: Optional[Callable[[bytes], None]]) -> None:
        self._sink = sink

    def _callback(self, indata, _frames, _time, status) -> None:
        if status:
            return
        sink = self._sink
        if sink is not None:
            sink(bytes(indata))

    @property
    def active(self) -> bool:
        return not self._closed and bool(self._raw.active)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sink = None
        try:
            self._raw.stop()
        finally:
            self._raw.close()
        logger.info("Released input device %s", self.device_id)


class WavRecorder:
    """Accumulates 16-bit PCM from a SoundDeviceStream and flushes it once per timeslice."""

    mime_type = "audio/wav"

    def __init__(self, stream: SoundDeviceStream):
        self._stream = stream
        self._lock = threading.Lock()
        self._pending = bytearray()
        self._paused = False
        self._handle: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._on_data: Optional[DataCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._timeslice_s = 1.0

    def start(self, timeslice_ms: int, on_data: DataCallback, on_error: Optional[ErrorCallback] = None) -> None:
        self._loop = asyncio.get_running_loop()
        self._on_data = on_data
        self._on_error = on_error
        self._timeslice_s = timeslice_ms / 1000
        self._stream.attach(self._collect)
        self._schedule()

    def _collect(self, data: bytes) -> None:
        # PortAudio callback thread
        if self._paused:
            return
        with self._lock:
            self._pending.extend(data)

    def _schedule(self) -> None:
        assert self._loop is not None
        self._handle = self._loop.call_later(self._timeslice_s, self._tick)

    def _tick(self) -> None:
        self._flush()
        if not self._stream.active:
            if self._on_error is not None:
                self._on_error(CaptureError("Recording error: input device stopped unexpectedly"))
            return
        self._schedule()

    def _flush(self) -> None:
        with self._lock:
            chunk = bytes(self._pending)
            self._pending.clear()
        if chunk and self._on_data is not None:
            self._on_data(chunk)

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._stream.attach(None)
        self._flush()

    def build_blob(self, chunks: Sequence[bytes]) -> bytes:
        buf = io.BytesIO()
        with wave.open(buf, "wb") as handle:
            handle.setnchannels(self._stream.channels)
            handle.setsampwidth(2)
            handle.setframerate(self._stream.sample_rate_hz)
            handle.writeframes(b"".join(chunks))
        return buf.getvalue()


class SoundDevicePlatform:
    SUPPORTED_FORMATS = ("audio/wav",)

    def __init__(self, sample_rate_hz: int = 48000, channels: int = 1):
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels

    async def list_input_devices(self) -> list[InputDevice]:
        sd = _import_sounddevice()
        devices = sd.query_devices()
        return [
            InputDevice(id=str(index), label=device.get("name", ""))
            for index, device in enumerate(devices)
            if device.get("max_input_channels", 0) > 0
        ]

    async def open_stream(self, device_id: Optional[str] = None) -> SoundDeviceStream:
        sd = _import_sounddevice()
        holder: dict[str, SoundDeviceStream] = {}

        def _callback(indata, frames, time_info, status) -> None:
            stream = holder.get("stream")
            if stream is not None:
                stream._callback(indata, frames, time_info, status)

        def _open():
            raw = sd.RawInputStream(
                samplerate=self.sample_rate_hz,
                channels=self.channels,
                dtype="int16",
                device=int(device_id) if device_id is not None else None,
                callback=_callback,
            )
            raw.start()
            return raw

        try:
            raw = await asyncio.get_running_loop().run_in_executor(None, _open)
        except (sd.PortAudioError, ValueError) as exc:
            raise _classify_portaudio_error(exc) from exc

        stream = SoundDeviceStream(raw, device_id, self.sample_rate_hz, self.channels)
        holder["stream"] = stream
        logger.info("Opened input device %s at %d Hz", device_id or "default", self.sample_rate_hz)
        return stream

    def is_format_supported(self, mime_type: str) -> bool:
        return mime_type in self.SUPPORTED_FORMATS

    def create_recorder(self, stream: MediaStream, mime_type: str) -> WavRecorder:
        if not isinstance(stream, SoundDeviceStream) or not self.is_format_supported(mime_type):
            raise FormatUnsupportedError(f"Cannot record {mime_type} on this platform.")
        return WavRecorder(stream)
