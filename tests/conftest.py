"""In-memory stand-ins for the capture platform, blob store and messaging backend."""

import asyncio
import hashlib
from typing import Optional

import pytest

from hive_chat.errors import UploadFailedError
from hive_chat.models.message import InputDevice, Message, UploadedBlob


class FakeStream:
    def __init__(self, device_id: Optional[str]):
        self.device_id = device_id
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeRecorder:
    def __init__(self, stream: FakeStream, mime_type: str):
        self.stream = stream
        self.mime_type = mime_type
        self.on_data = None
        self.on_error = None
        self.paused = False
        self.started = False
        self.stopped = False

    def start(self, timeslice_ms, on_data, on_error=None) -> None:
        self.timeslice_ms = timeslice_ms
        self.on_data = on_data
        self.on_error = on_error
        self.started = True

    def emit(self, chunk: bytes) -> None:
        self.on_data(chunk)

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def stop(self) -> None:
        if self.started and not self.stopped:
            self.on_data(b"tail")
        self.stopped = True

    def build_blob(self, chunks) -> bytes:
        return b"".join(chunks)


class FakePlatform:
    def __init__(self, devices=None, supported=("audio/webm;codecs=opus",), open_error: Optional[Exception] = None):
        self.devices = devices if devices is not None else [
            InputDevice(id="virt", label="BlackHole Virtual Device"),
            InputDevice(id="mic", label="MacBook Pro Microphone"),
        ]
        self.supported = set(supported)
        self.open_error = open_error
        self.gate: Optional[asyncio.Event] = None
        self.streams: list[FakeStream] = []
        self.recorders: list[FakeRecorder] = []

    @property
    def open_streams(self) -> list[FakeStream]:
        return [s for s in self.streams if not s.closed]

    async def list_input_devices(self):
        return list(self.devices)

    async def open_stream(self, device_id=None):
        if self.gate is not None:
            await self.gate.wait()
        if self.open_error is not None:
            raise self.open_error
        stream = FakeStream(device_id)
        self.streams.append(stream)
        return stream

    def is_format_supported(self, mime_type: str) -> bool:
        return mime_type in self.supported

    def create_recorder(self, stream, mime_type):
        recorder = FakeRecorder(stream, mime_type)
        self.recorders.append(recorder)
        return recorder


class FakeBlobStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: list[tuple[bytes, str, str]] = []
        self.blobs: dict[str, bytes] = {}

    async def upload(self, data: bytes, mime_type: str, file_name: str = "blob") -> UploadedBlob:
        self.uploads.append((data, mime_type, file_name))
        if self.fail:
            raise UploadFailedError("Upload failed: 503 Service Unavailable")
        blob_id = hashlib.sha256(data).hexdigest()[:43]
        self.blobs[blob_id] = data
        return UploadedBlob(blob_id=blob_id, file_name=file_name, file_size=len(data), mime_type=mime_type)

    async def download(self, blob_id: str) -> bytes:
        return self.blobs[blob_id]

    def url_for(self, blob_id: str) -> str:
        return f"https://aggregator.test/v1/blobs/{blob_id}"

    async def close(self) -> None:
        pass


class FakeMessaging:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []
        self.last_error: Optional[str] = None
        self._clock = 1_700_000_000_000

    async def send_message(self, channel_id: str, text: str) -> Optional[Message]:
        self.sent.append((channel_id, text))
        if self.fail:
            self.last_error = "Channel is not writable"
            return None
        self.last_error = None
        self._clock += 1
        return Message(sender="0xme", created_at_ms=self._clock, text=text)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def messaging():
    return FakeMessaging()
