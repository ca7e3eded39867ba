import asyncio
import io
import wave

import pytest

from hive_chat.capture.platform import SoundDevicePlatform, SoundDeviceStream, WavRecorder, _classify_portaudio_error
from hive_chat.errors import CaptureError, DeviceNotFoundError, FormatUnsupportedError


class FakeRawStream:
    def __init__(self):
        self.active = True
        self.stopped = False
        self.closed = False

    def stop(self):
        self.stopped = True
        self.active = False

    def close(self):
        self.closed = True


def make_stream():
    raw = FakeRawStream()
    return raw, SoundDeviceStream(raw, "3", sample_rate_hz=16000, channels=1)


@pytest.mark.asyncio
async def test_recorder_flushes_per_timeslice():
    raw, stream = make_stream()
    chunks = []
    recorder = WavRecorder(stream)
    recorder.start(50, chunks.append)

    stream._callback(b"\x01\x00" * 4, 4, None, None)
    await asyncio.sleep(0.12)
    assert chunks == [b"\x01\x00" * 4]

    recorder.pause()
    stream._callback(b"\x02\x00", 1, None, None)
    recorder.resume()
    stream._callback(b"\x03\x00", 1, None, None)
    recorder.stop()
    assert chunks[-1] == b"\x03\x00"

    # audio after stop is dropped
    stream._callback(b"\x04\x00", 1, None, None)
    assert b"\x04\x00" not in b"".join(chunks)
    stream.close()
    assert raw.stopped and raw.closed


@pytest.mark.asyncio
async def test_recorder_reports_dead_stream():
    raw, stream = make_stream()
    errors = []
    recorder = WavRecorder(stream)
    recorder.start(20, lambda chunk: None, errors.append)
    raw.active = False
    await asyncio.sleep(0.06)
    assert len(errors) == 1
    assert isinstance(errors[0], CaptureError)
    recorder.stop()


def test_build_blob_is_wav():
    _, stream = make_stream()
    blob = WavRecorder(stream).build_blob([b"\x00\x00" * 10, b"\x01\x00" * 6])
    with wave.open(io.BytesIO(blob), "rb") as handle:
        assert handle.getnchannels() == 1
        assert handle.getframerate() == 16000
        assert handle.getnframes() == 16


def test_only_wav_is_supported():
    platform = SoundDevicePlatform()
    assert platform.is_format_supported("audio/wav")
    assert not platform.is_format_supported("audio/webm;codecs=opus")


@pytest.mark.parametrize("message,kind", [
    ("Error querying device -1: Invalid device", DeviceNotFoundError),
    ("Invalid sample rate [PaErrorCode -9997]", FormatUnsupportedError),
    ("Unanticipated host error", CaptureError),
])
def test_classify_portaudio_error(message, kind):
    assert type(_classify_portaudio_error(RuntimeError(message))) is kind
