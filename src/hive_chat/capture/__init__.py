from hive_chat.capture.devices import select_default_device
from hive_chat.capture.platform import MediaCapturePlatform, SoundDevicePlatform
from hive_chat.capture.session import CaptureSession, CaptureState, FinishedRecording, format_time

__all__ = [
    "CaptureSession",
    "CaptureState",
    "FinishedRecording",
    "MediaCapturePlatform",
    "SoundDevicePlatform",
    "format_time",
    "select_default_device",
]
