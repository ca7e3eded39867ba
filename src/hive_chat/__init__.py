"""
hive-chat — rich-content chat client for text-only messaging backends.

Attachments, voice notes and locations travel inside the message text as a
small envelope grammar; blobs live in a content-addressed store.
"""

from hive_chat.client import AsyncHiveChat, HiveChat
from hive_chat.codec import decode, encode_file, encode_location, encode_voice, human_readable_size
from hive_chat.composer import Composer, ComposerState, SelectedFile
from hive_chat.capture.session import CaptureSession, CaptureState, format_time
from hive_chat.config import HiveConfig, load_config
from hive_chat.errors import (
    CaptureError,
    ComposerBusyError,
    DeviceNotFoundError,
    FormatUnsupportedError,
    HiveChatError,
    PermissionDeniedError,
    SendFailedError,
    SizeLimitExceededError,
    UploadFailedError,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncHiveChat",
    "HiveChat",
    "HiveConfig",
    "load_config",
    "Composer",
    "ComposerState",
    "SelectedFile",
    "CaptureSession",
    "CaptureState",
    "format_time",
    "decode",
    "encode_file",
    "encode_voice",
    "encode_location",
    "human_readable_size",
    "HiveChatError",
    "CaptureError",
    "PermissionDeniedError",
    "DeviceNotFoundError",
    "FormatUnsupportedError",
    "SizeLimitExceededError",
    "UploadFailedError",
    "SendFailedError",
    "ComposerBusyError",
]
