from hive_chat.models.content import (
    FileRef,
    IndexedDbRef,
    LegacyBase64Ref,
    LegacyNoSizeRef,
    LocationRef,
    PlainText,
    RichContent,
    VoiceRef,
)
from hive_chat.models.message import InputDevice, Message, MessagePage, Position, UploadedBlob

__all__ = [
    "FileRef",
    "IndexedDbRef",
    "LegacyBase64Ref",
    "LegacyNoSizeRef",
    "LocationRef",
    "PlainText",
    "RichContent",
    "VoiceRef",
    "InputDevice",
    "Message",
    "MessagePage",
    "Position",
    "UploadedBlob",
]
