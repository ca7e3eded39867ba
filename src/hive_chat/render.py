"""
Renderer decode path — decide how each inbound message is displayed.
"""

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Protocol

from pydantic import BaseModel

from hive_chat.codec import DEFAULT_FILE_CAPTION, DEFAULT_VOICE_CAPTION, decode
from hive_chat.errors import UnsupportedAttachmentError
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
from hive_chat.models.message import Message
from hive_chat.names import NameResolver, format_address


class BlobSource(Protocol):
    async def download(self, blob_id: str) -> bytes: ...

    def url_for(self, blob_id: str) -> str: ...


class CardKind(str, Enum):
    TEXT = "text"
    FILE = "file"
    VOICE = "voice"
    LOCATION = "location"


class MessageView(BaseModel):
    sender: str
    sender_label: str
    is_own: bool
    created_at_ms: int
    timestamp: str
    card: CardKind
    content: RichContent

    @property
    def visible_caption(self) -> Optional[str]:
        """Caption to show under an attachment; default captions are hidden."""
        caption = getattr(self.content, "caption", None)
        if not caption or caption in (DEFAULT_FILE_CAPTION, DEFAULT_VOICE_CAPTION):
            return None
        return caption


def format_timestamp(created_at_ms: int) -> str:
    return datetime.fromtimestamp(created_at_ms / 1000).strftime("%Y-%m-%d %H:%M")


def card_for(content: RichContent) -> CardKind:
    if isinstance(content, VoiceRef):
        return CardKind.VOICE
    if isinstance(content, LocationRef):
        return CardKind.LOCATION
    if isinstance(content, PlainText):
        return CardKind.TEXT
    return CardKind.FILE


def render_message(
    message: Message,
    own_address: Optional[str] = None,
    names: Optional[NameResolver] = None,
) -> MessageView:
    content = decode(message.text)
    is_own = own_address is not None and message.sender == own_address
    if is_own:
        label = "You"
    else:
        label = (names.cached_name(message.sender) if names else None) or format_address(message.sender)
    return MessageView(
        sender=message.sender,
        sender_label=label,
        is_own=is_own,
        created_at_ms=message.created_at_ms,
        timestamp=format_timestamp(message.created_at_ms),
        card=card_for(content),
        content=content,
    )


async def resolve_senders(messages: Iterable[Message], names: NameResolver) -> None:
    """Warm the resolver cache so render_message() can show registered names."""
    for sender in {m.sender for m in messages}:
        await names.get_address_name(sender)


async def fetch_attachment(content: RichContent, blob_store: BlobSource) -> bytes:
    """Bytes behind an attachment card, whichever envelope generation it came from."""
    if isinstance(content, (FileRef, VoiceRef)):
        return await blob_store.download(content.blob_id)
    if isinstance(content, (LegacyBase64Ref, LegacyNoSizeRef)):
        data = content.base64_data
        if "," in data:
            data = data.split(",", 1)[1]
        try:
            return base64.b64decode(data + "=" * (-len(data) % 4))
        except (binascii.Error, ValueError) as e:
            raise UnsupportedAttachmentError(f"Attachment data is corrupt: {e}") from e
    if isinstance(content, IndexedDbRef):
        raise UnsupportedAttachmentError()
    raise UnsupportedAttachmentError("Message has no attachment.")
