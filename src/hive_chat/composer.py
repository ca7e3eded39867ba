"""
Composer — turns one draft (typed text, a selected file, or a finished voice
recording) into exactly one outbound message.

Upload and send failures leave the draft intact so the user can retry.
"""

import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Union

from hive_chat.capture.session import CaptureSession, FinishedRecording
from hive_chat.codec import encode_file, encode_location, encode_voice, human_readable_size
from hive_chat.errors import (
    ComposerBusyError,
    EmptyDraftError,
    HiveChatError,
    SendFailedError,
    SizeLimitExceededError,
)
from hive_chat.location import DEFAULT_TIMEOUT_MS, GeolocationProvider, request_position, validate_coordinates
from hive_chat.models.message import Message, UploadedBlob

logger = logging.getLogger("hive_chat.composer")

MAX_FILE_BYTES = 10 * 1024 * 1024


class MessageSender(Protocol):
    last_error: Optional[str]

    async def send_message(self, channel_id: str, text: str) -> Optional[Message]: ...


class BlobUploader(Protocol):
    async def upload(self, data: bytes, mime_type: str, file_name: str = "blob") -> UploadedBlob: ...


class ComposerState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    SENDING = "sending"
    ERROR = "error"


@dataclass(frozen=True)
class SelectedFile:
    name: str
    data: bytes
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SelectedFile":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type or "application/octet-stream")


@dataclass(frozen=True)
class Draft:
    typed_text: str = ""
    selected_file: Optional[SelectedFile] = None
    recording: Optional[FinishedRecording] = None

    @property
    def is_empty(self) -> bool:
        return not self.typed_text.strip() and self.selected_file is None and self.recording is None


def voice_file_name(recording: FinishedRecording, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"voice-message-{stamp}.{recording.extension}"


class Composer:
    def __init__(
        self,
        channel_id: str,
        messaging: MessageSender,
        blob_store: BlobUploader,
        capture: Optional[CaptureSession] = None,
        max_file_bytes: int = MAX_FILE_BYTES,
    ):
        self.channel_id = channel_id
        self._messaging = messaging
        self._blob_store = blob_store
        self.capture = capture
        self.max_file_bytes = max_file_bytes

        self.typed_text = ""
        self.selected_file: Optional[SelectedFile] = None
        self.state = ComposerState.IDLE
        self.error: Optional[HiveChatError] = None
        self._location_in_flight = False

    # ── draft editing ───────────────────────────────────────────────────

    @property
    def draft(self) -> Draft:
        recording = self.capture.finished_recording if self.capture is not None else None
        return Draft(typed_text=self.typed_text, selected_file=self.selected_file, recording=recording)

    @property
    def busy(self) -> bool:
        return self.state in (ComposerState.UPLOADING, ComposerState.SENDING)

    def select_file(self, selected: SelectedFile) -> None:
        """Attach a file, rejecting oversize files before they reach the draft."""
        self.check_file_size(selected)
        self.selected_file = selected

    def remove_file(self) -> None:
        self.selected_file = None

    def check_file_size(self, selected: SelectedFile) -> None:
        if selected.size > self.max_file_bytes:
            raise SizeLimitExceededError(selected.size, self.max_file_bytes)

    # ── send ────────────────────────────────────────────────────────────

    async def send(self) -> Message:
        """Upload any attachment, encode the envelope and post it.

        Raises ComposerBusyError if a send is outstanding, EmptyDraftError for
        an empty draft, and SizeLimitExceededError / UploadFailedError /
        SendFailedError on failure, after recording the error on the composer.
        """
        if self.busy:
            raise ComposerBusyError()
        draft = self.draft
        if draft.is_empty:
            raise EmptyDraftError()

        self.error = None
        try:
            text = await self._build_text(draft)
            self.state = ComposerState.SENDING
            message = await self._messaging.send_message(self.channel_id, text)
            if message is None:
                raise SendFailedError(self._messaging.last_error or "Failed to send message.")
        except HiveChatError as e:
            self.state = ComposerState.ERROR
            self.error = e
            logger.warning("Send to %s failed (%s): %s", self.channel_id, e.code, e)
            raise
        except BaseException:
            self.state = ComposerState.ERROR
            raise

        self.typed_text = ""
        self.selected_file = None
        if draft.recording is not None and self.capture.finished_recording == draft.recording:
            self.capture.clear()
        self.state = ComposerState.IDLE
        logger.info("Sent message to %s (%d chars)", self.channel_id, len(text))
        return message

    async def _build_text(self, draft: Draft) -> str:
        if draft.recording is not None:
            recording = draft.recording
            self.state = ComposerState.UPLOADING
            blob = await self._blob_store.upload(recording.data, recording.mime_type, voice_file_name(recording))
            return encode_voice(recording.duration_label, draft.typed_text, blob.blob_id)

        if draft.selected_file is not None:
            selected = draft.selected_file
            self.check_file_size(selected)
            self.state = ComposerState.UPLOADING
            blob = await self._blob_store.upload(selected.data, selected.mime_type, selected.name)
            return encode_file(selected.name, human_readable_size(selected.size), draft.typed_text, blob.blob_id)

        return draft.typed_text

    # ── location ────────────────────────────────────────────────────────

    async def send_location(self, lat: float, lng: float, label: str = "") -> Message:
        """Encode and post a location directly; no blob upload is involved."""
        if self._location_in_flight:
            raise ComposerBusyError("A location send is already in progress.")
        lat, lng = validate_coordinates(lat, lng)
        self._location_in_flight = True
        try:
            message = await self._messaging.send_message(self.channel_id, encode_location(lat, lng, label))
            if message is None:
                raise SendFailedError(self._messaging.last_error or "Failed to send location.")
        except HiveChatError as e:
            self.error = e
            logger.warning("Location send to %s failed: %s", self.channel_id, e)
            raise
        finally:
            self._location_in_flight = False
        return message

    async def share_current_location(
        self,
        provider: GeolocationProvider,
        label: str = "",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> Message:
        position = await request_position(provider, timeout_ms)
        return await self.send_location(position.lat, position.lng, label or position.label)
