"""
Rich content variants carried inside a message's text field.

Only FileRef, VoiceRef and LocationRef are ever produced by the encoders;
the three legacy variants exist so that old transcripts keep rendering.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Content(BaseModel):
    model_config = ConfigDict(frozen=True)


class PlainText(_Content):
    kind: Literal["text"] = "text"
    body: str


class FileRef(_Content):
    kind: Literal["file"] = "file"
    file_name: str
    human_size: str
    caption: str
    blob_id: str


class VoiceRef(_Content):
    kind: Literal["voice"] = "voice"
    duration_label: str
    caption: str
    blob_id: str


class LocationRef(_Content):
    kind: Literal["location"] = "location"
    lat: float
    lng: float
    label: str = ""


class IndexedDbRef(_Content):
    """Files stored in the sender's browser IndexedDB (never downloadable)."""
    kind: Literal["indexeddb"] = "indexeddb"
    file_name: str
    human_size: str
    caption: str
    local_id: str


class LegacyBase64Ref(_Content):
    """Inline base64 payload, truncated by the sender with a trailing ellipsis."""
    kind: Literal["legacy_base64"] = "legacy_base64"
    file_name: str
    human_size: str
    caption: str
    base64_data: str


class LegacyNoSizeRef(_Content):
    kind: Literal["legacy_nosize"] = "legacy_nosize"
    file_name: str
    caption: str
    base64_data: str


RichContent = Annotated[
    Union[PlainText, FileRef, VoiceRef, LocationRef, IndexedDbRef, LegacyBase64Ref, LegacyNoSizeRef],
    Field(discriminator="kind"),
]

LEGACY_FILE_TYPES = (IndexedDbRef, LegacyBase64Ref, LegacyNoSizeRef)
FILE_TYPES = (FileRef,) + LEGACY_FILE_TYPES
