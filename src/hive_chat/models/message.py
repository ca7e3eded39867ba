"""
Transport-level records — messages, stored blobs, capture devices, positions.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A received chat message. Immutable once received."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str
    created_at_ms: int = Field(alias="createdAtMs")
    text: str

    @property
    def key(self) -> tuple[str, int, str]:
        return (self.sender, self.created_at_ms, self.text)


class MessagePage(BaseModel):
    messages: list[Message] = []
    next_cursor: Optional[str] = Field(default=None, alias="nextCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")

    model_config = ConfigDict(populate_by_name=True)


class UploadedBlob(BaseModel):
    model_config = ConfigDict(frozen=True)

    blob_id: str
    file_name: str
    file_size: int
    mime_type: str
    end_epoch: Optional[int] = None


class InputDevice(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""


class Position(BaseModel):
    lat: float
    lng: float
    label: str = ""
