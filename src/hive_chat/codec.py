"""
Envelope codec — rich content <-> the single text field of a chat message.

Encoders emit only the current shapes (file, voice, location). The decoder
additionally reads three legacy file shapes so old transcripts still render.
Decoding is total: anything unrecognised comes back as PlainText.

Caption segments may span lines, so every pattern is compiled with DOTALL
and matched against the whole string.
"""

import math
import re
from typing import Optional

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

FILE_GLYPH = "\U0001F4CE"      # 📎
VOICE_GLYPH = "\U0001F3A4"     # 🎤
LOCATION_GLYPH = "\U0001F4CD"  # 📍

DEFAULT_FILE_CAPTION = "File shared"
DEFAULT_VOICE_CAPTION = "Voice message"

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg")

_NAME = r"([^\n]+?)"
_PAREN = r"\(([^()\n]+?)\)"
_CAPTION = r"(.*?)"
_BLOB = r"\[Walrus: ([^\]\n]+)\]"

VOICE_PATTERN = re.compile(
    VOICE_GLYPH + r" Voice Message " + _PAREN + r"\n" + _CAPTION + r"\n\n" + _BLOB,
    re.DOTALL,
)
FILE_PATTERN = re.compile(
    FILE_GLYPH + " " + _NAME + " " + _PAREN + r"\n" + _CAPTION + r"\n\n" + _BLOB,
    re.DOTALL,
)
INDEXEDDB_PATTERN = re.compile(
    FILE_GLYPH + " " + _NAME + " " + _PAREN + r"\n" + _CAPTION + r"\n\n\[FileID: ([^\]\n]+)\]",
    re.DOTALL,
)
LEGACY_BASE64_PATTERN = re.compile(
    FILE_GLYPH + " " + _NAME + " " + _PAREN + r"\n" + _CAPTION + r"\n\n\[File: (.+?)\]\.\.\.",
    re.DOTALL,
)
LEGACY_NOSIZE_PATTERN = re.compile(
    FILE_GLYPH + " " + _NAME + r"\n" + _CAPTION + r"\n\n\[File: (.+?)\]\.\.\.",
    re.DOTALL,
)
LOCATION_PATTERN = re.compile(
    LOCATION_GLYPH + r" Location: ([^,\s]+),([^,\s]+)(?:\n(.*))?",
    re.DOTALL,
)


# ── Encoding ─────────────────────────────────────────────────────────────────

def encode_file(file_name: str, human_size: str, caption: str, blob_id: str) -> str:
    return f"{FILE_GLYPH} {file_name} ({human_size})\n{caption or DEFAULT_FILE_CAPTION}\n\n[Walrus: {blob_id}]"


def encode_voice(duration_label: str, caption: str, blob_id: str) -> str:
    return (
        f"{VOICE_GLYPH} Voice Message ({duration_label})\n"
        f"{caption or DEFAULT_VOICE_CAPTION}\n\n[Walrus: {blob_id}]"
    )


def encode_location(lat: float, lng: float, label: Optional[str] = None) -> str:
    """Encode a coordinate pair. Coordinates use the shortest round-tripping decimal form."""
    lat, lng = float(lat), float(lng)
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError(f"Coordinates must be finite numbers, got {lat!r},{lng!r}")
    text = f"{LOCATION_GLYPH} Location: {lat!r},{lng!r}"
    label = (label or "").strip()
    if label:
        text += f"\n{label}"
    return text


# ── Decoding ─────────────────────────────────────────────────────────────────

def decode(text: str) -> RichContent:
    """Classify a message body. Never raises; unknown shapes become PlainText."""
    if not isinstance(text, str):
        return PlainText(body=str(text))

    m = VOICE_PATTERN.fullmatch(text)
    if m:
        return VoiceRef(duration_label=m.group(1), caption=m.group(2), blob_id=m.group(3))

    m = FILE_PATTERN.fullmatch(text)
    if m:
        return FileRef(file_name=m.group(1), human_size=m.group(2), caption=m.group(3), blob_id=m.group(4))

    legacy = decode_legacy(text)
    if legacy is not None:
        return legacy

    location = _decode_location(text)
    if location is not None:
        return location

    return PlainText(body=text)


def decode_legacy(text: str) -> Optional[RichContent]:
    """Read-compatibility for file shapes that are no longer produced.

    Shapes are tried oldest-last; an ambiguous message resolves to whichever
    shape comes first.
    """
    m = INDEXEDDB_PATTERN.fullmatch(text)
    if m:
        return IndexedDbRef(file_name=m.group(1), human_size=m.group(2), caption=m.group(3), local_id=m.group(4))

    m = LEGACY_BASE64_PATTERN.fullmatch(text)
    if m:
        return LegacyBase64Ref(
            file_name=m.group(1), human_size=m.group(2), caption=m.group(3), base64_data=m.group(4),
        )

    m = LEGACY_NOSIZE_PATTERN.fullmatch(text)
    if m:
        return LegacyNoSizeRef(file_name=m.group(1), caption=m.group(2), base64_data=m.group(3))
    return None


def _decode_location(text: str) -> Optional[LocationRef]:
    m = LOCATION_PATTERN.fullmatch(text)
    if not m:
        return None
    try:
        lat = float(m.group(1))
        lng = float(m.group(2))
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return LocationRef(lat=lat, lng=lng, label=m.group(3) or "")


# ── Display helpers ──────────────────────────────────────────────────────────

def human_readable_size(num_bytes: int) -> str:
    """Base-1024 size with two decimals, e.g. ``2.00 MB``. Zero is ``0 Bytes``."""
    if num_bytes < 0:
        raise ValueError("num_bytes must be >= 0")
    if num_bytes == 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {SIZE_UNITS[unit]}"


def is_image_file(file_name: str) -> bool:
    return file_name.lower().endswith(IMAGE_EXTENSIONS)


def is_video_file(mime_type: str) -> bool:
    return mime_type.startswith("video/")


def is_audio_file(mime_type: str) -> bool:
    return mime_type.startswith("audio/")
