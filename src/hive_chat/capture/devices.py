"""Input device selection."""

from __future__ import annotations

from typing import Optional, Sequence

from hive_chat.models.message import InputDevice

VIRTUAL_NAME_MARKERS = (
    "virtual",
    "background music",
    "loopback",
    "stereo mix",
    "monitor of",
    "blackhole",
)


def is_virtual_device(device: InputDevice) -> bool:
    label = device.label.lower()
    return any(marker in label for marker in VIRTUAL_NAME_MARKERS)


def select_default_device(
    candidates: Sequence[InputDevice],
    prefer_name: Optional[str] = None,
) -> Optional[InputDevice]:
    """Pick the configured device, else the first real microphone, else the first device."""
    if not candidates:
        return None
    if prefer_name:
        preferred = [d for d in candidates if prefer_name.lower() in d.label.lower()]
        if preferred:
            return preferred[0]

    for device in candidates:
        if device.label and not is_virtual_device(device):
            return device

    return candidates[0]
