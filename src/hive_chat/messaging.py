"""
Messaging backend REST API — channel message send/fetch.

send_message() mirrors the backend SDK's contract: it returns None on failure
and leaves the reason in ``last_error`` instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncGenerator, Iterable, Optional

import httpx
from pydantic import ValidationError

from hive_chat.errors import HiveChatError
from hive_chat.models.message import Message, MessagePage
from hive_chat.transport.http import HttpClient

logger = logging.getLogger("hive_chat.messaging")

DEFAULT_POLL_INTERVAL_S = 10.0


class MessagingAPI:
    def __init__(self, http: HttpClient):
        self._http = http
        self.last_error: Optional[str] = None

    async def send_message(self, channel_id: str, text: str) -> Optional[Message]:
        """Post ``text`` to a channel. Returns None and sets ``last_error`` on failure."""
        self.last_error = None
        try:
            result = await self._http.post(f"/channels/{channel_id}/messages", {"text": text})
            return Message.model_validate(result)
        except (HiveChatError, ValidationError) as e:
            self.last_error = str(e)
        except (httpx.HTTPError, ValueError) as e:
            self.last_error = f"Failed to send message: {e}"
        logger.warning("Send to channel %s failed: %s", channel_id, self.last_error)
        return None

    async def fetch_messages(self, channel_id: str, cursor: Optional[str] = None, limit: int = 50) -> MessagePage:
        params: dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor
        result = await self._http.get(f"/channels/{channel_id}/messages", params=params)
        return MessagePage.model_validate(result)

    async def poll(
        self,
        channel_id: str,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        transcript: Optional[Transcript] = None,
    ) -> AsyncGenerator[Message, None]:
        """Re-fetch the newest page every ``interval_s`` and yield unseen messages."""
        transcript = transcript if transcript is not None else Transcript()
        while True:
            try:
                page = await self.fetch_messages(channel_id)
            except HiveChatError as e:
                logger.warning("Polling channel %s failed: %s", channel_id, e)
            else:
                for message in transcript.extend(page.messages):
                    yield message
            await asyncio.sleep(interval_s)


class Transcript:
    """Append-only channel history, ordered by arrival."""

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = []
        self._seen: set[tuple[str, int, str]] = set()
        self.extend(messages)

    def extend(self, messages: Iterable[Message]) -> list[Message]:
        """Append messages not seen before; returns the ones actually added."""
        added = []
        for message in messages:
            if message.key in self._seen:
                continue
            self._seen.add(message.key)
            self._messages.append(message)
            added.append(message)
        return added

    def sorted_by_time(self) -> list[Message]:
        return sorted(self._messages, key=lambda m: m.created_at_ms)

    def __iter__(self):
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
