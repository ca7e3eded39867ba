"""
AsyncHiveChat / HiveChat — main client objects.
"""

import asyncio
from typing import Any, AsyncGenerator, Optional

from hive_chat.blobstore import BlobStoreClient
from hive_chat.capture.platform import MediaCapturePlatform, SoundDevicePlatform
from hive_chat.capture.session import CaptureSession
from hive_chat.composer import Composer
from hive_chat.config import HiveConfig
from hive_chat.messaging import MessagingAPI, Transcript
from hive_chat.models.message import Message, MessagePage
from hive_chat.names import NameResolver
from hive_chat.render import MessageView, render_message, resolve_senders
from hive_chat.transport.http import HttpClient


class AsyncHiveChat:
    """Async client (primary)."""

    def __init__(
        self,
        config: Optional[HiveConfig] = None,
        platform: Optional[MediaCapturePlatform] = None,
        **overrides: Any,
    ):
        self.config = (config or HiveConfig()).model_copy(update=overrides)
        cfg = self.config

        self.http = HttpClient(base_url=cfg.messaging_url, token=cfg.access_token, timeout=cfg.http_timeout_s)
        self.messaging = MessagingAPI(self.http)
        self.blobs = BlobStoreClient(
            publisher_url=cfg.publisher_url,
            aggregator_url=cfg.aggregator_url,
            epochs=cfg.epochs,
        )
        self.names = NameResolver(cfg.sui_rpc_url)
        self._platform = platform

    @property
    def platform(self) -> MediaCapturePlatform:
        if self._platform is None:
            self._platform = SoundDevicePlatform()
        return self._platform

    def capture_session(self) -> CaptureSession:
        return CaptureSession(self.platform, preferred_device=self.config.preferred_device)

    def composer(self, channel_id: str, capture: Optional[CaptureSession] = None) -> Composer:
        """A composer bound to one channel. Pass a capture session to enable voice notes."""
        return Composer(
            channel_id,
            self.messaging,
            self.blobs,
            capture=capture,
            max_file_bytes=self.config.max_file_bytes,
        )

    async def send_text(self, channel_id: str, text: str) -> Message:
        composer = self.composer(channel_id)
        composer.typed_text = text
        return await composer.send()

    async def fetch_messages(self, channel_id: str, cursor: Optional[str] = None) -> MessagePage:
        return await self.messaging.fetch_messages(channel_id, cursor)

    async def history(self, channel_id: str, pages: int = 1) -> Transcript:
        """Fetch up to ``pages`` pages, oldest-first by creation time."""
        transcript = Transcript()
        cursor = None
        for _ in range(pages):
            page = await self.messaging.fetch_messages(channel_id, cursor)
            transcript.extend(page.messages)
            cursor = page.next_cursor
            if not cursor:
                break
        return Transcript(transcript.sorted_by_time())

    async def views(self, messages: list[Message], resolve_names: bool = True) -> list[MessageView]:
        if resolve_names:
            await resolve_senders(messages, self.names)
        return [render_message(m, self.config.account_address, self.names) for m in messages]

    async def watch(self, channel_id: str) -> AsyncGenerator[Message, None]:
        """Yield new channel messages as they arrive (polling)."""
        async for message in self.messaging.poll(channel_id, self.config.poll_interval_s):
            yield message

    async def close(self) -> None:
        await self.http.close()
        await self.blobs.close()
        await self.names.close()

    async def __aenter__(self) -> "AsyncHiveChat":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


class HiveChat:
    """Sync wrapper around AsyncHiveChat. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        self._async = AsyncHiveChat(**kwargs)

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def messaging(self) -> MessagingAPI:
        return self._async.messaging

    @property
    def blobs(self) -> BlobStoreClient:
        return self._async.blobs

    def send_text(self, channel_id: str, text: str) -> Message:
        return self._run(self._async.send_text(channel_id, text))

    def fetch_messages(self, channel_id: str, cursor: Optional[str] = None) -> MessagePage:
        return self._run(self._async.fetch_messages(channel_id, cursor))

    def history(self, channel_id: str, pages: int = 1) -> Transcript:
        return self._run(self._async.history(channel_id, pages))

    def download(self, blob_id: str) -> bytes:
        return self._run(self._async.blobs.download(blob_id))

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
