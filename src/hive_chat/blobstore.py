"""
Blob store client — content-addressed upload/download over the Walrus
publisher/aggregator HTTP API.

The store never enforces a size ceiling; callers do.
"""

import logging
from typing import Any, Optional

import httpx

from hive_chat.errors import BlobStoreError, UploadFailedError
from hive_chat.models.message import UploadedBlob

logger = logging.getLogger("hive_chat.blobstore")

DEFAULT_PUBLISHER_URL = "https://publisher.walrus-testnet.walrus.space"
DEFAULT_AGGREGATOR_URL = "https://aggregator.walrus-testnet.walrus.space"
DEFAULT_EPOCHS = 3


class BlobStoreClient:
    def __init__(
        self,
        publisher_url: str = DEFAULT_PUBLISHER_URL,
        aggregator_url: str = DEFAULT_AGGREGATOR_URL,
        epochs: int = DEFAULT_EPOCHS,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._publisher_url = publisher_url.rstrip("/")
        self._aggregator_url = aggregator_url.rstrip("/")
        self._epochs = epochs
        self._client = httpx.AsyncClient(
            headers={"User-Agent": "hive-chat/0.1.0"},
            timeout=timeout,
            transport=transport,
        )

    async def upload(
        self,
        data: bytes,
        mime_type: str,
        file_name: str = "blob",
        send_object_to: Optional[str] = None,
    ) -> UploadedBlob:
        """Store ``data`` and return its content-derived identifier.

        Re-uploading identical bytes is safe: the store answers with the
        already-certified blob instead of creating a new one.
        """
        params: dict[str, Any] = {"epochs": self._epochs}
        if send_object_to:
            params["send_object_to"] = send_object_to
        try:
            resp = await self._client.put(
                f"{self._publisher_url}/v1/blobs",
                params=params,
                content=data,
                headers={"Content-Type": mime_type or "application/octet-stream"},
            )
        except httpx.HTTPError as e:
            logger.error("Upload of %s failed: %s", file_name, e)
            raise UploadFailedError(f"Upload failed: {e}") from e

        if resp.status_code >= 400:
            logger.error("Upload of %s rejected: HTTP %s", file_name, resp.status_code)
            raise UploadFailedError(
                f"Upload failed: {resp.status_code} {resp.reason_phrase}",
                details={"status_code": resp.status_code},
            )

        try:
            blob_id, end_epoch = self._parse_storage_info(resp.json())
        except (ValueError, KeyError, TypeError) as e:
            raise UploadFailedError(f"Upload failed: {e}") from e

        logger.info("Uploaded %s (%d bytes) as blob %s", file_name, len(data), blob_id)
        return UploadedBlob(
            blob_id=blob_id,
            file_name=file_name,
            file_size=len(data),
            mime_type=mime_type,
            end_epoch=end_epoch,
        )

    @staticmethod
    def _parse_storage_info(info: Any) -> tuple[str, Optional[int]]:
        """Extract (blob_id, end_epoch) from either publisher response shape."""
        if isinstance(info, dict):
            if "alreadyCertified" in info:
                certified = info["alreadyCertified"]
                return certified["blobId"], certified.get("endEpoch")
            if "newlyCreated" in info:
                blob_object = info["newlyCreated"]["blobObject"]
                return blob_object["blobId"], blob_object.get("storage", {}).get("endEpoch")
        raise ValueError("Unexpected response format from blob store")

    async def download(self, blob_id: str) -> bytes:
        try:
            resp = await self._client.get(self.url_for(blob_id))
        except httpx.HTTPError as e:
            logger.error("Download of blob %s failed: %s", blob_id, e)
            raise BlobStoreError(f"Download failed: {e}", code="download_failed") from e
        if resp.status_code >= 400:
            raise BlobStoreError(
                f"Download failed: {resp.status_code} {resp.reason_phrase}",
                code="download_failed",
                details={"status_code": resp.status_code, "blob_id": blob_id},
            )
        return resp.content

    def url_for(self, blob_id: str) -> str:
        return f"{self._aggregator_url}/v1/blobs/{blob_id}"

    async def close(self) -> None:
        await self._client.aclose()
