"""
Geolocation — provider contract, bounded fix requests, manual entry.
"""

import asyncio
import logging
import math
from typing import Any, Callable, Optional, Protocol

import httpx

from hive_chat.errors import LocationError
from hive_chat.models.message import Position

logger = logging.getLogger("hive_chat.location")

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_IP_LOOKUP_URL = "https://ipapi.co/json/"

SuccessCallback = Callable[[Position], None]
FailureCallback = Callable[[Exception], None]


class GeolocationProvider(Protocol):
    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None: ...


def validate_coordinates(lat: float, lng: float) -> tuple[float, float]:
    lat, lng = float(lat), float(lng)
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError("Latitude and longitude must be numbers.")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude must be between -90 and 90, got {lat}.")
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"Longitude must be between -180 and 180, got {lng}.")
    return lat, lng


def parse_manual_location(lat_text: str, lng_text: str, label: str = "") -> Position:
    """Validate user-typed coordinates. Raises ValueError with a readable message."""
    try:
        lat = float(lat_text.strip())
        lng = float(lng_text.strip())
    except (AttributeError, ValueError):
        raise ValueError("Please enter valid numeric coordinates.")
    lat, lng = validate_coordinates(lat, lng)
    return Position(lat=lat, lng=lng, label=(label or "").strip())


async def request_position(provider: GeolocationProvider, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Position:
    """Ask the provider for one fix; abandon it after ``timeout_ms``."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Position] = loop.create_future()

    def on_success(position: Position) -> None:
        if not future.done():
            loop.call_soon_threadsafe(_settle, future, position, None)

    def on_failure(exc: Exception) -> None:
        if not future.done():
            loop.call_soon_threadsafe(_settle, future, None, exc)

    try:
        provider.get_current_position(on_success, on_failure, timeout_ms)
        return await asyncio.wait_for(future, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        raise LocationError(f"No location fix within {timeout_ms / 1000:g}s.")
    except LocationError:
        raise
    except Exception as e:
        raise LocationError(f"Unable to get location: {e}") from e


def _settle(future: "asyncio.Future[Position]", position: Optional[Position], exc: Optional[Exception]) -> None:
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(position)


class IpGeolocationProvider:
    """Coarse position from an IP lookup service (no device GPS on desktop)."""

    def __init__(self, url: str = DEFAULT_IP_LOOKUP_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._url = url
        self._transport = transport
        self._tasks: set[asyncio.Task] = set()

    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        task = asyncio.get_running_loop().create_task(self._lookup(on_success, on_failure, timeout_ms))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _lookup(self, on_success: SuccessCallback, on_failure: FailureCallback, timeout_ms: int) -> None:
        try:
            async with httpx.AsyncClient(timeout=timeout_ms / 1000, transport=self._transport) as client:
                resp = await client.get(self._url)
                resp.raise_for_status()
                data: dict[str, Any] = resp.json()
            lat, lng = validate_coordinates(data["latitude"], data["longitude"])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("IP geolocation lookup failed: %s", e)
            on_failure(LocationError(f"Unable to get location: {e}"))
            return
        label = ", ".join(part for part in (data.get("city"), data.get("country_name")) if part)
        on_success(Position(lat=lat, lng=lng, label=label))
