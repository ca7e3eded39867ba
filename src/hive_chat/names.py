"""
SuiNS name resolution over the Sui JSON-RPC API, with forward/reverse caches.

Lookups are best effort: failures are logged and resolve to None so a
missing name never blocks rendering.
"""

import itertools
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("hive_chat.names")

DEFAULT_RPC_URL = "https://fullnode.testnet.sui.io:443"


def format_address(address: str) -> str:
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def is_name(value: str) -> bool:
    return value.endswith(".sui") and len(value) > 4


def is_address(value: str) -> bool:
    return value.startswith("0x") and len(value) == 66


class NameResolver:
    def __init__(self, rpc_url: str = DEFAULT_RPC_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(timeout=15.0, transport=transport)
        self._rpc_url = rpc_url
        self._ids = itertools.count(1)
        self._address_to_name: dict[str, Optional[str]] = {}
        self._name_to_address: dict[str, str] = {}

    async def _call(self, method: str, params: list[Any]) -> Any:
        resp = await self._client.post(self._rpc_url, json={
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        })
        resp.raise_for_status()
        body = resp.json()
        if "error" in body:
            raise ValueError(body["error"].get("message", "rpc error"))
        return body.get("result")

    async def get_address_name(self, address: str) -> Optional[str]:
        if address in self._address_to_name:
            return self._address_to_name[address]
        try:
            result = await self._call("suix_resolveNameServiceNames", [address, None, 1])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to resolve name for address %s: %s", address, e)
            return None
        names = (result or {}).get("data") or []
        name = names[0] if names else None
        self._address_to_name[address] = name
        if name:
            self._name_to_address[name] = address
        return name

    async def get_address_from_name(self, name: str) -> Optional[str]:
        if name in self._name_to_address:
            return self._name_to_address[name]
        try:
            address = await self._call("suix_resolveNameServiceAddress", [name])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to resolve address for name %s: %s", name, e)
            return None
        if address:
            self._name_to_address[name] = address
            self._address_to_name[address] = name
        return address

    async def display_name(self, address: str) -> str:
        """The registered name if there is one, otherwise a shortened address."""
        return await self.get_address_name(address) or format_address(address)

    def cached_name(self, address: str) -> Optional[str]:
        return self._address_to_name.get(address)

    async def resolve_to_address(self, value: str) -> Optional[str]:
        if is_address(value):
            return value
        if is_name(value):
            return await self.get_address_from_name(value)
        return None

    def clear_cache(self) -> None:
        self._address_to_name.clear()
        self._name_to_address.clear()

    async def close(self) -> None:
        await self._client.aclose()
