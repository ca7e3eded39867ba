import json

import httpx
import pytest

from hive_chat.names import NameResolver, format_address, is_address, is_name

ADDRESS = "0x" + "ab" * 32


def rpc_handler(calls, results):
    def handler(request):
        body = json.loads(request.content)
        calls.append((body["method"], body["params"]))
        result = results[body["method"]]
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})
    return handler


class TestHelpers:
    def test_format_address(self):
        assert format_address(ADDRESS) == "0xabab...abab"
        assert format_address("") == ""

    def test_is_name(self):
        assert is_name("alice.sui")
        assert not is_name(".sui")
        assert not is_name("alice")

    def test_is_address(self):
        assert is_address(ADDRESS)
        assert not is_address("0x123")


class TestResolver:
    @pytest.mark.asyncio
    async def test_reverse_lookup_is_cached(self):
        calls = []
        resolver = NameResolver("https://rpc.test", transport=httpx.MockTransport(rpc_handler(calls, {
            "suix_resolveNameServiceNames": {"data": ["alice.sui"], "hasNextPage": False},
        })))

        assert await resolver.get_address_name(ADDRESS) == "alice.sui"
        assert await resolver.get_address_name(ADDRESS) == "alice.sui"
        assert calls == [("suix_resolveNameServiceNames", [ADDRESS, None, 1])]
        assert resolver.cached_name(ADDRESS) == "alice.sui"
        # the reverse hit also primes forward resolution
        assert await resolver.get_address_from_name("alice.sui") == ADDRESS
        assert len(calls) == 1
        await resolver.close()

    @pytest.mark.asyncio
    async def test_missing_name_is_cached(self):
        calls = []
        resolver = NameResolver(transport=httpx.MockTransport(rpc_handler(calls, {
            "suix_resolveNameServiceNames": {"data": []},
        })))
        assert await resolver.get_address_name(ADDRESS) is None
        assert await resolver.display_name(ADDRESS) == format_address(ADDRESS)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_failures_resolve_to_none_and_are_retried(self):
        calls = []
        resolver = NameResolver(transport=httpx.MockTransport(rpc_handler(calls, {
            "suix_resolveNameServiceNames": httpx.Response(502),
        })))
        assert await resolver.get_address_name(ADDRESS) is None
        assert await resolver.get_address_name(ADDRESS) is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_rpc_error(self):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad"}})

        resolver = NameResolver(transport=httpx.MockTransport(handler))
        assert await resolver.get_address_from_name("bob.sui") is None

    @pytest.mark.asyncio
    async def test_resolve_to_address(self):
        calls = []
        resolver = NameResolver(transport=httpx.MockTransport(rpc_handler(calls, {
            "suix_resolveNameServiceAddress": ADDRESS,
        })))
        assert await resolver.resolve_to_address(ADDRESS) == ADDRESS
        assert await resolver.resolve_to_address("alice.sui") == ADDRESS
        assert await resolver.resolve_to_address("not a name") is None
        assert calls == [("suix_resolveNameServiceAddress", ["alice.sui"])]

        resolver.clear_cache()
        assert resolver.cached_name(ADDRESS) is None
