"""
Tests for VMDeskClient: config-driven connect, delegation, context manager.
"""

import httpx
import pytest

from vmdesk_sdk import ClientConfig, ClientMode, ConfigurationError, VMDeskClient


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _Helper:
    def terminal_port(self):
        return 7000

    def host_list(self):
        return [{"id": "local-host"}]


def _make_transport(seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        if request.content and b"app.version" in request.content:
            return httpx.Response(200, json={"code": 0, "data": "1.4.0"})
        return httpx.Response(200, json={"code": 0, "data": [{"id": "remote-host"}]})

    return httpx.MockTransport(handler)


def _make_client(seen=None, **config) -> VMDeskClient:
    return VMDeskClient(
        binding=_Helper(),
        config=ClientConfig(**config),
        transport=_make_transport(seen),
    )


class TestVMDeskClient:
    @pytest.mark.asyncio
    async def test_local_by_default(self):
        client = _make_client()
        assert client.mode == ClientMode.LOCAL
        assert await client.host_list() == [{"id": "local-host"}]

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self):
        client = _make_client()

        assert await client.connect("https://10.0.0.5:8443", token="tok") == "1.4.0"
        assert client.is_remote
        assert await client.host_list() == [{"id": "remote-host"}]

        client.disconnect()
        assert client.mode == ClientMode.LOCAL
        assert await client.host_list() == [{"id": "local-host"}]

    @pytest.mark.asyncio
    async def test_connect_uses_configured_endpoint(self):
        seen = []
        client = _make_client(seen, remote_url="https://10.0.0.5:8443", api_key="cfg-key")

        await client.connect()
        assert seen[0].headers["Authorization"] == "Bearer cfg-key"
        assert client.get_connection_info() == {
            "mode": "remote",
            "state": "connected",
            "base_url": "https://10.0.0.5:8443",
            "authenticated": True,
            "version": "1.4.0",
        }

    @pytest.mark.asyncio
    async def test_connect_without_url(self):
        client = _make_client()
        with pytest.raises(ConfigurationError):
            await client.connect()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with _make_client(remote_url="http://server:9600") as client:
            assert client.is_remote
            url = await client.terminal_url({"hostId": "h1"})
            assert url == "ws://server:9600/ws/terminal?hostId=h1"
        assert client.mode == ClientMode.LOCAL

    @pytest.mark.asyncio
    async def test_context_manager_stays_local_without_url(self):
        async with _make_client() as client:
            assert await client.terminal_url({"hostId": "h1"}) == "ws://127.0.0.1:7000/ws/terminal?hostId=h1"

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            _make_client().vm_teleport

    def test_connection_info_when_local(self):
        info = _make_client().get_connection_info()
        assert info["mode"] == "local"
        assert info["base_url"] is None
        assert info["version"] == ""
