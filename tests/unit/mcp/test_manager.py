"""Unit tests for ConnectionRegistry."""

import asyncio
from unittest.mock import MagicMock

import pytest

from mcp_bridge.config import DispatchConfig, ProviderConfig
from mcp_bridge.errors import BridgeError
from mcp_bridge.mcp import ConnectionRegistry
from mcp_bridge.types import ConnectionStatus, MCPTransport
from tests.mocks import FakeClientFactory


@pytest.fixture
def registry(client_factory, fast_dispatch) -> ConnectionRegistry:
    return ConnectionRegistry(client_factory=client_factory, dispatch_config=fast_dispatch)


class TestAddProvider:
    """Tests for add_provider/remove_provider."""

    @pytest.mark.asyncio
    async def test_add_installs_connection(self, registry, stdio_config):
        conn = await registry.add_provider("files", stdio_config)

        assert registry.get_connection("files") is conn
        assert registry.provider_ids() == ["files"]
        assert conn.status == ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_readd_replaces_and_closes_old_first(self, registry, client_factory):
        cfg_a = ProviderConfig(command="server-a", enabled=True)
        cfg_b = ProviderConfig(command="server-b", enabled=True)

        old = await registry.add_provider("p1", cfg_a)
        new = await registry.add_provider("p1", cfg_b)

        assert registry.provider_ids() == ["p1"]
        assert registry.get_connection("p1") is new
        assert new.config is cfg_b
        assert old.status == ConnectionStatus.DISCONNECTED
        assert client_factory.events == [("open", "p1"), ("close", "p1"), ("open", "p1")]

    @pytest.mark.asyncio
    async def test_invalid_config_leaves_old_connection(self, registry, stdio_config):
        old = await registry.add_provider("files", stdio_config)

        with pytest.raises(BridgeError) as exc_info:
            await registry.add_provider(
                "files", ProviderConfig(transport=MCPTransport.HTTP, enabled=True)
            )

        assert exc_info.value.code == "CONFIG_INVALID"
        assert registry.get_connection("files") is old
        assert old.status == ConnectionStatus.CONNECTED

    @pytest.mark.asyncio
    async def test_id_with_separator_rejected(self, registry, stdio_config):
        with pytest.raises(BridgeError):
            await registry.add_provider("my.files", stdio_config)
        assert registry.provider_ids() == []

    @pytest.mark.asyncio
    async def test_failed_connect_leaves_slot_empty(self, stdio_config, fast_dispatch):
        attempts = []

        def configure(client):
            attempts.append(client)
            if len(attempts) > 1:
                client.enter_error = ConnectionRefusedError("down")

        registry = ConnectionRegistry(
            client_factory=FakeClientFactory(configure=configure), dispatch_config=fast_dispatch
        )
        await registry.add_provider("files", stdio_config)

        with pytest.raises(BridgeError) as exc_info:
            await registry.add_provider("files", stdio_config)

        assert exc_info.value.code == "TRANSPORT_ERROR"
        assert registry.get_connection("files") is None
        assert attempts[0].closed

    @pytest.mark.asyncio
    async def test_disabled_config_removes_and_skips(self, registry, client_factory, stdio_config):
        await registry.add_provider("files", stdio_config)

        result = await registry.add_provider(
            "files", ProviderConfig(command="files-server", enabled=False)
        )

        assert result is None
        assert registry.get_connection("files") is None
        assert len(client_factory.clients) == 1

    @pytest.mark.asyncio
    async def test_remove(self, registry, stdio_config):
        await registry.add_provider("files", stdio_config)

        assert await registry.remove_provider("files") is True
        assert await registry.remove_provider("files") is False
        assert registry.get_connection("files") is None

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_one_connection(self, registry, client_factory):
        configs = [ProviderConfig(command=f"server-{i}", enabled=True) for i in range(5)]

        await asyncio.gather(*(registry.add_provider("p1", cfg) for cfg in configs))

        assert registry.provider_ids() == ["p1"]
        open_clients = [c for _, _, c in client_factory.clients if not c.closed]
        assert len(open_clients) == 1


class TestStatuses:
    """Tests for list_all_statuses and get_status."""

    @pytest.mark.asyncio
    async def test_one_failing_probe_isolated(self, registry, client_factory, stdio_config):
        for pid in ("a", "b", "c"):
            await registry.add_provider(pid, stdio_config)
        client_factory.latest("b").list_error = BrokenPipeError("dead")

        statuses = {s.provider_id: s for s in await registry.list_all_statuses()}

        assert len(statuses) == 3
        assert statuses["a"].status == ConnectionStatus.CONNECTED
        assert statuses["b"].status == ConnectionStatus.ERROR
        assert statuses["c"].status == ConnectionStatus.CONNECTED
        assert statuses["a"].tools_count == 2

    @pytest.mark.asyncio
    async def test_hanging_probe_does_not_block_others(self, client_factory, stdio_config):
        registry = ConnectionRegistry(
            client_factory=client_factory,
            dispatch_config=DispatchConfig(settle_delay_seconds=0, probe_timeout_seconds=0.05),
        )
        for pid in ("a", "b"):
            await registry.add_provider(pid, stdio_config)
        client_factory.latest("a").list_delay = 5.0

        statuses = await asyncio.wait_for(registry.list_all_statuses(), timeout=2.0)

        assert [s.status for s in statuses] == [ConnectionStatus.ERROR, ConnectionStatus.CONNECTED]

    @pytest.mark.asyncio
    async def test_call_in_flight_does_not_hold_up_statuses(self, client_factory, stdio_config):
        registry = ConnectionRegistry(
            client_factory=client_factory,
            dispatch_config=DispatchConfig(settle_delay_seconds=0, probe_timeout_seconds=0.2),
        )
        for pid in ("slow", "ok"):
            await registry.add_provider(pid, stdio_config)
        client_factory.latest("slow").call_delay = 3.0
        call = asyncio.create_task(registry.call_tool("slow", "read", {"path": "a"}))
        await asyncio.sleep(0)

        loop = asyncio.get_running_loop()
        started = loop.time()
        statuses = {s.provider_id: s.status for s in await registry.list_all_statuses()}
        elapsed = loop.time() - started

        assert elapsed < 1.0
        assert statuses == {"slow": ConnectionStatus.ERROR, "ok": ConnectionStatus.CONNECTED}
        call.cancel()
        with pytest.raises(asyncio.CancelledError):
            await call

    @pytest.mark.asyncio
    async def test_unknown_provider_disconnected(self, registry):
        assert await registry.get_status("nope") == ConnectionStatus.DISCONNECTED


class TestTestConnection:
    """Tests for the reconnect-once path."""

    @pytest.mark.asyncio
    async def test_connected_is_not_rebuilt(self, registry, client_factory, stdio_config):
        await registry.add_provider("files", stdio_config)

        result = await registry.test_connection("files", stdio_config)

        assert result.previous_status == ConnectionStatus.CONNECTED
        assert result.current_status == ConnectionStatus.CONNECTED
        assert result.connected
        assert len(client_factory.clients) == 1

    @pytest.mark.asyncio
    async def test_broken_connection_rebuilt_once(self, registry, client_factory, stdio_config):
        await registry.add_provider("files", stdio_config)
        client_factory.latest("files").list_error = BrokenPipeError("dead")

        result = await registry.test_connection("files", stdio_config)

        assert result.previous_status == ConnectionStatus.ERROR
        assert result.current_status == ConnectionStatus.CONNECTED
        assert result.connected
        assert result.tools_count == 2
        assert len(client_factory.clients) == 2

    @pytest.mark.asyncio
    async def test_missing_connection_is_connected(self, registry, client_factory, stdio_config):
        result = await registry.test_connection("files", stdio_config)

        assert result.previous_status == ConnectionStatus.DISCONNECTED
        assert result.connected

    @pytest.mark.asyncio
    async def test_failed_reconnect_reported_not_raised(self, stdio_config, fast_dispatch):
        def configure(client):
            client.enter_error = ConnectionRefusedError("down")

        factory = FakeClientFactory(configure=configure)
        registry = ConnectionRegistry(client_factory=factory, dispatch_config=fast_dispatch)

        result = await registry.test_connection("files", stdio_config)

        assert result.previous_status == ConnectionStatus.DISCONNECTED
        assert result.current_status == ConnectionStatus.DISCONNECTED
        assert not result.connected
        assert "down" in result.error
        assert len(factory.clients) == 1
        assert result.to_dict()["current_status"] == "disconnected"


class TestRouting:
    """Tests for call_tool, refresh_tools and disconnect_all."""

    @pytest.mark.asyncio
    async def test_call_tool_routes(self, registry, client_factory, stdio_config):
        await registry.add_provider("files", stdio_config)

        await registry.call_tool("files", "read", {"path": "/a"})

        assert client_factory.latest("files").calls == [("read", {"path": "/a"})]

    @pytest.mark.asyncio
    async def test_call_tool_not_connected(self, registry):
        with pytest.raises(BridgeError) as exc_info:
            await registry.call_tool("files", "read", {})
        assert exc_info.value.code == "NOT_CONNECTED"

    @pytest.mark.asyncio
    async def test_refresh_tools(self, registry, stdio_config):
        await registry.add_provider("files", stdio_config)
        assert len(await registry.refresh_tools("files")) == 2

        with pytest.raises(BridgeError):
            await registry.refresh_tools("nope")

    @pytest.mark.asyncio
    async def test_disconnect_all(self, registry, client_factory, stdio_config):
        for pid in ("a", "b"):
            await registry.add_provider(pid, stdio_config)

        await registry.disconnect_all()

        assert registry.provider_ids() == []
        assert all(c.closed for _, _, c in client_factory.clients)

    @pytest.mark.asyncio
    async def test_metrics_track_connected_providers(
        self, client_factory, stdio_config, fast_dispatch
    ):
        metrics = MagicMock()
        registry = ConnectionRegistry(
            client_factory=client_factory, dispatch_config=fast_dispatch, metrics=metrics
        )

        await registry.add_provider("files", stdio_config)
        await registry.remove_provider("files")

        metrics.provider_connected.assert_called_once_with("files")
        metrics.provider_disconnected.assert_called_once_with("files")
