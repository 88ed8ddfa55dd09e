"""End-to-end flows through the application with fake provider clients."""

import asyncio

import pytest

from mcp_bridge.application import TELEMETRY_ENABLED_ENV, BridgeApplication
from mcp_bridge.config import BridgeConfig, DispatchConfig, ProviderConfig
from mcp_bridge.telemetry import TelemetryConfig, reset_telemetry
from mcp_bridge.types import ConnectionStatus
from tests.mocks import FakeClientFactory


@pytest.fixture(autouse=True)
def clean_telemetry(monkeypatch):
    monkeypatch.delenv(TELEMETRY_ENABLED_ENV, raising=False)
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig(
        dispatch=DispatchConfig(settle_delay_seconds=0, probe_timeout_seconds=0.2),
        telemetry=TelemetryConfig(enabled=False),
    )


@pytest.mark.integration
class TestBridgeFlow:
    """Provider add, call, replace and status flows."""

    @pytest.mark.asyncio
    async def test_add_then_call_with_coercion(self, config, client_factory, log_output):
        async with BridgeApplication(
            config=config, client_factory=client_factory, log_output=log_output
        ) as app:
            published = await app.service.add_server(
                "files", ProviderConfig(command="files-server", enabled=True)
            )
            assert "mcp_bridge.files.read" in [t.id for t in published]

            client = client_factory.latest("files")
            client.responses["read"] = {"content": [{"type": "text", "text": "hello"}]}

            result = await app.call_tool("mcp_bridge.files.read", {"path": 123, "skip": None})

            assert result.success
            assert result.data == {"content": [{"type": "text", "text": "hello"}]}
            assert result.metadata.provider_id == "files"
            assert result.metadata.provider_tool_name == "read"
            assert client.calls == [("read", {"path": "123"})]

    @pytest.mark.asyncio
    async def test_unknown_tool_never_reaches_provider(self, config, client_factory, log_output):
        async with BridgeApplication(
            config=config, client_factory=client_factory, log_output=log_output
        ) as app:
            await app.service.add_server(
                "files", ProviderConfig(command="files-server", enabled=True)
            )

            missing = await app.call_tool("mcp_bridge.files.delete", {})
            unknown = await app.call_tool("mcp_bridge.nowhere.read", {})
            malformed = await app.call_tool("files.read", {})

            assert missing.error_code == "TOOL_NOT_FOUND"
            assert unknown.error_code == "NOT_CONNECTED"
            assert malformed.error_code == "MALFORMED_TOOL_ID"
            assert client_factory.latest("files").calls == []

    @pytest.mark.asyncio
    async def test_readd_closes_old_session_first(self, config, client_factory, log_output):
        async with BridgeApplication(
            config=config, client_factory=client_factory, log_output=log_output
        ) as app:
            await app.service.add_server("p1", ProviderConfig(command="v1", enabled=True))
            await app.service.add_server("p1", ProviderConfig(command="v2", enabled=True))

            assert client_factory.events == [("open", "p1"), ("close", "p1"), ("open", "p1")]
            assert app.connections.get_connection("p1").config.command == "v2"

    @pytest.mark.asyncio
    async def test_statuses_isolate_failing_provider(self, config, files_tools, log_output):
        factory = FakeClientFactory(default_tools=files_tools)

        async with BridgeApplication(
            config=config, client_factory=factory, log_output=log_output
        ) as app:
            for pid in ("a", "b", "c"):
                await app.service.add_server(pid, ProviderConfig(command=pid, enabled=True))
            factory.latest("b").list_error = ConnectionResetError("gone")
            factory.latest("c").list_delay = 5

            statuses = {
                s.provider_id: s.status
                for s in await asyncio.wait_for(app.connections.list_all_statuses(), 2)
            }

        assert statuses == {
            "a": ConnectionStatus.CONNECTED,
            "b": ConnectionStatus.ERROR,
            "c": ConnectionStatus.ERROR,
        }

    @pytest.mark.asyncio
    async def test_reconnect_through_connection_test(self, config, files_tools, log_output):
        attempts = {"count": 0}

        def configure(client):
            attempts["count"] += 1
            if attempts["count"] == 1:
                client.enter_error = ConnectionRefusedError("not yet")

        factory = FakeClientFactory(default_tools=files_tools, configure=configure)
        config.mcp_servers = {"files": ProviderConfig(command="files-server", enabled=True)}

        async with BridgeApplication(
            config=config, client_factory=factory, log_output=log_output
        ) as app:
            assert not app.connections.has_provider("files")

            result = await app.service.test_connection("files")

            assert result.previous_status == ConnectionStatus.DISCONNECTED
            assert result.current_status == ConnectionStatus.CONNECTED
            assert "mcp_bridge.files.read" in app.tool_registry
