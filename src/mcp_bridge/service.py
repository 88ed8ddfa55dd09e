"""Provider service - provider management over the registries and config store.

Keeps three things in step: the live connection, the stored definition
under ``mcpServers.<provider_id>``, and the caller-facing tools published
for that provider.
"""

from dataclasses import dataclass, field
from typing import Any

from mcp_bridge.config.models import ProviderConfig
from mcp_bridge.config.store import SERVERS_KEY, ConfigStore, server_key
from mcp_bridge.errors import create_error
from mcp_bridge.invoker import CallDispatcher
from mcp_bridge.logging import BridgeLogger
from mcp_bridge.mcp import ConnectionRegistry, ConnectionTestResult, ToolDescriptor
from mcp_bridge.registry import BridgeTool, ToolIdCodec, ToolRegistry
from mcp_bridge.types import ConnectionStatus, LogLevel


@dataclass
class ServerInfo:
    """A configured provider with its probed status."""

    provider_id: str
    config: ProviderConfig
    status: ConnectionStatus
    tools_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.provider_id,
            "config": self.config.to_dict(),
            "status": self.status.value,
            "tools_count": self.tools_count,
        }


@dataclass
class BridgeStats:
    """Provider and tool counts."""

    total_servers: int = 0
    connected_servers: int = 0
    disconnected_servers: int = 0
    total_tools: int = 0
    servers: list[ServerInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_servers": self.total_servers,
            "connected_servers": self.connected_servers,
            "disconnected_servers": self.disconnected_servers,
            "total_tools": self.total_tools,
            "servers": [s.to_dict() for s in self.servers],
        }


class ProviderService:
    """Add, remove, list and test providers."""

    def __init__(
        self,
        connections: ConnectionRegistry,
        tools: ToolRegistry,
        dispatcher: CallDispatcher,
        store: ConfigStore,
        logger: BridgeLogger | None = None,
    ):
        """Initialize provider service.

        Args:
            connections: Connection registry
            tools: Caller-facing tool registry to publish into
            dispatcher: Dispatcher whose handlers back published tools
            store: Configuration store holding provider definitions
            logger: Optional logger
        """
        self._connections = connections
        self._tools = tools
        self._dispatcher = dispatcher
        self._store = store
        self._logger = logger
        self._published: dict[str, list[str]] = {}

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "service", message, context)

    async def add_server(self, provider_id: str, config: ProviderConfig) -> list[BridgeTool]:
        """Connect a provider, store its definition and publish its tools.

        Returns:
            Tools published for the provider

        Raises:
            BridgeError if the definition is invalid or the provider is unreachable
        """
        try:
            await self._connections.add_provider(provider_id, config)
        except Exception as e:
            self._log(
                LogLevel.ERROR,
                f"Failed to add provider '{provider_id}': {e}",
                provider_id=provider_id,
            )
            # A rejected definition keeps the old connection and its tools
            if not self._connections.has_provider(provider_id):
                self.unpublish_tools(provider_id)
            raise

        self._store.set(server_key(provider_id), config.to_dict())
        published = self.publish_tools(provider_id)
        self._log(
            LogLevel.INFO,
            f"Provider '{provider_id}' added with {len(published)} tools",
            provider_id=provider_id,
        )
        return published

    async def remove_server(self, provider_id: str) -> None:
        """Disconnect a provider, delete its definition and unpublish its tools."""
        await self._connections.remove_provider(provider_id)
        self._store.delete(server_key(provider_id))
        self.unpublish_tools(provider_id)
        self._log(LogLevel.INFO, f"Provider '{provider_id}' removed", provider_id=provider_id)

    def get_server_config(self, provider_id: str) -> ProviderConfig | None:
        data = self._store.get(server_key(provider_id))
        if data is None:
            return None
        return ProviderConfig.from_dict(data)

    def stored_configs(self) -> list[tuple[str, ProviderConfig]]:
        """(provider_id, config) pairs from the store, in stored order.

        Definitions that cannot be parsed are logged and skipped.
        """
        section = self._store.get(SERVERS_KEY) or {}
        pairs = []
        for provider_id, data in section.items():
            try:
                pairs.append((str(provider_id), ProviderConfig.from_dict(data)))
            except (TypeError, ValueError, AttributeError) as e:
                self._log(
                    LogLevel.WARN,
                    f"Skipping unreadable definition for '{provider_id}': {e}",
                    provider_id=provider_id,
                )
        return pairs

    async def list_servers(self) -> list[ServerInfo]:
        """Every stored provider with its current status."""
        statuses = {s.provider_id: s for s in await self._connections.list_all_statuses()}

        servers = []
        for provider_id, config in self.stored_configs():
            status = statuses.get(provider_id)
            servers.append(
                ServerInfo(
                    provider_id=provider_id,
                    config=config,
                    status=status.status if status else ConnectionStatus.DISCONNECTED,
                    tools_count=status.tools_count if status else 0,
                )
            )
        return servers

    async def test_connection(self, provider_id: str) -> ConnectionTestResult:
        """Probe a stored provider, reconnecting once if it is not connected.

        Never raises; problems are reported in the result.
        """
        try:
            config = self.get_server_config(provider_id)
        except (TypeError, ValueError, AttributeError) as e:
            config = None
            error = f"Unreadable definition for provider '{provider_id}': {e}"
        else:
            error = f"Provider '{provider_id}' is not configured"

        if config is None:
            status = await self._connections.get_status(provider_id)
            return ConnectionTestResult(
                provider_id=provider_id,
                previous_status=status,
                current_status=status,
                connected=status == ConnectionStatus.CONNECTED,
                error=error,
            )

        result = await self._connections.test_connection(provider_id, config)
        if result.previous_status != ConnectionStatus.CONNECTED:
            if result.connected:
                self.publish_tools(provider_id)
            else:
                self.unpublish_tools(provider_id)

        self._log(
            LogLevel.INFO,
            f"Connection test for '{provider_id}': "
            f"{result.previous_status.value} -> {result.current_status.value}",
            provider_id=provider_id,
            connected=result.connected,
        )
        return result

    async def batch_test_connections(self, provider_ids: list[str]) -> list[ConnectionTestResult]:
        """Test providers one at a time; one result per id, in order."""
        return [await self.test_connection(provider_id) for provider_id in provider_ids]

    def get_server_tools(self, provider_id: str) -> list[ToolDescriptor]:
        """Cached tool catalog of a connected provider.

        Raises:
            BridgeError(NOT_CONNECTED) if the provider has no connection
        """
        if not self._connections.has_provider(provider_id):
            raise create_error("NOT_CONNECTED", provider_id=provider_id)
        return self._connections.list_tools(provider_id)

    async def get_stats(self) -> BridgeStats:
        servers = await self.list_servers()
        connected = sum(1 for s in servers if s.status == ConnectionStatus.CONNECTED)
        stats = BridgeStats(
            total_servers=len(servers),
            connected_servers=connected,
            disconnected_servers=len(servers) - connected,
            total_tools=sum(s.tools_count for s in servers),
            servers=servers,
        )
        self._log(
            LogLevel.DEBUG,
            "Provider stats",
            total_servers=stats.total_servers,
            connected_servers=stats.connected_servers,
            total_tools=stats.total_tools,
        )
        return stats

    def publish_tools(self, provider_id: str) -> list[BridgeTool]:
        """Replace the caller-facing tools of a provider with its current catalog."""
        self.unpublish_tools(provider_id)

        tools = []
        for descriptor in self._connections.list_tools(provider_id):
            if ToolIdCodec.SEPARATOR in descriptor.name:
                self._log(
                    LogLevel.WARN,
                    f"Tool '{descriptor.name}' on '{provider_id}' cannot be bridged: "
                    f"name contains '{ToolIdCodec.SEPARATOR}'",
                    provider_id=provider_id,
                )
                continue
            tools.append(
                BridgeTool(
                    id=ToolIdCodec.encode(provider_id, descriptor.name),
                    name=descriptor.name,
                    description=descriptor.description,
                    parameters=descriptor.input_schema,
                    handler=self._dispatcher.create_handler(provider_id, descriptor.name),
                )
            )

        self._tools.batch_register(tools)
        self._published[provider_id] = [tool.id for tool in tools]
        return tools

    def unpublish_tools(self, provider_id: str) -> int:
        tool_ids = self._published.pop(provider_id, [])
        for tool_id in tool_ids:
            self._tools.unregister(tool_id)
        return len(tool_ids)
