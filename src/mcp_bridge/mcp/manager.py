"""Connection Registry - owns every provider connection, keyed by provider id."""

import asyncio
from typing import Any

from mcp_bridge.config.loader import validate_provider
from mcp_bridge.config.models import DispatchConfig, ProviderConfig
from mcp_bridge.errors import create_error
from mcp_bridge.logging import BridgeLogger
from mcp_bridge.telemetry import BridgeMetrics
from mcp_bridge.types import ConnectionStatus, LogLevel

from .connection import ClientFactory, ProviderConnection
from .types import ConnectionTestResult, ProviderStatus, ToolDescriptor


class ConnectionRegistry:
    """Manages all provider connections.

    At most one live connection exists per provider id. Mutations of a slot
    (add, remove, reconnect) are serialized by a per-provider lock; work on
    different providers proceeds concurrently.
    """

    def __init__(
        self,
        logger: BridgeLogger | None = None,
        client_factory: ClientFactory | None = None,
        dispatch_config: DispatchConfig | None = None,
        metrics: BridgeMetrics | None = None,
    ):
        """Initialize connection registry.

        Args:
            logger: Optional logger
            client_factory: Optional protocol client factory for new connections
            dispatch_config: Timing settings passed to each connection
            metrics: Optional metrics for connected-provider tracking
        """
        self._connections: dict[str, ProviderConnection] = {}
        self._slot_locks: dict[str, asyncio.Lock] = {}
        self._logger = logger
        self._client_factory = client_factory
        self._dispatch = dispatch_config or DispatchConfig()
        self._metrics = metrics

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "registry", message, context)

    def _slot_lock(self, provider_id: str) -> asyncio.Lock:
        return self._slot_locks.setdefault(provider_id, asyncio.Lock())

    def _new_connection(self, provider_id: str, config: ProviderConfig) -> ProviderConnection:
        return ProviderConnection(
            provider_id=provider_id,
            config=config,
            logger=self._logger,
            client_factory=self._client_factory,
            settle_delay=self._dispatch.settle_delay_seconds,
            probe_timeout=self._dispatch.probe_timeout_seconds,
            disconnect_timeout=self._dispatch.disconnect_timeout_seconds,
        )

    async def add_provider(
        self, provider_id: str, config: ProviderConfig
    ) -> ProviderConnection | None:
        """Connect a provider, replacing any live connection for the same id.

        The definition is validated before anything is touched; an invalid
        one leaves the current connection intact. Otherwise the old
        connection is removed and closed before the new one opens, and the
        new one becomes visible only once fully connected.

        Args:
            provider_id: Provider identifier
            config: Provider definition

        Returns:
            The new connection, or None when the definition is disabled

        Raises:
            BridgeError(CONFIG_INVALID) if the definition is invalid
            BridgeError(TRANSPORT_ERROR) if the provider cannot be reached
        """
        errors = [
            issue
            for issue in validate_provider(provider_id, config.to_dict())
            if issue.severity == "error"
        ]
        if errors:
            raise create_error(
                "CONFIG_INVALID",
                provider_id=provider_id,
                detail="; ".join(issue.message for issue in errors),
            )

        async with self._slot_lock(provider_id):
            await self._remove_locked(provider_id, reason="replaced")

            if not config.enabled:
                self._log(LogLevel.INFO, f"Provider '{provider_id}' is disabled, not connecting")
                return None

            connection = self._new_connection(provider_id, config)
            await connection.connect()

            self._connections[provider_id] = connection
            if self._metrics:
                self._metrics.provider_connected(provider_id)
            return connection

    async def remove_provider(self, provider_id: str) -> bool:
        """Disconnect and remove a provider. No-op if absent.

        Returns:
            True if a connection was removed
        """
        async with self._slot_lock(provider_id):
            return await self._remove_locked(provider_id, reason="removed")

    async def _remove_locked(self, provider_id: str, reason: str) -> bool:
        connection = self._connections.pop(provider_id, None)
        if connection is None:
            return False

        await connection.disconnect(reason=reason)
        if self._metrics:
            self._metrics.provider_disconnected(provider_id)
        return True

    def get_connection(self, provider_id: str) -> ProviderConnection | None:
        return self._connections.get(provider_id)

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self._connections

    def provider_ids(self) -> list[str]:
        return list(self._connections.keys())

    def list_tools(self, provider_id: str) -> list[ToolDescriptor]:
        """Cached catalog of a provider (empty when not connected)."""
        connection = self._connections.get(provider_id)
        return connection.list_tools() if connection else []

    async def list_all_statuses(self) -> list[ProviderStatus]:
        """Probe every connection concurrently.

        A failing or hanging probe only affects its own entry.
        """
        items = list(self._connections.items())
        results = await asyncio.gather(
            *(conn.probe_status() for _, conn in items),
            return_exceptions=True,
        )

        statuses = []
        for (provider_id, conn), result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                self._log(
                    LogLevel.WARN,
                    f"Status probe for '{provider_id}' failed: {result}",
                    provider_id=provider_id,
                )
                statuses.append(
                    ProviderStatus(
                        provider_id=provider_id,
                        status=ConnectionStatus.ERROR,
                        tools_count=len(conn.list_tools()),
                        error=str(result),
                    )
                )
            else:
                statuses.append(
                    ProviderStatus(
                        provider_id=provider_id,
                        status=result,
                        tools_count=len(conn.list_tools()),
                        error=conn.last_error,
                    )
                )
        return statuses

    async def get_status(self, provider_id: str) -> ConnectionStatus:
        """Probe one provider; DISCONNECTED if it has no connection."""
        connection = self._connections.get(provider_id)
        if connection is None:
            return ConnectionStatus.DISCONNECTED
        return await connection.probe_status()

    async def test_connection(
        self, provider_id: str, config: ProviderConfig
    ) -> ConnectionTestResult:
        """Probe a provider and, unless connected, rebuild it exactly once.

        This is the only automatic reconnect path. Never raises.
        """
        previous = await self.get_status(provider_id)
        error: str | None = None

        if previous != ConnectionStatus.CONNECTED:
            if self._logger:
                self._logger.connection(provider_id).reconnecting(previous.value)
            try:
                await self.add_provider(provider_id, config)
            except Exception as e:
                error = str(e)

        current = await self.get_status(provider_id)
        return ConnectionTestResult(
            provider_id=provider_id,
            previous_status=previous,
            current_status=current,
            connected=current == ConnectionStatus.CONNECTED,
            tools_count=len(self.list_tools(provider_id)),
            error=error,
        )

    async def call_tool(self, provider_id: str, tool_name: str, arguments: dict[str, Any]) -> Any:
        """Route a call to the provider's connection.

        Raises:
            BridgeError(NOT_CONNECTED) if the provider has no connection
        """
        connection = self._connections.get(provider_id)
        if connection is None:
            raise create_error("NOT_CONNECTED", provider_id=provider_id, tool_name=tool_name)
        return await connection.call_tool(tool_name, arguments)

    async def refresh_tools(self, provider_id: str) -> list[ToolDescriptor]:
        """Re-list a provider's tools.

        Raises:
            BridgeError(NOT_CONNECTED) if the provider has no connection
        """
        connection = self._connections.get(provider_id)
        if connection is None:
            raise create_error("NOT_CONNECTED", provider_id=provider_id)
        return await connection.refresh_tools()

    async def disconnect_all(self) -> None:
        """Disconnect every provider. Failures are logged, not raised."""
        provider_ids = list(self._connections.keys())
        if not provider_ids:
            return

        self._log(LogLevel.INFO, f"Disconnecting {len(provider_ids)} providers")
        results = await asyncio.gather(
            *(self.remove_provider(pid) for pid in provider_ids),
            return_exceptions=True,
        )
        for provider_id, result in zip(provider_ids, results, strict=True):
            if isinstance(result, BaseException):
                self._log(
                    LogLevel.ERROR,
                    f"Failed to disconnect '{provider_id}': {result}",
                    provider_id=provider_id,
                )
