"""Provider Connection - owns one live session to a single provider server.

Uses the FastMCP client library for the MCP protocol; this module only
manages transport lifetime, the cached tool catalog and serialization of
operations against the session.
"""

import asyncio
import shlex
import time
from collections.abc import Callable
from contextlib import AsyncExitStack
from datetime import UTC, datetime
from typing import Any

from fastmcp.client import Client
from fastmcp.client.transports import (
    ClientTransport,
    SSETransport,
    StdioTransport,
    StreamableHttpTransport,
)

from mcp_bridge.config.models import ProviderConfig
from mcp_bridge.errors import BridgeError, create_error
from mcp_bridge.logging import BridgeLogger
from mcp_bridge.types import ConnectionStatus, LogLevel, MCPTransport

from .types import ToolDescriptor

# Builds the (not yet entered) protocol client for a provider.
# Receives: provider_id, config
ClientFactory = Callable[[str, ProviderConfig], Any]


def build_transport(provider_id: str, config: ProviderConfig) -> ClientTransport:
    """Build the FastMCP transport for a provider definition.

    Raises:
        BridgeError(CONFIG_INVALID) if the definition cannot produce a transport
    """
    if config.transport == MCPTransport.STDIO:
        if not config.command:
            raise create_error(
                "CONFIG_INVALID",
                provider_id=provider_id,
                detail=f"No command specified for stdio provider '{provider_id}'",
            )

        if config.args:
            command, args = config.command, list(config.args)
        else:
            # Whole command line in one string; use shlex to handle quoting
            try:
                cmd_parts = shlex.split(config.command)
            except ValueError as e:
                raise create_error(
                    "CONFIG_INVALID",
                    provider_id=provider_id,
                    detail=f"Invalid command for stdio provider '{provider_id}': {e}",
                ) from e
            if not cmd_parts:
                raise create_error(
                    "CONFIG_INVALID",
                    provider_id=provider_id,
                    detail=f"Empty command for stdio provider '{provider_id}'",
                )
            command, args = cmd_parts[0], cmd_parts[1:]

        return StdioTransport(command=command, args=args, env=dict(config.env) or None)

    if not config.url:
        raise create_error(
            "CONFIG_INVALID",
            provider_id=provider_id,
            detail=f"No URL specified for http provider '{provider_id}'",
        )
    url = config.url.rstrip("/")
    headers = dict(config.headers) or None
    if url.endswith("/sse"):
        return SSETransport(url=url, headers=headers)
    return StreamableHttpTransport(url=url, headers=headers)


def default_client_factory(provider_id: str, config: ProviderConfig) -> Client:
    """Create a FastMCP client for the provider."""
    return Client(transport=build_transport(provider_id, config), timeout=config.timeout)


class ProviderConnection:
    """Single provider connection.

    State machine: DISCONNECTED -> CONNECTING -> CONNECTED, with ERROR on a
    failed connect. One lock guards the client handle and the tool catalog,
    so calls, probes and refreshes never run against a closing session.
    """

    def __init__(
        self,
        provider_id: str,
        config: ProviderConfig,
        logger: BridgeLogger | None = None,
        client_factory: ClientFactory | None = None,
        settle_delay: float = 1.0,
        probe_timeout: float = 10.0,
        disconnect_timeout: float = 5.0,
    ):
        """Initialize provider connection.

        Args:
            provider_id: Provider identifier
            config: Provider definition
            logger: Optional logger
            client_factory: Builds the protocol client (defaults to FastMCP)
            settle_delay: Fixed wait between transport open and catalog listing
            probe_timeout: Upper bound on a liveness probe in seconds
            disconnect_timeout: Upper bound on transport close in seconds
        """
        self.provider_id = provider_id
        self.config = config
        self._logger = logger
        self._client_factory = client_factory or default_client_factory
        self._settle_delay = settle_delay
        self._probe_timeout = probe_timeout
        self._disconnect_timeout = disconnect_timeout

        self._status = ConnectionStatus.DISCONNECTED
        self._tools: dict[str, ToolDescriptor] = {}
        self._connected_at: datetime | None = None
        self._last_error: str | None = None

        self._client: Any = None
        self._exit_stack: AsyncExitStack | None = None
        self._lock = asyncio.Lock()

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, f"connection.{self.provider_id}", message, context)

    @property
    def status(self) -> ConnectionStatus:
        """Lifecycle state (not a liveness check, see probe_status)."""
        return self._status

    @property
    def connected_at(self) -> datetime | None:
        return self._connected_at

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def get_tool(self, name: str) -> ToolDescriptor | None:
        """Get a cached tool descriptor by provider tool name."""
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDescriptor]:
        """Cached tool catalog. Does not query the provider."""
        return list(self._tools.values())

    async def connect(self, config: ProviderConfig | None = None) -> None:
        """Open the transport and load the tool catalog.

        Single attempt. On failure the session is torn down completely and
        the error is raised; nothing is left half-initialized.

        Args:
            config: Replacement definition (only while not connected)

        Raises:
            BridgeError(TRANSPORT_ERROR) if the provider cannot be reached
            BridgeError(CONFIG_INVALID) if the definition cannot produce a transport
        """
        async with self._lock:
            if self._status == ConnectionStatus.CONNECTED:
                self._log(LogLevel.DEBUG, "Already connected")
                return

            if config is not None:
                self.config = config

            conn_log = self._logger.connection(self.provider_id) if self._logger else None
            if conn_log:
                conn_log.connecting(self.config.transport.value)

            self._status = ConnectionStatus.CONNECTING
            start_time = time.perf_counter()

            try:
                self._client = self._client_factory(self.provider_id, self.config)
                self._exit_stack = AsyncExitStack()
                await self._exit_stack.enter_async_context(self._client)

                # Some providers answer tools/list incorrectly right after the handshake
                if self._settle_delay > 0:
                    await asyncio.sleep(self._settle_delay)

                self._tools = await self._fetch_tools()
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                await self._teardown()
                self._status = ConnectionStatus.ERROR
                self._last_error = str(e)
                if conn_log:
                    conn_log.failed(e, duration_ms)
                if isinstance(e, BridgeError):
                    raise
                raise create_error(
                    "TRANSPORT_ERROR",
                    provider_id=self.provider_id,
                    reason=str(e) or type(e).__name__,
                ) from e

            self._status = ConnectionStatus.CONNECTED
            self._connected_at = datetime.now(UTC)
            self._last_error = None
            if conn_log:
                conn_log.connected(len(self._tools), (time.perf_counter() - start_time) * 1000)

    async def disconnect(self, reason: str | None = None) -> None:
        """Close the transport. Safe to call when already disconnected."""
        async with self._lock:
            if self._exit_stack is None and self._status != ConnectionStatus.CONNECTED:
                self._status = ConnectionStatus.DISCONNECTED
                return

            await self._teardown()
            self._status = ConnectionStatus.DISCONNECTED
            self._connected_at = None

        if self._logger:
            self._logger.connection(self.provider_id).disconnected(reason)

    async def _teardown(self) -> None:
        if self._exit_stack:
            try:
                await asyncio.wait_for(self._exit_stack.aclose(), timeout=self._disconnect_timeout)
            except TimeoutError:
                self._log(
                    LogLevel.WARN,
                    f"Timeout ({self._disconnect_timeout}s) during disconnect, forcing close",
                )
            except Exception as e:
                self._log(LogLevel.WARN, f"Error during disconnect: {e}")
            self._exit_stack = None

        self._client = None
        self._tools.clear()

    async def _fetch_tools(self) -> dict[str, ToolDescriptor]:
        tools_result = await self._client.list_tools()

        catalog: dict[str, ToolDescriptor] = {}
        for tool in tools_result:
            descriptor = ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=getattr(tool, "inputSchema", None) or {},
            )
            catalog[descriptor.name] = descriptor
        return catalog

    async def refresh_tools(self) -> list[ToolDescriptor]:
        """Re-list tools from the provider and replace the cached catalog.

        Raises:
            BridgeError(NOT_CONNECTED) if not connected
        """
        async with self._lock:
            self._require_connected()
            self._tools = await self._fetch_tools()
            self._log(LogLevel.DEBUG, f"Refreshed {len(self._tools)} tools")
            return list(self._tools.values())

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """Call a tool on this provider.

        The catalog is checked first, so unknown tools never cost a round
        trip. Provider errors propagate unmodified.

        Returns:
            Raw provider result

        Raises:
            BridgeError(NOT_CONNECTED) if not connected
            BridgeError(TOOL_NOT_FOUND) if the tool is not in the catalog
        """
        async with self._lock:
            self._require_connected()

            if tool_name not in self._tools:
                raise create_error(
                    "TOOL_NOT_FOUND",
                    provider_id=self.provider_id,
                    tool_name=tool_name,
                )

            return await self._client.call_tool(tool_name, arguments)

    async def probe_status(self) -> ConnectionStatus:
        """Liveness probe: a live tools/list, bounded by probe_timeout.

        The timeout covers waiting for the connection lock too, so a call in
        flight shows as ERROR rather than delaying the probe. Never raises.
        The cached catalog is left untouched.
        """
        try:
            return await asyncio.wait_for(self._locked_probe(), timeout=self._probe_timeout)
        except Exception as e:
            reason = str(e) or f"no answer within {self._probe_timeout}s"
            self._log(LogLevel.WARN, f"Status probe failed: {reason}", error=reason)
            return ConnectionStatus.ERROR

    async def _locked_probe(self) -> ConnectionStatus:
        async with self._lock:
            if self._client is None or self._status != ConnectionStatus.CONNECTED:
                return ConnectionStatus.DISCONNECTED
            await self._client.list_tools()
            return ConnectionStatus.CONNECTED

    def _require_connected(self) -> None:
        if self._status != ConnectionStatus.CONNECTED or self._client is None:
            raise create_error("NOT_CONNECTED", provider_id=self.provider_id)
