"""Bridge Application - wires all components with an explicit lifecycle.

One instance per process: ``initialize()`` builds every component once and
connects the configured providers, ``shutdown()`` tears them down.
"""

import asyncio
import os
import sys
from dataclasses import replace
from typing import Any, TextIO

from mcp_bridge.config import (
    BridgeConfig,
    ConfigLoader,
    ConfigStore,
    InMemoryConfigStore,
    server_key,
)
from mcp_bridge.errors import ErrorFactory, ErrorRegistry
from mcp_bridge.invoker import CallContext, CallDispatcher, CallResult
from mcp_bridge.logging import BridgeLogger, LogConfig
from mcp_bridge.mcp import ClientFactory, ConnectionRegistry
from mcp_bridge.registry import ToolRegistry
from mcp_bridge.service import ProviderService
from mcp_bridge.telemetry import setup_telemetry
from mcp_bridge.types import LogLevel

TELEMETRY_ENABLED_ENV = "MCP_BRIDGE_TELEMETRY_ENABLED"


class BridgeApplication:
    """
    Bridge application orchestrator.

    Initialization sequence:

    1. Config loading
    2. Logger setup
    3. Telemetry setup
    4. Error registry
    5. Config store (seeded with configured providers)
    6. Connection registry, tool registry, dispatcher, provider service
    7. Connect every enabled provider and publish its tools
    """

    def __init__(
        self,
        config_path: str | None = None,
        config: BridgeConfig | None = None,
        store: ConfigStore | None = None,
        client_factory: ClientFactory | None = None,
        log_output: TextIO | None = None,
    ):
        """Initialize application.

        Args:
            config_path: Path to config file (optional)
            config: Already-loaded configuration (skips file loading)
            store: Configuration store (default: in-memory)
            client_factory: Protocol client factory (default: FastMCP)
            log_output: Output stream for logs (default: sys.stdout)
        """
        self._config_path = config_path
        self._log_output = log_output or sys.stdout
        self._client_factory = client_factory
        self._initialized = False

        # Components (initialized in initialize())
        self.config: BridgeConfig | None = config
        self.store: ConfigStore | None = store
        self.logger: BridgeLogger | None = None
        self.error_registry: ErrorRegistry | None = None
        self.error_factory: ErrorFactory | None = None
        self.telemetry: dict[str, Any] | None = None
        self.connections: ConnectionRegistry | None = None
        self.tool_registry: ToolRegistry | None = None
        self.dispatcher: CallDispatcher | None = None
        self.service: ProviderService | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize all components and connect configured providers.

        A provider that fails to connect is logged and skipped; it does not
        stop the others or the application.
        """
        if self._initialized:
            return

        # 1. Config
        if self.config is None:
            self.config = ConfigLoader().load(self._config_path)
        config = self.config

        # 2. Logger
        self.logger = BridgeLogger(
            LogConfig(
                level=config.logging.level,
                format=config.logging.format,
                show_params=config.logging.show_params,
                show_results=config.logging.show_results,
                truncate_at=config.logging.truncate_at,
                output=self._log_output,
            )
        )

        # 3. Telemetry
        env_enabled = os.environ.get(TELEMETRY_ENABLED_ENV)
        telemetry_config = config.telemetry
        if env_enabled is not None:
            telemetry_config = replace(telemetry_config, enabled=env_enabled.lower() == "true")
        self.telemetry = setup_telemetry(telemetry_config)

        # 4. Error Registry & Factory
        self.error_registry = ErrorRegistry()
        self.error_factory = ErrorFactory(self.error_registry)

        # 5. Config store
        if self.store is None:
            self.store = InMemoryConfigStore()
        for provider_id, provider_config in config.mcp_servers.items():
            if not self.store.has(server_key(provider_id)):
                self.store.set(server_key(provider_id), provider_config.to_dict())

        # 6. Components
        self.connections = ConnectionRegistry(
            logger=self.logger,
            client_factory=self._client_factory,
            dispatch_config=config.dispatch,
            metrics=self.telemetry.get("metrics"),
        )
        self.tool_registry = ToolRegistry(logger=self.logger)
        self.dispatcher = CallDispatcher(
            self.connections,
            logger=self.logger,
            error_factory=self.error_factory,
            config=config.dispatch,
        )
        self.service = ProviderService(
            self.connections,
            self.tool_registry,
            self.dispatcher,
            self.store,
            logger=self.logger,
        )

        # 7. Connect providers
        await self._connect_stored_providers()

        self._initialized = True

    async def _connect_stored_providers(self) -> None:
        assert self.service is not None and self.logger is not None

        pending = []
        for provider_id, provider_config in self.service.stored_configs():
            if not provider_config.enabled:
                self.logger._log(
                    LogLevel.INFO,
                    "service",
                    f"Skipping disabled provider '{provider_id}'",
                    {"provider_id": provider_id},
                )
                continue
            pending.append((provider_id, provider_config))

        if not pending:
            return

        results = await asyncio.gather(
            *(self.service.add_server(pid, cfg) for pid, cfg in pending),
            return_exceptions=True,
        )
        connected = sum(1 for r in results if not isinstance(r, BaseException))
        self.logger._log(
            LogLevel.INFO,
            "service",
            f"Connected to {connected}/{len(pending)} providers",
            {"connected": connected, "configured": len(pending)},
        )

    async def shutdown(self) -> None:
        """Disconnect every provider and drop published tools."""
        if not self._initialized:
            return

        if self.connections:
            await self.connections.disconnect_all()
        if self.tool_registry:
            self.tool_registry.clear()

        self._initialized = False

    async def call_tool(
        self,
        tool_id: str,
        arguments: dict[str, Any] | None = None,
        context: CallContext | None = None,
    ) -> CallResult:
        """Invoke a bridged tool by id.

        Raises:
            RuntimeError: If the application is not initialized
        """
        if not self.dispatcher:
            raise RuntimeError("Application not initialized")
        return await self.dispatcher.invoke(tool_id, arguments, context)

    async def __aenter__(self) -> "BridgeApplication":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()
