"""Bridge configuration data models."""

from dataclasses import dataclass, field
from typing import Any

from mcp_bridge.telemetry import TelemetryConfig
from mcp_bridge.types import LogFormat, LogLevel, MCPTransport


@dataclass(frozen=True)
class ProviderConfig:
    """Definition of a provider server to connect to.

    Frozen: a live connection keeps the config it was opened with, and a
    changed definition means disconnect + reconnect.
    """

    transport: MCPTransport = MCPTransport.STDIO
    command: str | None = None  # For stdio: executable (or full command line when args is empty)
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None  # For http: server URL
    headers: dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    timeout: int = 30

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the config store."""
        data: dict[str, Any] = {
            "transport": self.transport.value,
            "enabled": self.enabled,
            "timeout": self.timeout,
        }
        if self.transport == MCPTransport.STDIO:
            data["command"] = self.command
            data["args"] = list(self.args)
            data["env"] = dict(self.env)
        else:
            data["url"] = self.url
            data["headers"] = dict(self.headers)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderConfig":
        """Build from a stored mapping.

        Accepts "type" as an alias for "transport". Stored providers must be
        explicitly enabled.
        """
        transport = data.get("transport", data.get("type", MCPTransport.STDIO))
        return cls(
            transport=MCPTransport(transport),
            command=data.get("command"),
            args=list(data.get("args") or []),
            env=dict(data.get("env") or {}),
            url=data.get("url"),
            headers=dict(data.get("headers") or {}),
            enabled=bool(data.get("enabled", False)),
            timeout=int(data.get("timeout", 30)),
        )


@dataclass
class DispatchConfig:
    """Connection and call-dispatch tuning."""

    slow_call_threshold_ms: float = 500.0
    settle_delay_seconds: float = 1.0  # fixed wait between transport open and catalog listing
    probe_timeout_seconds: float = 10.0
    disconnect_timeout_seconds: float = 5.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200


@dataclass
class BridgeConfig:
    """Root bridge configuration."""

    mcp_servers: dict[str, ProviderConfig] = field(default_factory=dict)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
