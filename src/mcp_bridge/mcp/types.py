"""Provider connection types."""

from dataclasses import dataclass, field
from typing import Any

from mcp_bridge.types import ConnectionStatus


@dataclass
class ToolDescriptor:
    """Tool advertised by a provider.

    ``name`` is unique within its provider's catalog.
    """

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProviderStatus:
    """Probed status of one provider connection."""

    provider_id: str
    status: ConnectionStatus
    tools_count: int = 0
    error: str | None = None


@dataclass
class ConnectionTestResult:
    """Outcome of a connection test (probe, then at most one reconnect)."""

    provider_id: str
    previous_status: ConnectionStatus
    current_status: ConnectionStatus
    connected: bool
    tools_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "previous_status": self.previous_status.value,
            "current_status": self.current_status.value,
            "connected": self.connected,
            "tools_count": self.tools_count,
            "error": self.error,
        }
