"""Tool Registry types."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_bridge.invoker.types import CallContext, CallResult

# Caller-facing handler: (arguments, context) -> CallResult
ToolHandler = Callable[[dict[str, Any], "CallContext | None"], Awaitable["CallResult"]]


@dataclass
class BridgeTool:
    """Caller-facing tool descriptor.

    ``handler`` is the dispatcher bound to one (provider_id, tool_name) pair.
    """

    id: str
    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    handler: ToolHandler | None = None

    def to_dict(self) -> dict[str, Any]:
        """Descriptor without the handler."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }
