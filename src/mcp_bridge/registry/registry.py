"""Tool Registry - caller-facing catalog of bridged tools."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from mcp_bridge.logging import BridgeLogger
from mcp_bridge.types import LogLevel

from .types import BridgeTool


class ToolRegistry:
    """Caller-facing tools keyed by id.

    Registering an existing id replaces it (last write wins). Listing
    preserves first-registration order.
    """

    def __init__(self, logger: BridgeLogger | None = None):
        self._tools: dict[str, BridgeTool] = {}
        self._logger = logger

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "registry", message, context)

    def register(self, tool: BridgeTool) -> None:
        replaced = tool.id in self._tools
        self._tools[tool.id] = tool
        self._log(
            LogLevel.DEBUG,
            f"{'Replaced' if replaced else 'Registered'} tool '{tool.id}'",
            tool_id=tool.id,
        )

    def batch_register(self, tools: Iterable[BridgeTool]) -> int:
        """Register several tools.

        Returns:
            Number of tools registered
        """
        count = 0
        for tool in tools:
            self.register(tool)
            count += 1
        if count:
            self._log(LogLevel.INFO, f"Registered {count} tools")
        return count

    def unregister(self, tool_id: str) -> bool:
        """Remove a tool. Returns False if it was not registered."""
        removed = self._tools.pop(tool_id, None) is not None
        if removed:
            self._log(LogLevel.DEBUG, f"Unregistered tool '{tool_id}'", tool_id=tool_id)
        return removed

    def get(self, tool_id: str) -> BridgeTool | None:
        return self._tools.get(tool_id)

    def list(self) -> list[BridgeTool]:
        return list(self._tools.values())

    def clear(self) -> None:
        self._tools.clear()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools
