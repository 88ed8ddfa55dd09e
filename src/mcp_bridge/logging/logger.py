"""Bridge logger - component logging for provider connections and tool calls."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from mcp_bridge.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from mcp_bridge.types import LogFormat, LogLevel


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stdout)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {
                "connection": True,
                "registry": True,
                "dispatcher": True,
                "call": True,
                "service": True,
            }


def truncate(value: Any, limit: int) -> str:
    """Render a value as compact JSON (falling back to str) and cut it to limit."""
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            text = str(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class BridgeLogger:
    """Main logger facade. Creates component-specific loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def connection(self, provider_id: str) -> "ConnectionLogger":
        """Get a logger scoped to one provider connection."""
        return ConnectionLogger(self, provider_id)

    def call(self, provider_id: str, tool_name: str) -> "CallLogger":
        """Get a logger scoped to one tool call."""
        return CallLogger(self, provider_id, tool_name)

    def configure(self, config: LogConfig) -> None:
        """Update configuration (for hot-reload)."""
        self.config = config

    def _should_log(self, level: LogLevel) -> bool:
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Emit one structured event.

        Args:
            level: Log level
            component: Component name (connection, registry, dispatcher, call, service)
            message: Log message
            context: Structured fields attached to the event
        """
        if not self._should_log(level):
            return

        # Sub-components such as "connection.files" follow their root toggle
        root = component.split(".", 1)[0]
        if not self.config.components.get(root, True):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "connection": GREEN,
            "registry": MAGENTA,
            "dispatcher": CYAN,
            "call": ORANGE,
        }.get(component.split(".", 1)[0], RESET)

        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_params:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class ConnectionLogger:
    """Logger for provider connection lifecycle events."""

    def __init__(self, parent: BridgeLogger, provider_id: str):
        self.parent = parent
        self.provider_id = provider_id

    @property
    def component(self) -> str:
        return f"connection.{self.provider_id}"

    def _context(self, event: str, **fields: Any) -> dict[str, Any]:
        context = {"provider_id": self.provider_id, "event": event}
        context.update({k: v for k, v in fields.items() if v is not None})
        return context

    def connecting(self, transport: str) -> None:
        """Log connect attempt."""
        self.parent._log(
            LogLevel.INFO,
            self.component,
            f"Connecting to provider (transport={transport})",
            self._context("provider_connecting", transport=transport),
        )

    def connected(self, tool_count: int, duration_ms: float) -> None:
        """Log successful connect with catalog size."""
        self.parent._log(
            LogLevel.INFO,
            self.component,
            f"Provider '{self.provider_id}' connected with {tool_count} tools ✓",
            self._context(
                "provider_connected", tool_count=tool_count, duration_ms=round(duration_ms, 2)
            ),
        )

    def failed(self, error: Exception, duration_ms: float) -> None:
        """Log a failed connect attempt."""
        self.parent._log(
            LogLevel.ERROR,
            self.component,
            f"Failed to connect provider '{self.provider_id}': {error}",
            self._context(
                "provider_connect_failed",
                error=str(error),
                error_type=type(error).__name__,
                duration_ms=round(duration_ms, 2),
            ),
        )

    def disconnected(self, reason: str | None = None) -> None:
        """Log disconnect."""
        self.parent._log(
            LogLevel.INFO,
            self.component,
            f"Provider '{self.provider_id}' disconnected",
            self._context("provider_disconnected", reason=reason),
        )

    def reconnecting(self, previous_status: str) -> None:
        """Log the single reconnect attempt made by a connection test."""
        self.parent._log(
            LogLevel.WARN,
            self.component,
            f"Reconnecting provider '{self.provider_id}' (was {previous_status})",
            self._context("provider_reconnecting", previous_status=previous_status),
        )


class CallLogger:
    """Logger for tool call events."""

    def __init__(self, parent: BridgeLogger, provider_id: str, tool_name: str):
        self.parent = parent
        self.provider_id = provider_id
        self.tool_name = tool_name

    def calling(self, tool_id: str, arguments: dict[str, Any] | None = None) -> None:
        """Log call start (debug)."""
        context: dict[str, Any] = {
            "event": "tool_calling",
            "tool_id": tool_id,
            "server": self.provider_id,
            "tool": self.tool_name,
        }
        if arguments and self.parent.config.show_params:
            context["args"] = truncate(arguments, self.parent.config.truncate_at)

        self.parent._log(LogLevel.DEBUG, "call", f"Calling tool '{tool_id}'", context)

    def completed(
        self,
        arguments: dict[str, Any] | None,
        success: bool,
        duration_ms: float,
        result: Any = None,
        error: str | None = None,
    ) -> None:
        """Log the call-completion event, whatever the outcome.

        Args:
            arguments: Arguments sent to the provider (summarized)
            success: Whether the call succeeded
            duration_ms: Duration of the remote call in milliseconds
            result: Optional result payload (previewed when show_results)
            error: Error message for failed calls
        """
        limit = self.parent.config.truncate_at
        context: dict[str, Any] = {
            "event": "tool_call",
            "server": self.provider_id,
            "tool": self.tool_name,
            "args": truncate(arguments or {}, limit),
            "success": success,
            "duration_ms": round(duration_ms, 2),
        }
        if success and result is not None and self.parent.config.show_results:
            context["result"] = truncate(result, limit)
        if error:
            context["error"] = error

        if success:
            message = (
                f"Tool '{self.provider_id}.{self.tool_name}' completed ({duration_ms:.0f}ms) ✓"
            )
            self.parent._log(LogLevel.INFO, "call", message, context)
        else:
            message = (
                f"Tool '{self.provider_id}.{self.tool_name}' failed ({duration_ms:.0f}ms): {error}"
            )
            self.parent._log(LogLevel.ERROR, "call", message, context)

    def slow(self, duration_ms: float, threshold_ms: float) -> None:
        """Log a slow-call warning."""
        context = {
            "event": "slow_call",
            "server": self.provider_id,
            "tool": self.tool_name,
            "duration_ms": round(duration_ms, 2),
            "threshold_ms": threshold_ms,
        }
        message = (
            f"Slow tool call '{self.provider_id}.{self.tool_name}': "
            f"{duration_ms:.0f}ms > {threshold_ms:.0f}ms"
        )
        self.parent._log(LogLevel.WARN, "call", message, context)
