"""Call dispatch types."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CallMetadata:
    """Where a call went and how long the remote part took."""

    provider_id: str
    provider_tool_name: str
    duration_ms: float = 0.0


@dataclass
class CallResult:
    """Normalized result of a bridged tool call.

    ``data`` is set on success, ``error`` (and ``error_code``) on failure.
    """

    success: bool
    metadata: CallMetadata
    data: Any = None
    error: str | None = None
    error_code: str | None = None  # BridgeError code, e.g. "NOT_CONNECTED"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "metadata": {
                "provider_id": self.metadata.provider_id,
                "provider_tool_name": self.metadata.provider_tool_name,
                "duration_ms": self.metadata.duration_ms,
            },
        }
        if self.success:
            result["data"] = self.data
        else:
            result["error"] = self.error
            result["error_code"] = self.error_code
        return result


@dataclass
class CallContext:
    """Caller-side context passed through to handlers."""

    request_id: str | None = None
    caller: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCall:
    """One entry of a batch invocation."""

    tool_id: str
    arguments: dict[str, Any] = field(default_factory=dict)
    context: CallContext | None = None
