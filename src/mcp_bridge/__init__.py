"""MCP bridge - provider connections and tool call dispatch."""

from mcp_bridge.application import BridgeApplication
from mcp_bridge.config import BridgeConfig, ProviderConfig
from mcp_bridge.errors import BridgeError
from mcp_bridge.invoker import CallDispatcher, CallResult
from mcp_bridge.mcp import ConnectionRegistry, ProviderConnection
from mcp_bridge.registry import BridgeTool, ToolIdCodec, ToolRegistry
from mcp_bridge.service import ProviderService

__version__ = "0.1.0"

__all__ = [
    "BridgeApplication",
    "BridgeConfig",
    "ProviderConfig",
    "BridgeError",
    "CallDispatcher",
    "CallResult",
    "ConnectionRegistry",
    "ProviderConnection",
    "ToolIdCodec",
    "ToolRegistry",
    "BridgeTool",
    "ProviderService",
    "__version__",
]
