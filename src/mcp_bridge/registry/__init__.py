"""Tool Registry and tool id codec."""

from .codec import ToolIdCodec
from .registry import ToolRegistry
from .types import BridgeTool, ToolHandler

__all__ = [
    "ToolIdCodec",
    "ToolRegistry",
    "BridgeTool",
    "ToolHandler",
]
