"""Shared types for the MCP bridge.

Import from here rather than submodules:
    from mcp_bridge.types import ConnectionStatus, LogLevel
"""

from .enums import ConnectionStatus, LogFormat, LogLevel, MCPTransport, SchemaType
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "MCPTransport",
    "ConnectionStatus",
    "SchemaType",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
