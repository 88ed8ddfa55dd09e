"""Shared enumerations for the MCP bridge."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class MCPTransport(str, Enum):
    """Provider connection transport type."""

    STDIO = "stdio"
    HTTP = "http"


class ConnectionStatus(str, Enum):
    """Provider connection status."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    CONNECTING = "connecting"


class SchemaType(str, Enum):
    """Declared JSON-Schema type of a single tool parameter.

    UNKNOWN covers absent, unrecognized and "null" types; values declared
    with it are forwarded unchanged.
    """

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"

    @classmethod
    def from_declaration(cls, declared: object) -> "SchemaType":
        """Resolve a property's ``type`` declaration.

        Accepts a plain type name or a JSON-Schema type list such as
        ``["string", "null"]`` (first non-null entry wins).
        """
        if isinstance(declared, list):
            declared = next((t for t in declared if t != "null"), None)
        if not isinstance(declared, str):
            return cls.UNKNOWN
        try:
            return cls(declared)
        except ValueError:
            return cls.UNKNOWN
