"""Bridge logging - colored or JSON component logging."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    BridgeLogger,
    CallLogger,
    ConnectionLogger,
    LogConfig,
    truncate,
)

__all__ = [
    # Logger classes
    "BridgeLogger",
    "ConnectionLogger",
    "CallLogger",
    "LogConfig",
    "truncate",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
