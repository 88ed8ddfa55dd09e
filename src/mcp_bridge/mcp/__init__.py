"""Provider connections and the connection registry."""

from .connection import ClientFactory, ProviderConnection, build_transport, default_client_factory
from .manager import ConnectionRegistry
from .types import ConnectionTestResult, ProviderStatus, ToolDescriptor

__all__ = [
    "ProviderConnection",
    "ConnectionRegistry",
    "ClientFactory",
    "build_transport",
    "default_client_factory",
    "ToolDescriptor",
    "ProviderStatus",
    "ConnectionTestResult",
]
