"""Bridge configuration - models, loading and the dotted-key store."""

from .loader import ConfigLoader, load_config, resolve_env_vars, validate_provider
from .models import BridgeConfig, DispatchConfig, LoggingConfig, ProviderConfig
from .store import (
    SERVERS_KEY,
    ConfigStore,
    InMemoryConfigStore,
    YamlConfigStore,
    server_key,
)

__all__ = [
    # Config models
    "BridgeConfig",
    "ProviderConfig",
    "DispatchConfig",
    "LoggingConfig",
    # Loader
    "ConfigLoader",
    "load_config",
    "resolve_env_vars",
    "validate_provider",
    # Store
    "ConfigStore",
    "InMemoryConfigStore",
    "YamlConfigStore",
    "SERVERS_KEY",
    "server_key",
]
