"""Bridge configuration loader."""

import os
import re
import typing
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from mcp_bridge.errors import create_error
from mcp_bridge.types import LogLevel, MCPTransport, ValidationIssue, ValidationResult

from .models import BridgeConfig, ProviderConfig

CONFIG_PATH_ENV = "MCP_BRIDGE_CONFIG"
DEFAULT_CONFIG_FILE = "mcp-bridge.yaml"


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        BridgeError: If required var not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        elif operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        else:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Required environment variable {var_name} not set",
            )

    return re.sub(pattern, replacer, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    else:
        return data


def validate_provider(provider_id: str, data: Any) -> list[ValidationIssue]:
    """Check one provider definition.

    Args:
        provider_id: Provider identifier (the mapping key)
        data: Raw provider mapping

    Returns:
        Errors and warnings for this provider
    """
    path = f"mcp_servers.{provider_id}"
    issues: list[ValidationIssue] = []

    if "." in provider_id:
        issues.append(
            ValidationIssue(path=path, message=f"Provider id '{provider_id}' must not contain '.'")
        )

    if not isinstance(data, dict):
        issues.append(ValidationIssue(path=path, message="Provider definition must be a mapping"))
        return issues

    transport = data.get("transport", data.get("type"))
    valid_transports = [t.value for t in MCPTransport]
    if transport is None:
        issues.append(
            ValidationIssue(
                path=f"{path}.transport",
                message=f"Provider '{provider_id}' missing 'transport'",
            )
        )
    elif transport not in valid_transports:
        issues.append(
            ValidationIssue(
                path=f"{path}.transport",
                message=f"Provider '{provider_id}' invalid transport: {transport}",
            )
        )

    if transport == MCPTransport.STDIO.value and not data.get("command"):
        issues.append(
            ValidationIssue(
                path=f"{path}.command",
                message=f"Provider '{provider_id}' missing 'command'",
            )
        )

    if transport == MCPTransport.HTTP.value and not data.get("url"):
        issues.append(
            ValidationIssue(
                path=f"{path}.url",
                message=f"Provider '{provider_id}' missing 'url'",
            )
        )

    if not data.get("enabled", False):
        issues.append(
            ValidationIssue(
                path=f"{path}.enabled",
                message=f"Provider '{provider_id}' is not explicitly enabled and will be skipped",
                severity="warning",
            )
        )

    return issues


class ConfigLoader:
    """Load and validate bridge configuration."""

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional BridgeLogger instance
        """
        self._config: BridgeConfig | None = None
        self._config_path: Path | None = None
        self._logger = logger

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> BridgeConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. MCP_BRIDGE_CONFIG environment variable
        2. ./mcp-bridge.yaml
        3. If use_defaults=True and no file found, default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found

        Returns:
            Loaded BridgeConfig instance

        Raises:
            BridgeError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        data = _resolve_env_vars_recursive(data)

        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> BridgeConfig:
        """Load default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> BridgeConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded BridgeConfig instance

        Raises:
            BridgeError: If configuration is invalid
        """
        validation = self.validate(data)
        if not validation.valid:
            error_messages = [f"- {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        try:
            config = self._dict_to_config(data)
        except (TypeError, ValueError) as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Failed to parse configuration: {e}",
            ) from e

        self._config = config
        self._config_path = config_path

        if self._logger:
            for issue in validation.warnings:
                self._logger._log(LogLevel.WARN, "config", issue.message, {"path": issue.path})

        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        valid_keys = {f.name for f in fields(BridgeConfig)} | {"mcpServers"}
        for key in data:
            if key not in valid_keys:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        servers = self._servers_section(data)
        if servers is not None and not isinstance(servers, dict):
            errors.append(ValidationIssue(path="mcp_servers", message="mcp_servers must be a mapping"))
        elif servers:
            for provider_id, provider_data in servers.items():
                for issue in validate_provider(str(provider_id), provider_data):
                    (errors if issue.severity == "error" else warnings).append(issue)

        dispatch = data.get("dispatch")
        if isinstance(dispatch, dict):
            for key in ("slow_call_threshold_ms", "settle_delay_seconds", "probe_timeout_seconds"):
                value = dispatch.get(key)
                if value is not None and (
                    isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0
                ):
                    errors.append(
                        ValidationIssue(
                            path=f"dispatch.{key}",
                            message=f"{key} must be a non-negative number",
                        )
                    )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def get(self) -> BridgeConfig:
        """Get current configuration.

        Raises:
            BridgeError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    @staticmethod
    def _servers_section(data: dict[str, Any]) -> Any:
        # "mcpServers" is the key used by most MCP client configs
        if "mcp_servers" in data:
            return data["mcp_servers"]
        return data.get("mcpServers")

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)
        return Path(DEFAULT_CONFIG_FILE)

    def _dict_to_config(self, data: dict[str, Any]) -> BridgeConfig:
        kwargs: dict[str, Any] = {}

        servers = self._servers_section(data)
        if servers:
            kwargs["mcp_servers"] = {
                str(provider_id): ProviderConfig.from_dict(provider_data)
                for provider_id, provider_data in servers.items()
            }

        hints = typing.get_type_hints(BridgeConfig)
        for f in fields(BridgeConfig):
            if f.name == "mcp_servers" or f.name not in data:
                continue
            kwargs[f.name] = self._convert_field(hints[f.name], data[f.name])

        return BridgeConfig(**kwargs)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert field value to the declared dataclass or enum type."""
        if value is None:
            return None

        if hasattr(field_type, "__dataclass_fields__"):
            if isinstance(value, dict):
                hints = typing.get_type_hints(field_type)
                kwargs = {}
                for f in fields(field_type):
                    if f.name in value:
                        kwargs[f.name] = self._convert_field(hints[f.name], value[f.name])
                return field_type(**kwargs)
            return value

        if isinstance(field_type, type) and any(
            base.__name__ == "Enum" for base in field_type.__mro__
        ):
            if isinstance(value, str):
                return field_type(value)
            return value

        return value


def load_config(path: str | Path | None = None) -> BridgeConfig:
    """Convenience function to load config."""
    return ConfigLoader().load(path)
