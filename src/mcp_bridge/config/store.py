"""Configuration store - dotted-key access to provider definitions.

The bridge reads and writes provider definitions through this interface
(e.g. ``mcpServers.files``) and never assumes a particular backing store.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from mcp_bridge.errors import create_error

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"


def server_key(provider_id: str) -> str:
    """Store key holding one provider's definition."""
    return f"{SERVERS_KEY}.{provider_id}"


@runtime_checkable
class ConfigStore(Protocol):
    """Key/value store over dot-notation keys."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def has(self, key: str) -> bool: ...

    def clear(self) -> None: ...


class InMemoryConfigStore:
    """Nested-dict store; values are copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def set(self, key: str, value: Any) -> None:
        """Set value at dot-notation key, auto-creating parents.

        Args:
            key: Dot-notation key (e.g., "mcpServers.files")
            value: Value to store
        """
        keys = key.split(".")
        current = self._data

        for part in keys[:-1]:
            if not isinstance(current.get(part), dict):
                # Overwrite missing or non-dict with dict
                current[part] = {}
            current = current[part]

        current[keys[-1]] = copy.deepcopy(value)

    def get(self, key: str) -> Any:
        """Get value at dot-notation key, or None if not found."""
        found, value = self._lookup(key)
        return copy.deepcopy(value) if found else None

    def has(self, key: str) -> bool:
        found, _ = self._lookup(key)
        return found

    def delete(self, key: str) -> None:
        """Remove key; no-op if absent."""
        keys = key.split(".")
        current = self._data
        for part in keys[:-1]:
            current = current.get(part)
            if not isinstance(current, dict):
                return
        current.pop(keys[-1], None)

    def clear(self) -> None:
        self._data = {}

    def snapshot(self) -> dict[str, Any]:
        """Full copy of the stored document."""
        return copy.deepcopy(self._data)

    def _lookup(self, key: str) -> tuple[bool, Any]:
        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return False, None
        return True, current


class YamlConfigStore(InMemoryConfigStore):
    """In-memory store that flushes the whole document to a YAML file on change."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        initial: dict[str, Any] = {}
        if self._path.exists():
            try:
                with self._path.open() as f:
                    initial = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise create_error(
                    "CONFIG_INVALID",
                    detail=f"Invalid YAML in config store {self._path}: {e}",
                ) from e
        super().__init__(initial)

    @property
    def path(self) -> Path:
        return self._path

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self._write()

    def delete(self, key: str) -> None:
        super().delete(key)
        self._write()

    def clear(self) -> None:
        super().clear()
        self._write()

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w") as f:
            yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=False)
        logger.debug("Config store written to %s", self._path)
