"""Unit tests for config models."""

import dataclasses

import pytest

from mcp_bridge.config import ProviderConfig
from mcp_bridge.types import MCPTransport


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_frozen(self, stdio_config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            stdio_config.command = "other"

    def test_stdio_to_dict(self):
        config = ProviderConfig(command="server", args=["--root", "/"], env={"A": "1"})
        assert config.to_dict() == {
            "transport": "stdio",
            "enabled": True,
            "timeout": 30,
            "command": "server",
            "args": ["--root", "/"],
            "env": {"A": "1"},
        }

    def test_http_to_dict(self, http_config):
        data = http_config.to_dict()
        assert data["url"] == "http://localhost:9000/mcp"
        assert data["headers"] == {}
        assert "command" not in data

    def test_round_trip(self, http_config):
        assert ProviderConfig.from_dict(http_config.to_dict()) == http_config

    def test_from_dict_type_alias(self):
        config = ProviderConfig.from_dict({"type": "http", "url": "http://x", "enabled": True})
        assert config.transport == MCPTransport.HTTP

    def test_from_dict_not_enabled_by_default(self):
        assert ProviderConfig.from_dict({"transport": "stdio", "command": "x"}).enabled is False

    def test_from_dict_invalid_transport(self):
        with pytest.raises(ValueError):
            ProviderConfig.from_dict({"transport": "carrier-pigeon"})
