"""
Pytest configuration and shared fixtures for bridge tests.
"""

import io
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcp_bridge.config import DispatchConfig, ProviderConfig  # noqa: E402
from mcp_bridge.logging import BridgeLogger, LogConfig  # noqa: E402
from mcp_bridge.types import LogFormat, LogLevel, MCPTransport  # noqa: E402
from tests.mocks import FakeClientFactory, FakeTool  # noqa: E402

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    """Capture log lines."""
    return io.StringIO()


@pytest.fixture
def json_logger(log_output: io.StringIO) -> BridgeLogger:
    """Logger writing JSON lines at DEBUG into log_output."""
    return BridgeLogger(LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output))


@pytest.fixture
def fast_dispatch() -> DispatchConfig:
    """Dispatch settings without the settle delay."""
    return DispatchConfig(settle_delay_seconds=0, probe_timeout_seconds=0.5)


@pytest.fixture
def stdio_config() -> ProviderConfig:
    return ProviderConfig(transport=MCPTransport.STDIO, command="files-server", enabled=True)


@pytest.fixture
def http_config() -> ProviderConfig:
    return ProviderConfig(
        transport=MCPTransport.HTTP, url="http://localhost:9000/mcp", enabled=True
    )


@pytest.fixture
def files_tools() -> list[FakeTool]:
    return [
        FakeTool(
            name="read",
            description="Read a file",
            inputSchema={"type": "object", "properties": {"path": {"type": "string"}}},
        ),
        FakeTool(
            name="stat",
            description="File metadata",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "follow": {"type": "boolean"},
                    "depth": {"type": "integer"},
                },
            },
        ),
    ]


@pytest.fixture
def client_factory(files_tools: list[FakeTool]) -> FakeClientFactory:
    """Fake provider clients; every provider advertises the files tools."""
    return FakeClientFactory(default_tools=files_tools)


@pytest.fixture
def log_events(log_output: io.StringIO) -> Callable[[], list[dict[str, Any]]]:
    """Parse captured JSON log lines."""

    def _events() -> list[dict[str, Any]]:
        return [json.loads(line) for line in log_output.getvalue().splitlines() if line.strip()]

    return _events


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "registry: Registry tests")
    config.addinivalue_line("markers", "slow: Slow tests")
