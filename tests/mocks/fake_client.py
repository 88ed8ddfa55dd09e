"""Fake provider client standing in for the FastMCP client in tests.

Mirrors the parts of ``fastmcp.Client`` the bridge uses: async context
manager entry/exit, ``list_tools()`` and ``call_tool(name, arguments)``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from mcp_bridge.config import ProviderConfig


@dataclass
class FakeTool:
    """Tool as returned by list_tools (same attribute names as mcp.types.Tool)."""

    name: str
    description: str | None = ""
    inputSchema: dict[str, Any] = field(default_factory=dict)  # noqa: N815


class FakeProviderClient:
    """In-memory provider session.

    Example:
        client = FakeProviderClient("files", tools=[FakeTool("read")])
        client.responses["read"] = {"content": [{"type": "text", "text": "hi"}]}
    """

    def __init__(
        self,
        provider_id: str,
        tools: list[FakeTool] | None = None,
        events: list[tuple[str, str]] | None = None,
    ):
        self.provider_id = provider_id
        self.tools = list(tools or [])
        self.events = events if events is not None else []

        # Behaviour switches
        self.enter_error: BaseException | None = None
        self.list_error: BaseException | None = None
        self.list_delay: float = 0.0
        self.call_delay: float = 0.0
        self.exit_error: BaseException | None = None

        # Per-tool responses: a value, an exception, or a callable(arguments)
        self.responses: dict[str, Any] = {}

        # Recorded activity
        self.entered = False
        self.closed = False
        self.list_calls = 0
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __aenter__(self) -> FakeProviderClient:
        self.events.append(("open", self.provider_id))
        if self.enter_error:
            raise self.enter_error
        self.entered = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True
        self.events.append(("close", self.provider_id))
        if self.exit_error:
            raise self.exit_error

    async def list_tools(self) -> list[FakeTool]:
        self.list_calls += 1
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        if self.list_error:
            raise self.list_error
        return list(self.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        self.calls.append((name, arguments))
        if self.call_delay:
            await asyncio.sleep(self.call_delay)

        response = self.responses.get(name, {"content": [{"type": "text", "text": "ok"}]})
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(arguments)
        return response


class FakeClientFactory:
    """Client factory recording every client it builds.

    ``events`` is shared by all clients, so tests can check that one
    session was closed before the next was opened.
    """

    def __init__(
        self,
        default_tools: list[FakeTool] | None = None,
        tools_by_provider: dict[str, list[FakeTool]] | None = None,
        configure: Callable[[FakeProviderClient], None] | None = None,
    ):
        self.default_tools = list(default_tools or [])
        self.tools_by_provider = dict(tools_by_provider or {})
        self.configure = configure
        self.events: list[tuple[str, str]] = []
        self.clients: list[tuple[str, ProviderConfig, FakeProviderClient]] = []

    def __call__(self, provider_id: str, config: ProviderConfig) -> FakeProviderClient:
        client = FakeProviderClient(
            provider_id,
            tools=self.tools_by_provider.get(provider_id, self.default_tools),
            events=self.events,
        )
        if self.configure:
            self.configure(client)
        self.clients.append((provider_id, config, client))
        return client

    def latest(self, provider_id: str) -> FakeProviderClient:
        """Most recent client built for a provider."""
        for pid, _, client in reversed(self.clients):
            if pid == provider_id:
                return client
        raise KeyError(provider_id)
