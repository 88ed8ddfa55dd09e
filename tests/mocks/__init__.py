"""Test doubles for provider clients."""

from .fake_client import FakeClientFactory, FakeProviderClient, FakeTool

__all__ = ["FakeClientFactory", "FakeProviderClient", "FakeTool"]
