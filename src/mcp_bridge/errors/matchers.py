"""Error matchers for converting exceptions to BridgeErrors."""

import asyncio
import json
from typing import Any

from fastmcp.exceptions import FastMCPError
from mcp.shared.exceptions import McpError

from .errors import ErrorMatcher, MatchResult


class TimeoutErrorMatcher(ErrorMatcher):
    """Matches timeout errors raised while waiting on a provider."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (asyncio.TimeoutError, TimeoutError))

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="TRANSPORT_ERROR",
            context={"reason": f"timed out ({str(error) or 'no response'})"},
            retryable=True,
        )


class ProtocolErrorMatcher(ErrorMatcher):
    """Matches errors reported through the MCP client library."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (McpError, FastMCPError))

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="TRANSPORT_ERROR",
            context={"reason": str(error)},
            retryable=False,
        )


class ConnectionErrorMatcher(ErrorMatcher):
    """Matches OS-level failures (broken pipes, refused connections, dead processes)."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (ConnectionError, OSError, EOFError))

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="TRANSPORT_ERROR",
            context={"reason": str(error) or type(error).__name__},
            retryable=True,
        )


class DecodeErrorMatcher(ErrorMatcher):
    """Matches serialized values that fail to parse."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, json.JSONDecodeError)

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="COERCION_ERROR",
            context={"param": "?", "expected": "object", "reason": str(error)},
            retryable=False,
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: Exception) -> bool:
        return True

    def extract(self, error: Exception) -> MatchResult:
        context: dict[str, Any] = {
            "detail": str(error),
            "error_type": type(error).__name__,
        }
        return MatchResult(
            code="INTERNAL_ERROR",
            context=context,
            retryable=False,
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Should never reach here due to GenericErrorMatcher
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error)},
            retryable=False,
        )

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # Order matters - JSONDecodeError is a ValueError, TimeoutError is an OSError
        self.matchers = [
            TimeoutErrorMatcher(),
            DecodeErrorMatcher(),
            ProtocolErrorMatcher(),
            ConnectionErrorMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
