"""Bridge error types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    ROUTING = "ROUTING"  # bad ids, unknown providers or tools
    PROVIDER = "PROVIDER"  # failures reported by or while reaching a provider
    VALIDATION = "VALIDATION"  # argument coercion and config checks
    SYSTEM = "SYSTEM"


@dataclass
class BridgeError(Exception):
    """Structured error with context. Base exception for all bridge errors."""

    # Identity
    code: str  # e.g., "NOT_CONNECTED"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    retryable: bool = False
    provider_id: str | None = None
    tool_name: str | None = None

    # Error chain
    cause: "BridgeError | None" = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and call results.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "retryable": self.retryable,
            "provider_id": self.provider_id,
            "tool_name": self.tool_name,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        provider_id: str | None = None,
        tool_name: str | None = None,
    ) -> "BridgeError":
        """Return copy with additional context.

        Args:
            provider_id: Optional provider identifier
            tool_name: Optional provider tool name

        Returns:
            New BridgeError instance with updated context
        """
        return BridgeError(
            code=self.code,
            category=self.category,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            retryable=self.retryable,
            provider_id=provider_id or self.provider_id,
            tool_name=tool_name or self.tool_name,
            cause=self.cause,
            timestamp=self.timestamp,
        )


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Provider '{provider_id}' is not connected"
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_retryable: bool = False


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]
    retryable: bool | None = None  # None = use template default


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error.

        Args:
            error: Exception to check

        Returns:
            True if this matcher can handle the error
        """

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract bridge error info from the exception.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with error code and context
        """
