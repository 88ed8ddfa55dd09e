"""Bridge error handling - structured errors with context."""

from .errors import BridgeError, ErrorCategory, ErrorMatcher, ErrorTemplate, MatchResult
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "BridgeError",
    "ErrorCategory",
    "ErrorTemplate",
    "MatchResult",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "ErrorMatcherChain",
    "ErrorMatcher",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
