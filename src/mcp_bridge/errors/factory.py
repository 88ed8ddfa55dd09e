"""Error factory for creating BridgeErrors from any exception type."""

from typing import Any

from .errors import BridgeError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates BridgeErrors from any exception type."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        provider_id: str | None = None,
        tool_name: str | None = None,
    ) -> BridgeError:
        """Convert any exception to BridgeError.

        Args:
            error: Exception to convert
            provider_id: Optional provider identifier
            tool_name: Optional provider tool name

        Returns:
            BridgeError instance
        """
        # If already a BridgeError, just add context
        if isinstance(error, BridgeError):
            return error.with_context(provider_id=provider_id, tool_name=tool_name)

        match_result = self.matcher_chain.match(error)

        context = match_result.context.copy()
        context.setdefault("provider_id", provider_id or "unknown")
        if tool_name:
            context["tool_name"] = tool_name

        bridge_error = self.registry.create(code=match_result.code, context=context)
        if provider_id is None:
            bridge_error.provider_id = None

        if match_result.retryable is not None:
            bridge_error.retryable = match_result.retryable

        return bridge_error

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> BridgeError:
        """Create BridgeError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            BridgeError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton."""
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> BridgeError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        BridgeError instance
    """
    return get_error_factory().create(code, context)
