"""Parameter transformation and call dispatch."""

from .dispatcher import CallDispatcher
from .transformer import (
    UNKNOWN_PROVIDER,
    coerce_value,
    extract_text_content,
    from_error,
    from_provider_result,
    schema_properties,
    to_provider_args,
)
from .types import CallContext, CallMetadata, CallResult, ToolCall

__all__ = [
    "CallDispatcher",
    "CallResult",
    "CallMetadata",
    "CallContext",
    "ToolCall",
    "to_provider_args",
    "coerce_value",
    "schema_properties",
    "from_provider_result",
    "from_error",
    "extract_text_content",
    "UNKNOWN_PROVIDER",
]
