"""Parameter Transformer - schema-typed argument coercion and result wrapping.

Pure functions. Argument coercion is best-effort: a scalar that cannot be
converted is forwarded unchanged. The one hard failure is an ``object``
parameter given as a string that is not valid JSON.
"""

import json
import math
from typing import Any

from mcp_bridge.errors import BridgeError, create_error, get_error_factory
from mcp_bridge.types import SchemaType

from .types import CallMetadata, CallResult

UNKNOWN_PROVIDER = "unknown"

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def schema_properties(schema: dict[str, Any] | None) -> dict[str, Any]:
    """Per-parameter declarations from a tool schema.

    Accepts a full JSON-Schema object (``{"type": "object", "properties": ...}``)
    or the bare properties mapping.
    """
    if not isinstance(schema, dict):
        return {}
    properties = schema.get("properties")
    if isinstance(properties, dict):
        return properties
    if schema.get("type") == "object":
        return {}
    return schema


def declared_type(schema: dict[str, Any] | None, key: str) -> SchemaType:
    declaration = schema_properties(schema).get(key)
    if not isinstance(declaration, dict):
        return SchemaType.UNKNOWN
    return SchemaType.from_declaration(declaration.get("type"))


def to_provider_args(args: dict[str, Any] | None, schema: dict[str, Any] | None) -> dict[str, Any]:
    """Coerce caller arguments to the tool's declared parameter types.

    Keys with None values are dropped. Keys absent from the input never
    appear in the output.

    Raises:
        BridgeError(COERCION_ERROR) if an object parameter holds unparsable JSON
    """
    provider_args: dict[str, Any] = {}
    for key, value in (args or {}).items():
        if value is None:
            continue
        provider_args[key] = coerce_value(key, value, declared_type(schema, key))
    return provider_args


def coerce_value(key: str, value: Any, schema_type: SchemaType) -> Any:
    if schema_type == SchemaType.STRING:
        return _to_string(value)
    if schema_type in (SchemaType.NUMBER, SchemaType.INTEGER):
        return _to_number(value, integer=schema_type == SchemaType.INTEGER)
    if schema_type == SchemaType.BOOLEAN:
        return _to_boolean(value)
    if schema_type == SchemaType.ARRAY:
        if isinstance(value, list):
            return value
        if isinstance(value, tuple):
            return list(value)
        return [value]
    if schema_type == SchemaType.OBJECT:
        return _to_object(key, value)
    return value


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _to_number(value: Any, integer: bool) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        if integer and isinstance(value, float) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return value
        if not math.isfinite(number):
            return value
        if integer and number.is_integer():
            return int(number)
        return number
    return value


def _to_boolean(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return bool(value)


def _to_object(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise create_error(
            "COERCION_ERROR",
            param=key,
            expected=SchemaType.OBJECT.value,
            reason=e.msg,
        ) from e


def _raw_metadata(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        meta = raw.get("metadata", raw.get("_meta"))
    else:
        meta = getattr(raw, "meta", None)
    return meta if isinstance(meta, dict) else {}


def from_provider_result(
    raw: Any,
    tool_name: str,
    provider_id: str | None = None,
    duration_ms: float | None = None,
) -> CallResult:
    """Wrap a raw provider payload as a successful CallResult.

    Provider id and duration default to the payload's own metadata when not
    given, then to "unknown" and 0.
    """
    meta = _raw_metadata(raw)
    if provider_id is None:
        provider_id = meta.get("provider_id", meta.get("providerId")) or UNKNOWN_PROVIDER
    if duration_ms is None:
        duration = meta.get("duration_ms", meta.get("durationMs", meta.get("duration", 0)))
        duration_ms = float(duration) if isinstance(duration, (int, float)) else 0.0

    return CallResult(
        success=True,
        data=raw,
        metadata=CallMetadata(
            provider_id=str(provider_id),
            provider_tool_name=tool_name,
            duration_ms=duration_ms,
        ),
    )


def from_error(
    error: Exception,
    tool_name: str,
    provider_id: str = UNKNOWN_PROVIDER,
    duration_ms: float = 0.0,
) -> CallResult:
    """Wrap an error as a failed CallResult."""
    if not isinstance(error, BridgeError):
        error = get_error_factory().from_exception(error, tool_name=tool_name)

    return CallResult(
        success=False,
        error=str(error),
        error_code=error.code,
        metadata=CallMetadata(
            provider_id=provider_id,
            provider_tool_name=tool_name,
            duration_ms=duration_ms,
        ),
    )


def extract_text_content(raw: Any) -> str:
    """Concatenated text content of a provider result, for previews."""
    if raw is None:
        return ""

    content = raw.get("content") if isinstance(raw, dict) else getattr(raw, "content", None)
    items = content if isinstance(content, list) else raw if isinstance(raw, list) else None
    if items is None:
        return getattr(raw, "text", None) or str(raw)

    text_parts = []
    for item in items:
        if isinstance(item, str):
            text_parts.append(item)
        elif isinstance(item, dict) and item.get("type") == "text":
            text_parts.append(item.get("text", ""))
        elif hasattr(item, "text"):
            text_parts.append(item.text)
    return "\n".join(text_parts)
