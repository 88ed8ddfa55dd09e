"""Bridge telemetry instrumentation for dispatched tool calls."""

import time
from contextlib import asynccontextmanager
from typing import Any

from opentelemetry.trace import Status, StatusCode

from .metrics import MetricLabels
from .setup import get_telemetry


@asynccontextmanager
async def instrument_tool_call(provider_id: str, tool_name: str):
    """Context manager for instrumenting one dispatched tool call.

    Records:
    - Tool call counter
    - Tool call duration histogram
    - Trace span for the call

    Args:
        provider_id: Provider identifier
        tool_name: Provider tool name

    Yields:
        Dictionary to store execution status
    """
    telemetry = get_telemetry()
    start_time = time.perf_counter()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS, "error_code": None}

    tracer = telemetry["tracer"] if telemetry else None
    bridge_metrics = telemetry["metrics"] if telemetry else None

    span = None
    if tracer:
        span = tracer.start_span(f"tool:{provider_id}.{tool_name}")
        span.set_attribute("provider.id", provider_id)
        span.set_attribute("tool.name", tool_name)

    try:
        yield result
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = type(e).__name__
        if span:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
        raise
    finally:
        duration = time.perf_counter() - start_time

        if bridge_metrics:
            bridge_metrics.record_tool_call(
                provider_id=provider_id,
                tool_name=tool_name,
                duration_seconds=duration,
                status=result["status"],
                error_code=result.get("error_code"),
            )

        if span:
            if result["status"] == MetricLabels.STATUS_SUCCESS:
                span.set_status(Status(StatusCode.OK))
            else:
                span.set_status(Status(StatusCode.ERROR, str(result.get("error_code"))))
            span.end()


def record_call_result(
    result: dict[str, Any], success: bool, error_code: str | None = None
) -> None:
    """Update result dictionary with execution status.

    Args:
        result: Result dictionary from context manager
        success: Whether the call succeeded
        error_code: Error code if failed
    """
    if success:
        result["status"] = MetricLabels.STATUS_SUCCESS
    else:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = error_code
