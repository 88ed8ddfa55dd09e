"""Bridge telemetry - OpenTelemetry-based observability."""

from .instrumentation import instrument_tool_call, record_call_result
from .metrics import BridgeMetrics, MetricLabels
from .setup import (
    TelemetryConfig,
    get_telemetry,
    metrics_text,
    reset_telemetry,
    setup_telemetry,
)

__all__ = [
    # Metrics
    "BridgeMetrics",
    "MetricLabels",
    # Setup
    "TelemetryConfig",
    "setup_telemetry",
    "get_telemetry",
    "reset_telemetry",
    "metrics_text",
    # Instrumentation
    "instrument_tool_call",
    "record_call_result",
]
