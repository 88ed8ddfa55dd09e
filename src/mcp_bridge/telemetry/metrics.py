"""Bridge metrics schema - OpenTelemetry conventions.

Metrics:
- mcp_bridge_tool_calls_total: dispatched tool calls by provider, tool, status
- mcp_bridge_tool_call_duration_seconds: remote call duration
- mcp_bridge_connected_providers: live provider connections

All metrics use the 'mcp_bridge_' prefix.
"""

from dataclasses import dataclass

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, UpDownCounter

METRIC_PREFIX = "mcp_bridge"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    PROVIDER_ID = "provider_id"
    TOOL_NAME = "tool_name"
    STATUS = "status"
    ERROR_CODE = "error_code"

    # Status values
    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"


class BridgeMetrics:
    """Bridge metrics collection."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter

        self.tool_calls_total: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_tool_calls_total",
            description="Total number of dispatched tool calls",
            unit="1",
        )
        self.tool_call_duration_seconds: Histogram = meter.create_histogram(
            name=f"{METRIC_PREFIX}_tool_call_duration_seconds",
            description="Tool call duration in seconds",
            unit="s",
        )
        self.connected_providers: UpDownCounter = meter.create_up_down_counter(
            name=f"{METRIC_PREFIX}_connected_providers",
            description="Number of live provider connections",
            unit="1",
        )

    def record_tool_call(
        self,
        provider_id: str,
        tool_name: str,
        duration_seconds: float,
        status: str,
        error_code: str | None = None,
    ) -> None:
        """Record one dispatched tool call."""
        attributes = {
            MetricLabels.PROVIDER_ID: provider_id,
            MetricLabels.TOOL_NAME: tool_name,
            MetricLabels.STATUS: status,
        }
        if error_code:
            attributes[MetricLabels.ERROR_CODE] = error_code

        self.tool_calls_total.add(1, attributes)
        self.tool_call_duration_seconds.record(
            duration_seconds,
            {MetricLabels.PROVIDER_ID: provider_id, MetricLabels.TOOL_NAME: tool_name},
        )

    def provider_connected(self, provider_id: str) -> None:
        self.connected_providers.add(1, {MetricLabels.PROVIDER_ID: provider_id})

    def provider_disconnected(self, provider_id: str) -> None:
        self.connected_providers.add(-1, {MetricLabels.PROVIDER_ID: provider_id})
