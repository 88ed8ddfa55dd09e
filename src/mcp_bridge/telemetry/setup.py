"""Bridge telemetry setup - OpenTelemetry initialization.

Configures the OpenTelemetry SDK with:
- MeterProvider with PrometheusMetricReader
- TracerProvider (spans for dispatched tool calls)
"""

from dataclasses import dataclass, field
from typing import Any

from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import REGISTRY, generate_latest

from .metrics import BridgeMetrics


@dataclass
class TelemetryConfig:
    """Telemetry configuration.

    Attributes:
        enabled: Whether telemetry is enabled
        service_name: Service name for telemetry
        service_version: Service version
        metrics_enabled: Whether metrics are exported through Prometheus
        traces_enabled: Whether spans are created for tool calls
    """

    enabled: bool = True
    service_name: str = "mcp-bridge"
    service_version: str = "0.1.0"
    metrics_enabled: bool = True
    traces_enabled: bool = True
    attributes: dict[str, str] = field(default_factory=dict)


# Global telemetry state
_telemetry: dict[str, Any] | None = None


def setup_telemetry(config: TelemetryConfig | None = None) -> dict[str, Any]:
    """Set up OpenTelemetry instrumentation.

    Idempotent: the first call wins until reset_telemetry().

    Args:
        config: Telemetry configuration (uses defaults if None)

    Returns:
        Dictionary with meter, tracer and metrics instances
    """
    global _telemetry  # noqa: PLW0603

    if _telemetry is not None:
        return _telemetry

    config = config or TelemetryConfig()

    if not config.enabled:
        _telemetry = {
            "meter": None,
            "tracer": None,
            "metrics": None,
            "config": config,
        }
        return _telemetry

    resource = Resource.create(
        {
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
            **config.attributes,
        }
    )

    if config.metrics_enabled:
        meter_provider = MeterProvider(
            metric_readers=[PrometheusMetricReader()],
            resource=resource,
        )
    else:
        meter_provider = MeterProvider(resource=resource)

    tracer_provider = TracerProvider(resource=resource)

    # Local providers rather than the global ones so tests can reset cleanly
    meter = meter_provider.get_meter(config.service_name, config.service_version)
    tracer = (
        tracer_provider.get_tracer(config.service_name, config.service_version)
        if config.traces_enabled
        else None
    )

    _telemetry = {
        "meter": meter,
        "tracer": tracer,
        "metrics": BridgeMetrics(meter),
        "config": config,
        "meter_provider": meter_provider,
        "tracer_provider": tracer_provider,
    }
    return _telemetry


def get_telemetry() -> dict[str, Any] | None:
    """Return the current telemetry handles, or None before setup."""
    return _telemetry


def reset_telemetry() -> None:
    """Drop telemetry state (tests, shutdown)."""
    global _telemetry  # noqa: PLW0603
    if _telemetry is not None:
        provider = _telemetry.get("meter_provider")
        if provider is not None:
            provider.shutdown()
        tracer_provider = _telemetry.get("tracer_provider")
        if tracer_provider is not None:
            tracer_provider.shutdown()
    _telemetry = None


def metrics_text() -> bytes:
    """Prometheus exposition text for the bridge metrics.

    Serve this from the embedding process's ``/metrics`` endpoint. Returns a
    comment line when telemetry or metrics are disabled.
    """
    if _telemetry is None:
        return b"# Telemetry not initialized\n"
    config = _telemetry["config"]
    if not config.enabled or not config.metrics_enabled:
        return b"# Metrics disabled\n"
    return generate_latest(REGISTRY)
