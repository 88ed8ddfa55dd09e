"""Unit tests for tool call instrumentation."""

from unittest.mock import MagicMock

import pytest

from mcp_bridge.telemetry import (
    MetricLabels,
    TelemetryConfig,
    instrument_tool_call,
    record_call_result,
    reset_telemetry,
    setup_telemetry,
)
from mcp_bridge.telemetry import setup as telemetry_setup


class TestInstrumentToolCall:
    """Tests for instrument_tool_call context manager."""

    def setup_method(self):
        """Reset telemetry before each test."""
        reset_telemetry()
        setup_telemetry(TelemetryConfig(metrics_enabled=False))

    def teardown_method(self):
        """Reset telemetry after each test."""
        reset_telemetry()

    @pytest.mark.asyncio
    async def test_yields_result_dict(self):
        async with instrument_tool_call("files", "read") as result:
            assert result["status"] == MetricLabels.STATUS_SUCCESS

    @pytest.mark.asyncio
    async def test_exception_marks_error(self):
        with pytest.raises(ValueError):
            async with instrument_tool_call("files", "read") as result:
                raise ValueError("boom")
        assert result["status"] == MetricLabels.STATUS_ERROR
        assert result["error_code"] == "ValueError"

    @pytest.mark.asyncio
    async def test_record_call_result(self):
        async with instrument_tool_call("files", "read") as result:
            record_call_result(result, success=False, error_code="NOT_CONNECTED")
        assert result["status"] == MetricLabels.STATUS_ERROR
        assert result["error_code"] == "NOT_CONNECTED"

    @pytest.mark.asyncio
    async def test_records_metrics(self, monkeypatch):
        metrics = MagicMock()
        monkeypatch.setitem(telemetry_setup._telemetry, "metrics", metrics)

        async with instrument_tool_call("files", "read") as result:
            record_call_result(result, success=True)

        kwargs = metrics.record_tool_call.call_args.kwargs
        assert kwargs["provider_id"] == "files"
        assert kwargs["tool_name"] == "read"
        assert kwargs["status"] == MetricLabels.STATUS_SUCCESS
        assert kwargs["duration_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_works_without_setup(self):
        reset_telemetry()
        async with instrument_tool_call("files", "read") as result:
            pass
        assert result["status"] == MetricLabels.STATUS_SUCCESS
