"""Call Dispatcher - routes caller tool ids to provider connections."""

import time
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from mcp_bridge.errors import ErrorFactory, create_error, get_error_factory
from mcp_bridge.registry.codec import ToolIdCodec
from mcp_bridge.registry.types import ToolHandler
from mcp_bridge.telemetry import instrument_tool_call, record_call_result

from .transformer import (
    UNKNOWN_PROVIDER,
    extract_text_content,
    from_error,
    from_provider_result,
    to_provider_args,
)
from .types import CallContext, CallResult, ToolCall

if TYPE_CHECKING:
    from mcp_bridge.config.models import DispatchConfig
    from mcp_bridge.logging import BridgeLogger, CallLogger
    from mcp_bridge.mcp import ConnectionRegistry


class CallDispatcher:
    """Decode, coerce, call, time and wrap.

    ``invoke`` never raises: every failure comes back as a failed CallResult
    carrying the error code.
    """

    def __init__(
        self,
        connections: "ConnectionRegistry",
        logger: "BridgeLogger | None" = None,
        error_factory: ErrorFactory | None = None,
        config: "DispatchConfig | None" = None,
    ):
        """Initialize dispatcher.

        Args:
            connections: Connection registry to route through
            logger: Optional logger
            error_factory: Optional error factory (defaults to the shared one)
            config: Optional dispatch config (slow-call threshold)
        """
        self._connections = connections
        self._logger = logger
        self._error_factory = error_factory or get_error_factory()
        self._slow_call_threshold_ms = config.slow_call_threshold_ms if config else 500.0

    async def invoke(
        self,
        tool_id: str,
        arguments: dict[str, Any] | None = None,
        context: CallContext | None = None,
    ) -> CallResult:
        """Invoke a bridged tool by its caller-facing id.

        Args:
            tool_id: Caller-facing tool id
            arguments: Caller arguments
            context: Optional caller context

        Returns:
            CallResult; duration covers the remote call only
        """
        decoded = ToolIdCodec.decode(tool_id)
        if decoded is None:
            error = create_error("MALFORMED_TOOL_ID", tool_id=tool_id)
            result = from_error(error, tool_name=str(tool_id), provider_id=UNKNOWN_PROVIDER)
            if self._logger:
                call_log = self._logger.call(UNKNOWN_PROVIDER, str(tool_id))
                self._record_completion(call_log, arguments, result)
            return result

        provider_id, tool_name = decoded
        call_log = self._logger.call(provider_id, tool_name) if self._logger else None
        sent_args: dict[str, Any] | None = None
        duration_ms = 0.0

        async with instrument_tool_call(provider_id, tool_name) as telemetry_result:
            try:
                connection = self._connections.get_connection(provider_id)
                if connection is None:
                    raise create_error(
                        "NOT_CONNECTED", provider_id=provider_id, tool_name=tool_name
                    )

                tool = connection.get_tool(tool_name)
                if tool is None:
                    raise create_error(
                        "TOOL_NOT_FOUND", provider_id=provider_id, tool_name=tool_name
                    )

                sent_args = to_provider_args(arguments, tool.input_schema)
                if call_log:
                    call_log.calling(tool_id, sent_args)

                start_time = time.perf_counter()
                try:
                    raw = await connection.call_tool(tool_name, sent_args)
                finally:
                    duration_ms = (time.perf_counter() - start_time) * 1000

                result = from_provider_result(raw, tool_name, provider_id, duration_ms)
            except Exception as e:
                error = self._error_factory.from_exception(
                    e, provider_id=provider_id, tool_name=tool_name
                )
                result = from_error(error, tool_name, provider_id, duration_ms)

            record_call_result(telemetry_result, result.success, result.error_code)

        if call_log:
            self._record_completion(call_log, sent_args or arguments, result)
        return result

    def _record_completion(
        self, call_log: "CallLogger", arguments: dict[str, Any] | None, result: CallResult
    ) -> None:
        duration_ms = result.metadata.duration_ms
        call_log.completed(
            arguments,
            success=result.success,
            duration_ms=duration_ms,
            result=extract_text_content(result.data) if result.success else None,
            error=result.error,
        )
        if duration_ms > self._slow_call_threshold_ms:
            call_log.slow(duration_ms, self._slow_call_threshold_ms)

    async def invoke_batch(self, calls: Iterable[ToolCall]) -> list[CallResult]:
        """Invoke calls one after another; one result per call, in order."""
        return [await self.invoke(call.tool_id, call.arguments, call.context) for call in calls]

    def create_handler(self, provider_id: str, tool_name: str) -> ToolHandler:
        """Caller-facing handler bound to one provider tool."""
        tool_id = ToolIdCodec.encode(provider_id, tool_name)

        async def handler(
            arguments: dict[str, Any], context: CallContext | None = None
        ) -> CallResult:
            return await self.invoke(tool_id, arguments, context)

        return handler
