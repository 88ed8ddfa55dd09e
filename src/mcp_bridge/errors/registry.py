"""Error registry for creating errors from templates."""

from typing import Any

from .errors import BridgeError, ErrorCategory, ErrorTemplate


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace a template."""
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: BridgeError | None = None,
    ) -> BridgeError:
        """Create error instance from template + context.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error

        Returns:
            BridgeError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        detail = self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        # An explicit detail overrides the template's generic explanation
        if context.get("detail"):
            detail = str(context["detail"])

        return BridgeError(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            retryable=template.default_retryable,
            provider_id=context.get("provider_id"),
            tool_name=context.get("tool_name"),
            cause=cause,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # ROUTING errors (detected locally, before any remote call)
        self._templates["MALFORMED_TOOL_ID"] = ErrorTemplate(
            code="MALFORMED_TOOL_ID",
            category=ErrorCategory.ROUTING,
            message_template="Malformed tool id '{tool_id}'",
            detail_template="Tool ids have the form '<namespace>.<provider>.<tool>'",
            suggestion_template="Use an id produced by ToolIdCodec.encode()",
        )

        self._templates["NOT_CONNECTED"] = ErrorTemplate(
            code="NOT_CONNECTED",
            category=ErrorCategory.ROUTING,
            message_template="Provider '{provider_id}' is not connected",
            detail_template="No live connection exists for this provider",
            suggestion_template="Add the provider or test its connection to reconnect",
            default_retryable=True,
        )

        self._templates["TOOL_NOT_FOUND"] = ErrorTemplate(
            code="TOOL_NOT_FOUND",
            category=ErrorCategory.ROUTING,
            message_template="Tool '{tool_name}' not found on provider '{provider_id}'",
            detail_template="The provider's tool catalog does not advertise this tool",
            suggestion_template="List the provider's tools to see what is available",
        )

        # PROVIDER errors
        self._templates["TRANSPORT_ERROR"] = ErrorTemplate(
            code="TRANSPORT_ERROR",
            category=ErrorCategory.PROVIDER,
            message_template="Provider '{provider_id}' transport failure: {reason}",
            detail_template="The connection to the provider failed or the call could not complete",
            suggestion_template="Check that the provider process or endpoint is running",
            default_retryable=True,
        )

        # VALIDATION errors
        self._templates["COERCION_ERROR"] = ErrorTemplate(
            code="COERCION_ERROR",
            category=ErrorCategory.VALIDATION,
            message_template="Cannot coerce argument '{param}' to {expected}: {reason}",
            suggestion_template="Pass a value matching the tool's declared parameter type",
        )

        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.VALIDATION,
            message_template="Invalid configuration",
            detail_template="{detail}",
            suggestion_template="Check the provider configuration",
        )

        # SYSTEM errors
        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal error: {detail}",
            suggestion_template="This is a bug, please report it",
        )
