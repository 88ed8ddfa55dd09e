"""Tool Identifier Codec - caller-facing tool ids.

Format: ``<namespace>.<provider_id>.<tool_name>``. Neither part may contain
the separator, which keeps ids collision-free across providers.
"""

from mcp_bridge.errors import create_error


class ToolIdCodec:
    """Encode/decode caller-facing tool ids."""

    PREFIX = "mcp_bridge"
    SEPARATOR = "."

    @classmethod
    def encode(cls, provider_id: str, tool_name: str) -> str:
        """Compose the caller-facing id for a provider tool.

        Raises:
            BridgeError(MALFORMED_TOOL_ID) if either part is empty or contains the separator
        """
        for part in (provider_id, tool_name):
            if not part or cls.SEPARATOR in part:
                raise create_error(
                    "MALFORMED_TOOL_ID",
                    tool_id=f"{cls.PREFIX}{cls.SEPARATOR}{provider_id}{cls.SEPARATOR}{tool_name}",
                    provider_id=provider_id,
                    tool_name=tool_name,
                    detail=f"'{part}' is empty or contains '{cls.SEPARATOR}'",
                )
        return cls.SEPARATOR.join((cls.PREFIX, provider_id, tool_name))

    @classmethod
    def decode(cls, tool_id: object) -> tuple[str, str] | None:
        """Split an id into (provider_id, tool_name).

        Returns None for anything that is not a well-formed id; never raises.
        """
        if not isinstance(tool_id, str):
            return None

        head = cls.PREFIX + cls.SEPARATOR
        if not tool_id.startswith(head):
            return None

        parts = tool_id[len(head) :].split(cls.SEPARATOR)
        if len(parts) != 2 or not all(parts):
            return None
        return parts[0], parts[1]

    @classmethod
    def is_bridge_tool(cls, tool_id: object) -> bool:
        return cls.decode(tool_id) is not None
