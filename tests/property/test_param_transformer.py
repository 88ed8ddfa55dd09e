"""Property-based tests for argument coercion."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcp_bridge.invoker.transformer import to_provider_args

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "count": {"type": "integer"},
        "ratio": {"type": "number"},
        "flag": {"type": "boolean"},
        "items": {"type": "array"},
    },
}

keys = st.sampled_from(["name", "count", "ratio", "flag", "items", "extra"])
values = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False),
    st.text(max_size=20),
    st.lists(st.integers(), max_size=5),
)


@pytest.mark.property
class TestTransformerProperties:
    """Key handling of to_provider_args."""

    @given(args=st.dictionaries(keys, values))
    def test_drops_none_and_adds_nothing(self, args):
        result = to_provider_args(args, SCHEMA)

        assert set(result) == {k for k, v in args.items() if v is not None}
        assert None not in result.values()

    @given(args=st.dictionaries(keys, values))
    def test_string_params_become_strings(self, args):
        result = to_provider_args(args, SCHEMA)
        if "name" in result:
            assert isinstance(result["name"], str)
        if "flag" in result:
            assert isinstance(result["flag"], bool)
        if "items" in result:
            assert isinstance(result["items"], list)

    @given(args=st.dictionaries(st.text(max_size=10), values))
    def test_no_schema_passes_values_through(self, args):
        expected = {k: v for k, v in args.items() if v is not None}
        assert to_provider_args(args, None) == expected

    @given(args=st.dictionaries(keys, values))
    def test_idempotent(self, args):
        once = to_provider_args(args, SCHEMA)
        assert to_provider_args(once, SCHEMA) == once
