"""Tests for graph error types."""

from __future__ import annotations

import pytest

from digraph.errors import (
    DiGraphError,
    EdgeEndpointError,
    GraphParseError,
    GraphSerializationError,
    StoredGraphError,
)


class TestEdgeEndpointError:
    """Test the sticky edge admission error."""

    @pytest.mark.parametrize(
        ("missing", "expected"),
        [
            ("both", "source 'a' and target 'b' not found"),
            ("from", "source 'a' not found (target 'b')"),
            ("to", "target 'b' not found (source 'a')"),
        ],
    )
    def test_message(self, missing: str, expected: str) -> None:
        """Message starts with 'undefined edge' and names both ids."""
        error = EdgeEndpointError(edge_id="e", from_id="a", to_id="b", missing=missing)  # type: ignore[arg-type]
        assert str(error) == f"undefined edge 'e': {expected}"

    def test_is_digraph_error(self) -> None:
        error = EdgeEndpointError(edge_id="e", from_id="a", to_id="b", missing="both")
        assert isinstance(error, DiGraphError)

    def test_to_dict(self) -> None:
        """Wire form carries type, message and the ids."""
        error = EdgeEndpointError(edge_id="e", from_id="a", to_id="b", missing="from")
        assert error.to_dict() == {
            "type": "EdgeEndpointError",
            "message": str(error),
            "edgeId": "e",
            "fromId": "a",
            "toId": "b",
            "missing": "from",
        }


def test_local_errors_carry_reason() -> None:
    """Serialization and parse errors keep their reason."""
    ser = GraphSerializationError("bad payload")
    parse = GraphParseError("_id: Field required")

    assert ser.reason == "bad payload"
    assert "Cannot serialize graph" in str(ser)
    assert parse.reason == "_id: Field required"
    assert "Cannot parse graph" in str(parse)


def test_stored_error() -> None:
    """Restored errors keep the original message."""
    error = StoredGraphError("boom")
    assert str(error) == "boom"
    assert error.to_dict() == {"type": "StoredGraphError", "message": "boom"}
