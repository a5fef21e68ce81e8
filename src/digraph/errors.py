"""Graph error types.

Only :class:`EdgeEndpointError` outlives the call that produced it: it is
stored in the graph and makes the graph refuse further updates. The
serialization and parse errors are returned once inside a ``Failure`` and
never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


class DiGraphError(Exception):
    """Base class for graph errors."""

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the error."""
        return {"type": type(self).__name__, "message": str(self)}


@dataclass
class EdgeEndpointError(DiGraphError):
    """Raised into graph state when an edge references a missing node.

    Both the source (from) and target (to) nodes must exist in the graph
    before an edge between them can be admitted.

    Attributes:
        edge_id: Id of the rejected edge.
        from_id: Source node ID.
        to_id: Target node ID.
        missing: Which endpoint is missing ("from", "to", or "both").
    """

    edge_id: str
    from_id: str
    to_id: str
    missing: Literal["from", "to", "both"]

    def __post_init__(self) -> None:
        if self.missing == "both":
            detail = f"source '{self.from_id}' and target '{self.to_id}' not found"
        elif self.missing == "from":
            detail = f"source '{self.from_id}' not found (target '{self.to_id}')"
        else:
            detail = f"target '{self.to_id}' not found (source '{self.from_id}')"
        super().__init__(f"undefined edge '{self.edge_id}': {detail}")

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "edgeId": self.edge_id,
            "fromId": self.from_id,
            "toId": self.to_id,
            "missing": self.missing,
        }


class GraphSerializationError(DiGraphError):
    """A graph could not be encoded as JSON."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot serialize graph: {reason}")


class GraphParseError(DiGraphError):
    """A JSON document could not be read as a graph."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot parse graph: {reason}")


class StoredGraphError(DiGraphError):
    """An error restored from a serialized graph document."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
