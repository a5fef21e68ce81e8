"""Node and edge records.

Nodes and edges never hold references to each other. An edge names its
endpoints by id and a node lists the ids of its incident edges, so every
record can be resolved against the id-keyed stores of a graph snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from digraph.providers import DEFAULT_PROVIDERS, Providers

N = TypeVar("N")
E = TypeVar("E")
T = TypeVar("T")


@dataclass(frozen=True)
class Node(Generic[N]):
    """A node record.

    Attributes:
        id: Opaque identifier, unique among the nodes of a graph.
        created: Creation timestamp (millisecond UTC ISO-8601).
        value: Payload.
        edge_ids_out: Ids of outgoing edges, most recently admitted first.
        edge_ids_in: Ids of incoming edges, most recently admitted first.
    """

    id: str
    created: str
    value: N
    edge_ids_out: tuple[str, ...] = field(default=())
    edge_ids_in: tuple[str, ...] = field(default=())

    def with_value(self, value: T) -> Node[T]:
        """Return a copy carrying *value*, keeping identity and adjacency."""
        return replace(self, value=value)  # type: ignore[return-value]

    def with_edge_out(self, edge_id: str) -> Node[N]:
        return replace(self, edge_ids_out=(edge_id, *self.edge_ids_out))

    def with_edge_in(self, edge_id: str) -> Node[N]:
        return replace(self, edge_ids_in=(edge_id, *self.edge_ids_in))

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the node."""
        return {
            "id": self.id,
            "created": self.created,
            "value": self.value,
            "edgeIdsOut": list(self.edge_ids_out),
            "edgeIdsIn": list(self.edge_ids_in),
        }


@dataclass(frozen=True)
class Edge(Generic[E]):
    """A directed edge record.

    Attributes:
        id: Opaque identifier, unique among the edges of a graph.
        created: Creation timestamp (millisecond UTC ISO-8601).
        from_id: Id of the source node.
        to_id: Id of the target node.
        value: Payload.
    """

    id: str
    created: str
    from_id: str
    to_id: str
    value: E

    def with_value(self, value: T) -> Edge[T]:
        """Return a copy carrying *value*, keeping identity and endpoints."""
        return replace(self, value=value)  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the edge."""
        return {
            "id": self.id,
            "created": self.created,
            "fromId": self.from_id,
            "toId": self.to_id,
            "value": self.value,
        }


class EntityFactory:
    """Creates unattached nodes and edges.

    The factory only allocates ids and timestamps. Whether an edge's
    endpoints exist is checked by the graph when the edge is admitted.
    """

    def __init__(self, providers: Providers = DEFAULT_PROVIDERS) -> None:
        self._providers = providers

    def new_node(self, value: N) -> Node[N]:
        return Node(
            id=self._providers.new_id(),
            created=self._providers.clock(),
            value=value,
        )

    def new_edge(self, *, from_id: str, to_id: str, value: E) -> Edge[E]:
        return Edge(
            id=self._providers.new_id(),
            created=self._providers.clock(),
            from_id=from_id,
            to_id=to_id,
            value=value,
        )


_default_factory = EntityFactory()


def new_node(value: N) -> Node[N]:
    """Create a node with a fresh id and timestamp and no edges."""
    return _default_factory.new_node(value)


def new_edge(*, from_id: str, to_id: str, value: E) -> Edge[E]:
    """Create an edge with a fresh id and timestamp. Endpoints are not checked."""
    return _default_factory.new_edge(from_id=from_id, to_id=to_id, value=value)
