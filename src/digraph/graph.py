"""Persistent directed graph container.

A DiGraph is a value. Every update returns a new graph and leaves the
receiver unchanged, so any number of readers can hold any snapshot.

The graph enforces referential integrity on edge admission:
- An edge is stored only if both endpoints exist in the same graph
- Admitting an edge prepends its id to the source's outgoing list and the
  target's incoming list
- A rejected edge fails the graph: the error is kept in graph state and
  every later set_node/set_edge returns the failed graph unchanged

Filters and maps do not re-check integrity. An edge whose endpoint was
filtered out stays in the edge store and shows up in bad_edges().
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar, Union

from pydantic import ValidationError

from digraph.codec import GraphDocument, decode_document, encode_document, validate_document
from digraph.entities import Edge, Node
from digraph.errors import (
    DiGraphError,
    EdgeEndpointError,
    GraphParseError,
    GraphSerializationError,
)
from digraph.observability.logging import get_logger
from digraph.providers import DEFAULT_PROVIDERS, Providers
from digraph.result import Failure, Result, Success
from digraph.store import EntityStore, FrozenEntityStore

if TYPE_CHECKING:
    from datetime import datetime

log = get_logger(__name__)

N = TypeVar("N")
E = TypeVar("E")
T = TypeVar("T")
ErrT = TypeVar("ErrT")


@dataclass(frozen=True)
class Snapshot(Generic[N, E]):
    """Identity and stores of one graph value."""

    id: str
    created: str
    nodes: EntityStore[Node[N]]
    edges: EntityStore[Edge[E]]


@dataclass(frozen=True)
class ValidState(Generic[N, E]):
    """Graph accepts further updates."""

    snapshot: Snapshot[N, E]


@dataclass(frozen=True)
class FailedState(Generic[N, E]):
    """Graph rejected an edge. Terminal: updates are no-ops, queries still work."""

    snapshot: Snapshot[N, E]
    error: DiGraphError


GraphState: TypeAlias = Union[ValidState[N, E], FailedState[N, E]]  # noqa: UP007


class DiGraph(Generic[N, E]):
    """Directed graph of ``Node[N]`` and ``Edge[E]`` records.

    Create one with :meth:`empty` (or :func:`create_graph`), add records from
    :func:`~digraph.entities.new_node` / :func:`~digraph.entities.new_edge`
    with :meth:`set_node` / :meth:`set_edge`, and query the returned graph.

    Attributes:
        _state: ValidState or FailedState wrapping the current snapshot.
    """

    __slots__ = ("_state",)

    def __init__(self, state: GraphState[N, E]) -> None:
        self._state = state

    @classmethod
    def empty(
        cls,
        *,
        graph_id: str | None = None,
        created: datetime | None = None,
        providers: Providers = DEFAULT_PROVIDERS,
    ) -> DiGraph[N, E]:
        """Create an empty, valid graph.

        Args:
            graph_id: Graph identity. A fresh id is generated if omitted.
            created: Creation instant. Defaults to now.
            providers: Clock and id generator to use.

        Returns:
            New empty graph.
        """
        snapshot: Snapshot[N, E] = Snapshot(
            id=graph_id if graph_id is not None else providers.new_id(),
            created=providers.clock(created),
            nodes=FrozenEntityStore.empty(),
            edges=FrozenEntityStore.empty(),
        )
        return cls(ValidState(snapshot))

    # -------------------------------------------------------------------------
    # Identity and state
    # -------------------------------------------------------------------------

    @property
    def _snapshot(self) -> Snapshot[N, E]:
        return self._state.snapshot

    @property
    def id(self) -> str:
        """Graph identity, shared by every graph derived from this one."""
        return self._snapshot.id

    @property
    def created(self) -> str:
        """Creation timestamp, shared by every graph derived from this one."""
        return self._snapshot.created

    @property
    def error(self) -> DiGraphError | None:
        """The sticky error, or None while the graph is valid."""
        if isinstance(self._state, FailedState):
            return self._state.error
        return None

    @property
    def state(self) -> GraphState[N, E]:
        return self._state

    def match(
        self,
        on_success: Callable[[DiGraph[N, E]], T],
        on_failure: Callable[[DiGraphError], ErrT],
    ) -> Result[T, ErrT]:
        """Branch on graph state.

        Args:
            on_success: Called with this graph if it is valid.
            on_failure: Called with the sticky error if the graph failed.

        Returns:
            ``Success(on_success(self))`` or ``Failure(on_failure(error))``.
        """
        match self._state:
            case FailedState(error=error):
                return Failure(on_failure(error))
            case _:
                return Success(on_success(self))

    def _derive(
        self,
        nodes: EntityStore[Node[Any]] | None = None,
        edges: EntityStore[Edge[Any]] | None = None,
    ) -> DiGraph[Any, Any]:
        """Build a graph with the same identity and state, replacing stores."""
        snapshot = Snapshot(
            id=self.id,
            created=self.created,
            nodes=nodes if nodes is not None else self._snapshot.nodes,
            edges=edges if edges is not None else self._snapshot.edges,
        )
        if isinstance(self._state, FailedState):
            return DiGraph(FailedState(snapshot, self._state.error))
        return DiGraph(ValidState(snapshot))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_nodes(self) -> bool:
        return len(self._snapshot.nodes) > 0

    def has_edges(self) -> bool:
        return len(self._snapshot.edges) > 0

    def node_count(self, predicate: Callable[[Node[N]], bool] | None = None) -> int:
        if predicate is None:
            return len(self._snapshot.nodes)
        return len(self.nodes(predicate))

    def edge_count(self, predicate: Callable[[Edge[E]], bool] | None = None) -> int:
        if predicate is None:
            return len(self._snapshot.edges)
        return len(self.edges(predicate))

    def nodes(self, keep: Callable[[Node[N]], bool] | None = None) -> list[Node[N]]:
        """Nodes in storage (insertion) order, optionally filtered."""
        nodes = self._snapshot.nodes.values()
        return [n for n in nodes if keep(n)] if keep else nodes

    def edges(self, keep: Callable[[Edge[E]], bool] | None = None) -> list[Edge[E]]:
        """Edges in storage (insertion) order, optionally filtered."""
        edges = self._snapshot.edges.values()
        return [e for e in edges if keep(e)] if keep else edges

    def node_values(self, keep: Callable[[N], bool] | None = None) -> list[N]:
        values = [n.value for n in self._snapshot.nodes.values()]
        return [v for v in values if keep(v)] if keep else values

    def edge_values(self, keep: Callable[[E], bool] | None = None) -> list[E]:
        values = [e.value for e in self._snapshot.edges.values()]
        return [v for v in values if keep(v)] if keep else values

    def get_node(self, node_id: str) -> Node[N] | None:
        """Get a node by ID, or None if not found."""
        return self._snapshot.nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Edge[E] | None:
        """Get an edge by ID, or None if not found."""
        return self._snapshot.edges.get(edge_id)

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def filter_nodes(self, keep: Callable[[Node[N]], bool]) -> DiGraph[N, E]:
        """Return a graph holding only the nodes *keep* accepts.

        Edges and the adjacency lists of surviving nodes are not touched, so
        they may name nodes or edges that are no longer present.
        """
        return self._derive(nodes=self._snapshot.nodes.filter(keep))

    def filter_edges(self, keep: Callable[[Edge[E]], bool]) -> DiGraph[N, E]:
        """Return a graph holding only the edges *keep* accepts.

        Node adjacency lists still list the ids of dropped edges.
        """
        return self._derive(edges=self._snapshot.edges.filter(keep))

    def filter_node_values(self, keep: Callable[[N], bool]) -> DiGraph[N, E]:
        return self.filter_nodes(lambda node: keep(node.value))

    def filter_edge_values(self, keep: Callable[[E], bool]) -> DiGraph[N, E]:
        return self.filter_edges(lambda edge: keep(edge.value))

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def for_each_node(self, fn: Callable[[Node[N]], object]) -> DiGraph[N, E]:
        for node in self.nodes():
            fn(node)
        return self

    def for_each_edge(self, fn: Callable[[Edge[E]], object]) -> DiGraph[N, E]:
        for edge in self.edges():
            fn(edge)
        return self

    def for_each_node_value(self, fn: Callable[[N], object]) -> DiGraph[N, E]:
        for value in self.node_values():
            fn(value)
        return self

    def for_each_edge_value(self, fn: Callable[[E], object]) -> DiGraph[N, E]:
        for value in self.edge_values():
            fn(value)
        return self

    # -------------------------------------------------------------------------
    # Maps
    # -------------------------------------------------------------------------

    def map_nodes(self, fn: Callable[[Node[N]], Node[T]]) -> DiGraph[T, E]:
        """Replace every node with ``fn(node)``. The edge store is shared."""
        return self._derive(nodes=self._snapshot.nodes.map(fn))

    def map_edges(self, fn: Callable[[Edge[E]], Edge[T]]) -> DiGraph[N, T]:
        """Replace every edge with ``fn(edge)``. The node store is shared."""
        return self._derive(edges=self._snapshot.edges.map(fn))

    def map_node_values(self, fn: Callable[[N], T]) -> DiGraph[T, E]:
        return self.map_nodes(lambda node: node.with_value(fn(node.value)))

    def map_edge_values(self, fn: Callable[[E], T]) -> DiGraph[N, T]:
        return self.map_edges(lambda edge: edge.with_value(fn(edge.value)))

    # -------------------------------------------------------------------------
    # Folds
    # -------------------------------------------------------------------------

    def reduce_nodes(self, fn: Callable[[T, Node[N], int], T], start: T) -> T:
        """Left fold over nodes in storage order; *fn* gets (acc, node, index)."""
        return _fold(self.nodes(), fn, start)

    def reduce_edges(self, fn: Callable[[T, Edge[E], int], T], start: T) -> T:
        return _fold(self.edges(), fn, start)

    def reduce_node_values(self, fn: Callable[[T, N, int], T], start: T) -> T:
        return _fold(self.node_values(), fn, start)

    def reduce_edge_values(self, fn: Callable[[T, E, int], T], start: T) -> T:
        return _fold(self.edge_values(), fn, start)

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def set_node(self, node: Node[N]) -> DiGraph[N, E]:
        """Insert or replace a node by its id.

        Args:
            node: Node record, usually from ``new_node``.

        Returns:
            New graph with the node stored, or this graph if it has failed.
        """
        if isinstance(self._state, FailedState):
            return self
        return self._derive(nodes=self._snapshot.nodes.set(node.id, node))

    def set_edge(self, edge: Edge[E]) -> DiGraph[N, E]:
        """Admit an edge between two existing nodes.

        The edge is stored and its id is prepended to the source node's
        ``edge_ids_out`` and the target node's ``edge_ids_in``. Several edges
        may connect the same pair of nodes.

        Args:
            edge: Edge record, usually from ``new_edge``.

        Returns:
            New graph containing the edge. If either endpoint is missing, a
            failed graph carrying an EdgeEndpointError and the unchanged
            stores. This graph itself if it has already failed.
        """
        if isinstance(self._state, FailedState):
            return self
        snapshot = self._state.snapshot

        source = snapshot.nodes.get(edge.from_id)
        target = snapshot.nodes.get(edge.to_id)

        if source is None or target is None:
            if source is None and target is None:
                missing = "both"
            elif source is None:
                missing = "from"
            else:
                missing = "to"
            error = EdgeEndpointError(
                edge_id=edge.id,
                from_id=edge.from_id,
                to_id=edge.to_id,
                missing=missing,
            )
            log.warning(
                "edge_rejected",
                graph_id=snapshot.id,
                edge_id=edge.id,
                from_id=edge.from_id,
                to_id=edge.to_id,
                missing=missing,
            )
            return DiGraph(FailedState(snapshot, error))

        if edge.from_id == edge.to_id:
            # Self-loop: both lists live on the one node.
            nodes = snapshot.nodes.set(
                edge.from_id, source.with_edge_out(edge.id).with_edge_in(edge.id)
            )
        else:
            nodes = snapshot.nodes.set(edge.from_id, source.with_edge_out(edge.id)).set(
                edge.to_id, target.with_edge_in(edge.id)
            )
        edges = snapshot.edges.set(edge.id, edge)

        log.debug(
            "edge_admitted",
            graph_id=snapshot.id,
            edge_id=edge.id,
            from_id=edge.from_id,
            to_id=edge.to_id,
        )
        return self._derive(nodes=nodes, edges=edges)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def orphans(self) -> list[Node[N]]:
        """Nodes with no incoming and no outgoing edge ids."""
        return self.nodes(lambda n: not n.edge_ids_in and not n.edge_ids_out)

    def has_orphans(self) -> bool:
        return bool(self.orphans())

    def bad_edges(self) -> list[Edge[E]]:
        """Edges whose source or target is not in the node store."""
        nodes = self._snapshot.nodes
        return self.edges(lambda e: not nodes.has(e.from_id) or not nodes.has(e.to_id))

    def has_bad_edges(self) -> bool:
        return bool(self.bad_edges())

    def validate_invariants(self) -> list[str]:
        """Check adjacency invariants and return any violations.

        Invariants checked:
        1. Every edge's source and target exist
        2. Every edge is listed by its source (outgoing) and target (incoming)
        3. Every id in a node's adjacency lists names a stored edge

        Graphs built only through set_node/set_edge always pass. Filtering or
        loading a hand-written document can break these; nothing is repaired.

        Returns:
            List of violation messages (empty if valid).
        """
        violations: list[str] = []
        nodes = self._snapshot.nodes
        edges = self._snapshot.edges

        for edge in edges:
            source = nodes.get(edge.from_id)
            target = nodes.get(edge.to_id)
            if source is None:
                violations.append(f"Edge '{edge.id}': source '{edge.from_id}' does not exist")
            elif edge.id not in source.edge_ids_out:
                violations.append(
                    f"Edge '{edge.id}': not listed as outgoing by source '{edge.from_id}'"
                )
            if target is None:
                violations.append(f"Edge '{edge.id}': target '{edge.to_id}' does not exist")
            elif edge.id not in target.edge_ids_in:
                violations.append(
                    f"Edge '{edge.id}': not listed as incoming by target '{edge.to_id}'"
                )

        for node in nodes:
            for edge_id in node.edge_ids_out:
                if not edges.has(edge_id):
                    violations.append(f"Node '{node.id}': outgoing edge '{edge_id}' does not exist")
            for edge_id in node.edge_ids_in:
                if not edges.has(edge_id):
                    violations.append(f"Node '{node.id}': incoming edge '{edge_id}' does not exist")

        return violations

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert graph to its wire document.

        Payload values are included as-is (not copied). A failed graph
        includes its error under ``_error``.
        """
        error = self.error
        return {
            "_id": self.id,
            "_created": self.created,
            "_nodes": {nid: node.to_dict() for nid, node in self._snapshot.nodes.items()},
            "_edges": {eid: edge.to_dict() for eid, edge in self._snapshot.edges.items()},
            "_error": error.to_dict() if error is not None else None,
        }

    def to_json(self, *, pretty: bool = False) -> Result[str, DiGraphError]:
        """Serialize the graph to JSON text.

        Args:
            pretty: Two-space indentation if True, otherwise compact.

        Returns:
            ``Success(text)``; ``Failure(error)`` with the sticky error if the
            graph has failed, or a GraphSerializationError if a payload has
            no JSON representation.
        """
        error = self.error
        if error is not None:
            return Failure(error)

        try:
            return Success(encode_document(self.to_dict(), pretty=pretty))
        except (TypeError, ValueError, RecursionError) as e:
            log.warning("graph_serialization_failed", graph_id=self.id, error=str(e))
            failure = GraphSerializationError(str(e))
            failure.__cause__ = e
            return Failure(failure)

    @classmethod
    def from_dict(
        cls, data: Any, *, providers: Providers = DEFAULT_PROVIDERS
    ) -> DiGraph[Any, Any]:
        """Create a graph from a wire document dict.

        Args:
            data: Parsed document.
            providers: Clock used when ``_created`` is absent.

        Returns:
            Reconstructed graph. Referential integrity is not re-checked.

        Raises:
            GraphParseError: If *data* is not a graph document.
        """
        try:
            document = validate_document(data)
        except ValidationError as e:
            raise GraphParseError(_describe_validation_error(e)) from e
        return cls._from_document(document, providers)

    @classmethod
    def from_json(
        cls, text: str | bytes, *, providers: Providers = DEFAULT_PROVIDERS
    ) -> Result[DiGraph[Any, Any], DiGraphError]:
        """Parse JSON text into a graph.

        Args:
            text: JSON document.
            providers: Clock used when ``_created`` is absent.

        Returns:
            ``Success(graph)`` or ``Failure(GraphParseError)``. Referential
            integrity of the parsed edges is not re-checked.
        """
        try:
            document = decode_document(text)
        except ValidationError as e:
            reason = _describe_validation_error(e)
            log.warning("graph_parse_failed", error=reason)
            failure = GraphParseError(reason)
            failure.__cause__ = e
            return Failure(failure)
        return Success(cls._from_document(document, providers))

    @classmethod
    def _from_document(cls, document: GraphDocument, providers: Providers) -> DiGraph[Any, Any]:
        snapshot: Snapshot[Any, Any] = Snapshot(
            id=document.id,
            created=providers.clock(document.created),
            nodes=FrozenEntityStore((nid, rec.to_node()) for nid, rec in document.nodes.items()),
            edges=FrozenEntityStore((eid, rec.to_edge()) for eid, rec in document.edges.items()),
        )
        error = document.restored_error()
        if error is not None:
            return cls(FailedState(snapshot, error))
        return cls(ValidState(snapshot))

    # -------------------------------------------------------------------------
    # Utility
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        error = self.error
        return (
            f"DiGraph(id={self.id}, nodes={self.node_count()}, edges={self.edge_count()}, "
            f"error={error if error is not None else 'none'})"
        )


def create_graph(
    *,
    graph_id: str | None = None,
    created: datetime | None = None,
    providers: Providers = DEFAULT_PROVIDERS,
) -> DiGraph[Any, Any]:
    """Create an empty, valid graph. See :meth:`DiGraph.empty`."""
    return DiGraph.empty(graph_id=graph_id, created=created, providers=providers)


def _fold(items: list[Any], fn: Callable[[T, Any, int], T], start: T) -> T:
    acc = start
    for index, item in enumerate(items):
        acc = fn(acc, item, index)
    return acc


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "document"
    extra = f" (+{error.error_count() - 1} more)" if error.error_count() > 1 else ""
    return f"{location}: {first['msg']}{extra}"
