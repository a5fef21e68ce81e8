"""digraph - persistent, value-oriented directed graphs.

Nodes and edges are immutable records addressed by opaque ids. A DiGraph
stores them in id-keyed maps; every update returns a new graph. Graphs
serialize to and from a small JSON document format.
"""

from digraph.entities import Edge, EntityFactory, Node, new_edge, new_node
from digraph.errors import (
    DiGraphError,
    EdgeEndpointError,
    GraphParseError,
    GraphSerializationError,
    StoredGraphError,
)
from digraph.graph import DiGraph, FailedState, Snapshot, ValidState, create_graph
from digraph.providers import DEFAULT_PROVIDERS, Providers, random_id, utc_timestamp
from digraph.result import Failure, Result, Success, is_failure, is_success

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PROVIDERS",
    "DiGraph",
    "DiGraphError",
    "Edge",
    "EdgeEndpointError",
    "EntityFactory",
    "FailedState",
    "Failure",
    "GraphParseError",
    "GraphSerializationError",
    "Node",
    "Providers",
    "Result",
    "Snapshot",
    "StoredGraphError",
    "Success",
    "ValidState",
    "__version__",
    "create_graph",
    "is_failure",
    "is_success",
    "new_edge",
    "new_node",
    "random_id",
    "utc_timestamp",
]
