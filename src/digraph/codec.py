"""JSON wire format for graph documents.

A document looks like::

    {
      "_id": "...",
      "_created": "2024-05-01T12:00:00.000Z",
      "_nodes": {"<nodeId>": {"id", "created", "value", "edgeIdsOut", "edgeIdsIn"}},
      "_edges": {"<edgeId>": {"id", "created", "fromId", "toId", "value"}},
      "_error": null
    }

Reading goes through pydantic models so that malformed documents surface as
a single ``ValidationError``. Writing goes through :mod:`json` with NaN and
Infinity rejected, since they have no JSON representation.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from digraph.entities import Edge, Node
from digraph.errors import DiGraphError, EdgeEndpointError, StoredGraphError

COMPACT_SEPARATORS = (",", ":")
PRETTY_INDENT = 2


class NodeRecord(BaseModel):
    """Serialized node."""

    model_config = ConfigDict(extra="ignore")

    id: str
    created: str
    value: Any
    edge_ids_out: list[str] = Field(default_factory=list, alias="edgeIdsOut")
    edge_ids_in: list[str] = Field(default_factory=list, alias="edgeIdsIn")

    def to_node(self) -> Node[Any]:
        return Node(
            id=self.id,
            created=self.created,
            value=self.value,
            edge_ids_out=tuple(self.edge_ids_out),
            edge_ids_in=tuple(self.edge_ids_in),
        )


class EdgeRecord(BaseModel):
    """Serialized edge."""

    model_config = ConfigDict(extra="ignore")

    id: str
    created: str
    from_id: str = Field(alias="fromId")
    to_id: str = Field(alias="toId")
    value: Any

    def to_edge(self) -> Edge[Any]:
        return Edge(
            id=self.id,
            created=self.created,
            from_id=self.from_id,
            to_id=self.to_id,
            value=self.value,
        )


class ErrorRecord(BaseModel):
    """Serialized sticky error."""

    model_config = ConfigDict(extra="ignore")

    message: str
    edge_id: str | None = Field(default=None, alias="edgeId")
    from_id: str | None = Field(default=None, alias="fromId")
    to_id: str | None = Field(default=None, alias="toId")
    missing: str | None = None

    def to_error(self) -> DiGraphError:
        if (
            self.edge_id is not None
            and self.from_id is not None
            and self.to_id is not None
            and self.missing in ("from", "to", "both")
        ):
            return EdgeEndpointError(
                edge_id=self.edge_id,
                from_id=self.from_id,
                to_id=self.to_id,
                missing=self.missing,  # type: ignore[arg-type]
            )
        return StoredGraphError(self.message)


class GraphDocument(BaseModel):
    """Top-level graph document.

    Only ``_id`` is required. A missing ``_created`` is filled in by the
    reader; missing ``_nodes`` and ``_edges`` read as empty.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(alias="_id")
    created: datetime | None = Field(default=None, alias="_created")
    nodes: dict[str, NodeRecord] = Field(default_factory=dict, alias="_nodes")
    edges: dict[str, EdgeRecord] = Field(default_factory=dict, alias="_edges")
    error: ErrorRecord | str | None = Field(default=None, alias="_error")

    @field_validator("created")
    @classmethod
    def _created_as_utc(cls, value: datetime | None) -> datetime | None:
        """Convert to UTC; naive values are taken as UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        try:
            return value.astimezone(UTC)
        except OverflowError as e:
            raise ValueError(f"{value.isoformat()} is outside the UTC date range") from e

    def restored_error(self) -> DiGraphError | None:
        if self.error is None:
            return None
        if isinstance(self.error, str):
            return StoredGraphError(self.error)
        return self.error.to_error()


def encode_document(document: dict[str, Any], *, pretty: bool = False) -> str:
    """Encode a document dict as JSON text.

    Args:
        document: Graph document as produced by ``DiGraph.to_dict()``.
        pretty: Two-space indentation if True, otherwise the most compact form.

    Returns:
        JSON text.

    Raises:
        TypeError: If a payload is not a JSON type.
        ValueError: If a payload is circular or a non-finite float.
        RecursionError: If a payload is nested too deeply to encode.
    """
    if pretty:
        return json.dumps(document, indent=PRETTY_INDENT, ensure_ascii=False, allow_nan=False)
    return json.dumps(
        document, separators=COMPACT_SEPARATORS, ensure_ascii=False, allow_nan=False
    )


def decode_document(text: str | bytes) -> GraphDocument:
    """Parse and validate JSON text as a graph document.

    Raises:
        pydantic.ValidationError: If the text is not JSON or not a graph document.
    """
    return GraphDocument.model_validate_json(text)


def validate_document(data: Any) -> GraphDocument:
    """Validate an already-parsed object as a graph document.

    Raises:
        pydantic.ValidationError: If *data* is not a graph document.
    """
    return GraphDocument.model_validate(data)
