"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

import pytest
from rich.logging import RichHandler

from digraph.entities import EntityFactory
from digraph.graph import DiGraph
from digraph.observability.logging import JSONLFileHandler
from digraph.providers import Providers, utc_timestamp

FIXED_INSTANT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"


class SequentialIds:
    """Id generator producing ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"


def fixed_clock(instant: datetime | None = None) -> str:
    """Clock frozen at FIXED_INSTANT unless an instant is given."""
    return utc_timestamp(instant if instant is not None else FIXED_INSTANT)


@pytest.fixture
def providers() -> Providers:
    """Deterministic clock and sequential ids."""
    return Providers(clock=fixed_clock, new_id=SequentialIds())


@pytest.fixture
def factory(providers: Providers) -> EntityFactory:
    """Entity factory using deterministic providers."""
    return EntityFactory(providers)


@pytest.fixture
def graph(providers: Providers) -> DiGraph[Any, Any]:
    """Empty graph with id ``g-1`` created at FIXED_INSTANT."""
    return DiGraph.empty(graph_id="g-1", providers=providers)


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Drop handlers installed by configure_logging and restore the root level."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if isinstance(handler, RichHandler | JSONLFileHandler):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
