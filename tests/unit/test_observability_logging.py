"""Tests for structured logging configuration."""

from __future__ import annotations

import importlib
import json
import logging
import sys
from typing import TYPE_CHECKING, Any

import pytest

from digraph.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from digraph.entities import EntityFactory
    from digraph.graph import DiGraph


@pytest.fixture
def host_handler() -> Iterator[logging.Handler]:
    """Root handler and INFO level as a host application would set them."""
    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)
    yield handler
    root_logger.removeHandler(handler)


def test_configure_logging_sets_level_warning() -> None:
    """Default verbosity (0) sets WARNING level."""
    configure_logging(verbosity=0)

    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_verbose_sets_info() -> None:
    """verbosity=1 lowers root and console handler to INFO."""
    configure_logging(verbosity=1)

    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO
    assert root_logger.handlers[0].level == logging.INFO


def test_configure_logging_with_file_opens_root_to_debug(tmp_path: Path) -> None:
    """A log file receives DEBUG events while the console stays at WARNING."""
    configure_logging(verbosity=0, log_file=tmp_path / "digraph.jsonl")
    try:
        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert root_logger.handlers[0].level == logging.WARNING
    finally:
        close_file_logging()


def test_get_logger_returns_bound_logger() -> None:
    """get_logger returns a structlog logger with expected methods."""
    logger = get_logger(__name__)

    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")


def test_get_logger_leaves_root_alone(host_handler: logging.Handler) -> None:
    """Getting and using a logger installs no handlers."""
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)

    get_logger("digraph.test").warning("something_happened")

    assert root_logger.handlers == before
    assert root_logger.level == logging.INFO


def test_import_keeps_host_logging(
    monkeypatch: pytest.MonkeyPatch, host_handler: logging.Handler
) -> None:
    """Importing digraph keeps the host's root handlers and level."""
    root_logger = logging.getLogger()
    for name in [m for m in sys.modules if m == "digraph" or m.startswith("digraph.")]:
        monkeypatch.delitem(sys.modules, name)

    importlib.import_module("digraph")

    assert host_handler in root_logger.handlers
    assert root_logger.level == logging.INFO


def test_events_reach_host_handlers(
    caplog: pytest.LogCaptureFixture, graph: DiGraph[Any, Any], factory: EntityFactory
) -> None:
    """A rejected edge is logged through the stdlib logger tree."""
    with caplog.at_level(logging.WARNING, logger="digraph"):
        graph.set_edge(factory.new_edge(from_id="ghost", to_id="phantom", value=None))

    events = [r.msg for r in caplog.records if isinstance(r.msg, dict)]
    assert [e["event"] for e in events] == ["edge_rejected"]
    assert events[0]["missing"] == "both"
    assert caplog.records[0].name == "digraph.graph"


def test_debug_events_dropped_below_level(
    caplog: pytest.LogCaptureFixture, graph: DiGraph[Any, Any], factory: EntityFactory
) -> None:
    """edge_admitted is a debug event and is filtered at WARNING."""
    a = factory.new_node("a")
    with caplog.at_level(logging.WARNING, logger="digraph"):
        graph.set_node(a).set_edge(factory.new_edge(from_id=a.id, to_id=a.id, value=None))

    assert caplog.records == []


def test_file_logging_writes_jsonl(
    tmp_path: Path, graph: DiGraph[object, object], factory: EntityFactory
) -> None:
    """A rejected edge is logged as a structured JSON line."""
    log_file = tmp_path / "logs" / "digraph.jsonl"
    configure_logging(verbosity=0, log_file=log_file)
    try:
        graph.set_edge(factory.new_edge(from_id="ghost", to_id="phantom", value=None))
    finally:
        close_file_logging()

    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    rejected = [e for e in entries if e["message"] == "edge_rejected"]
    assert len(rejected) == 1
    assert rejected[0]["level"] == "WARNING"
    assert rejected[0]["logger"] == "digraph.graph"
    assert rejected[0]["from_id"] == "ghost"
    assert rejected[0]["missing"] == "both"
