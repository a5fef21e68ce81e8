"""Structured logging for digraph.

Library modules log through :func:`get_logger`, which wraps the stdlib logger
of the same name and configures nothing. Records travel through whatever
handlers the host application installed; the ``digraph`` logger carries a
NullHandler so an unconfigured host stays quiet.

The ``dg`` command line tool calls :func:`configure_logging`, which owns the
root logger:
- Console logging: Rich handler on stderr, level chosen by verbosity
- File logging: every event as a JSON line, when a log file is given
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]

logging.getLogger("digraph").addHandler(logging.NullHandler())

_file_handler: logging.FileHandler | None = None


class JSONLFileHandler(logging.FileHandler):
    """File handler that writes one JSON object per record."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
            }
            # wrap_for_formatter hands the event dict over as record.msg
            if isinstance(record.msg, dict):
                event_dict = dict(record.msg)
                event_dict.pop("level", None)
                event_dict.pop("timestamp", None)
                entry["message"] = event_dict.pop("event", "")
                entry.update(event_dict)
            else:
                entry["message"] = record.getMessage()

            if self.stream is None:
                self.stream = self._open()
            self.stream.write(json.dumps(entry, default=str) + "\n")
            self.stream.flush()
        except Exception:
            self.handleError(record)


def configure_logging(verbosity: int = 0, log_file: Path | None = None) -> None:
    """Install console (and optional JSONL file) handlers on the root logger.

    Meant for the command line entry point only; it replaces any root
    handlers already present.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG
        log_file: If given, also append all events to this JSONL file.
    """
    global _file_handler
    close_file_logging()

    console_level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=console_level,
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=structlog.dev.ConsoleRenderer(colors=False))
    )
    handlers: list[logging.Handler] = [console_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = JSONLFileHandler(str(log_file), mode="a", encoding="utf-8")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    root_level = logging.DEBUG if log_file is not None else console_level
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to the stdlib logger *name*.

    Level filtering and output are left to the stdlib logging tree.
    """
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger


def close_file_logging() -> None:
    """Close the JSONL file handler, if any."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
