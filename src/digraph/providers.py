"""Timestamp and identifier providers.

The graph core never reads the wall clock or a random source directly. It
asks a :class:`Providers` bundle instead, so tests can substitute a fixed
clock and predictable ids.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Produces a UTC ISO-8601 timestamp string."""

    def __call__(self, instant: datetime | None = None) -> str: ...


class IdGenerator(Protocol):
    """Produces a globally unique opaque identifier."""

    def __call__(self) -> str: ...


def utc_timestamp(instant: datetime | None = None) -> str:
    """Format an instant as a millisecond UTC timestamp.

    Args:
        instant: Moment to format. Naive datetimes are taken as UTC.
            Defaults to the current time.

    Returns:
        Timestamp such as ``2024-05-01T12:00:00.000Z``.
    """
    moment = instant if instant is not None else datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    stamp = moment.astimezone(UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def random_id() -> str:
    """Return a random 128-bit identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Providers:
    """Clock and id generator used when entities or graphs are created."""

    clock: Clock = utc_timestamp
    new_id: IdGenerator = random_id


DEFAULT_PROVIDERS = Providers()
