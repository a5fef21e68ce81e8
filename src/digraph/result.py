"""Two-variant outcome type.

Fallible graph operations return a :data:`Result` instead of raising, so
callers branch on the outcome before touching the payload::

    match graph.to_json(pretty=True):
        case Success(text):
            path.write_text(text)
        case Failure(error):
            log.warning("export_failed", error=str(error))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeGuard, TypeVar, Union

T = TypeVar("T")
ErrT = TypeVar("ErrT")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """A successful outcome carrying a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Failure(Generic[ErrT]):
    """A failed outcome carrying an error."""

    error: ErrT


Result: TypeAlias = Union[Success[T], Failure[ErrT]]  # noqa: UP007


def is_success(result: Result[Any, Any]) -> TypeGuard[Success[Any]]:
    return isinstance(result, Success)


def is_failure(result: Result[Any, Any]) -> TypeGuard[Failure[Any]]:
    return isinstance(result, Failure)
