"""Tests for the Success/Failure result type."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from typing import Any

import pytest

from digraph.result import Failure, Result, Success, is_failure, is_success


def _describe(result: Result[int, str]) -> str:
    match result:
        case Success(value):
            return f"ok:{value}"
        case Failure(error):
            return f"err:{error}"
    raise AssertionError("unreachable")


def test_pattern_matching() -> None:
    """Both variants destructure positionally."""
    assert _describe(Success(3)) == "ok:3"
    assert _describe(Failure("boom")) == "err:boom"


def test_predicates() -> None:
    """is_success / is_failure distinguish the variants."""
    ok: Result[int, str] = Success(1)
    err: Result[int, str] = Failure("x")

    assert is_success(ok) and not is_failure(ok)
    assert is_failure(err) and not is_success(err)


def test_equality() -> None:
    """Variants compare by payload and type."""
    assert Success(1) == Success(1)
    assert Success(1) != Failure(1)


def test_immutable() -> None:
    """Results cannot be modified."""
    result: Any = Success(1)
    with pytest.raises(FrozenInstanceError):
        result.value = 2
