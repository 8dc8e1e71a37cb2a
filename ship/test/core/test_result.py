"""Tests for ship.core.result module."""

from __future__ import annotations

import pytest

from ship.core.result import Err, Ok, Result


def _half(n: int) -> Result[int, str]:
    if n % 2:
        return Err("odd")
    return Ok(n // 2)


def test_equality_and_repr() -> None:
    assert _half(4) == Ok(2)
    assert _half(3) == Err("odd")
    assert repr(Ok(2)) == "Ok(2)"
    assert repr(Err("odd")) == "Err('odd')"


def test_pattern_matching() -> None:
    match _half(3):
        case Ok(_):
            pytest.fail("expected Err")
        case Err(error):
            assert error == "odd"


def test_frozen() -> None:
    ok = Ok(1)
    with pytest.raises(AttributeError):
        ok.value = 2  # type: ignore[misc]
