"""Tests for packman.core.result module."""

from __future__ import annotations

import pytest

from packman.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    def test_accessors(self) -> None:
        result = Ok(42)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 42
        assert result.unwrap_or(0) == 42

    def test_unwrap_err_raises(self) -> None:
        with pytest.raises(ValueError, match="unwrap_err on Ok"):
            Ok(1).unwrap_err()

    def test_map(self) -> None:
        assert Ok(2).map(lambda v: v * 3) == Ok(6)
        assert Ok(2).map_err(str) == Ok(2)


class TestErr:
    def test_accessors(self) -> None:
        result = Err("boom")
        assert result.is_err()
        assert not result.is_ok()
        assert result.unwrap_err() == "boom"
        assert result.unwrap_or(7) == 7

    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_map(self) -> None:
        assert Err("x").map(lambda v: v) == Err("x")
        assert Err("x").map_err(str.upper) == Err("X")


class TestPatternMatching:
    def _describe(self, result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    def test_match(self) -> None:
        assert self._describe(Ok(1)) == "ok 1"
        assert self._describe(Err("no")) == "err no"

    def test_type_guards(self) -> None:
        assert is_ok(Ok(1))
        assert is_err(Err(1))
        assert not is_ok(Err(1))
