"""Tests for gotochar.types — value objects and match-set helpers."""
from __future__ import annotations

import pytest

from gotochar.types import (
    Candidate,
    InvalidCountError,
    PatternError,
    Position,
    Range,
    count_matches,
    empty_match_set,
    first_match,
)


# ── Position ──────────────────────────────────────────────────────────


class TestPosition:
    def test_ordering(self) -> None:
        assert Position(0, 9) < Position(1, 0)
        assert Position(2, 3) < Position(2, 4)

    def test_frozen(self) -> None:
        pos = Position(1, 2)
        with pytest.raises(AttributeError):
            pos.line = 3  # type: ignore[misc]

    def test_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            Position(-1, 0)
        with pytest.raises(ValueError):
            Position(0, -1)


# ── Range ─────────────────────────────────────────────────────────────


class TestRange:
    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            Range(Position(1, 0), Position(0, 5))

    def test_empty_range(self) -> None:
        assert Range(Position(3, 3), Position(3, 3)).is_empty
        assert not Range(Position(3, 3), Position(3, 4)).is_empty

    def test_hashable(self) -> None:
        a = Range(Position(0, 0), Position(0, 2))
        b = Range(Position(0, 0), Position(0, 2))
        assert {a, b} == {a}


# ── Match-set helpers ─────────────────────────────────────────────────


class TestMatchSetHelpers:
    def _matches(self) -> dict[str, tuple[Range, ...]]:
        r1 = Range(Position(0, 0), Position(0, 1))
        r2 = Range(Position(4, 2), Position(4, 3))
        return {"empty": (), "left": (r1,), "right": (r2, r1)}

    def test_count(self) -> None:
        assert count_matches(self._matches()) == 3
        assert count_matches({}) == 0

    def test_first_match_skips_empty_views(self) -> None:
        found = first_match(self._matches())
        assert found == ("left", Range(Position(0, 0), Position(0, 1)))
        assert first_match({"a": ()}) is None

    def test_empty_match_set(self) -> None:
        assert empty_match_set({"a": (), "b": ()}) == {"a": (), "b": ()}


# ── Errors ────────────────────────────────────────────────────────────


class TestErrors:
    def test_pattern_error_carries_pattern(self) -> None:
        err = PatternError("(", "missing )")
        assert err.pattern == "("
        assert "missing )" in str(err)
        assert isinstance(err, ValueError)

    def test_invalid_count_message(self) -> None:
        assert "at least 1" in str(InvalidCountError(0))


def test_candidate_is_frozen() -> None:
    cand = Candidate("a", "view", Range(Position(0, 0), Position(0, 1)))
    with pytest.raises(AttributeError):
        cand.label = "b"  # type: ignore[misc]
