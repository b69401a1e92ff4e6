"""Core value types for goto-char navigation.

Positions and ranges are produced by the text source (or by the match finder
through the text source's offset conversion) and never mutated afterwards.
Views are opaque hashable handles owned by the host; this package only stores
and re-emits them.

Shapes:
    VisibleSnapshot: view -> visible ranges, captured once per navigation.
    MatchSet:        view -> matched ranges, rebuilt on every keystroke.
                      Order is visible-range order, then occurrence order.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import TypeAlias

View: TypeAlias = Hashable
VisibleSnapshot: TypeAlias = "Mapping[View, tuple[Range, ...]]"
MatchSet: TypeAlias = "dict[View, tuple[Range, ...]]"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class PatternError(ValueError):
    """Raised when a search pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid search pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InvalidCountError(ValueError):
    """Raised when a label length is requested for fewer than one candidate."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Number of matches must be at least 1, got {count}")
        self.count = count


# ---------------------------------------------------------------------------
# Positions and ranges
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based (line, column) location inside one view's text."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.column < 0:
            raise ValueError(
                f"Position must be non-negative, got ({self.line}, {self.column})"
            )


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open span ``[start, end)`` within a single view.

    Invariants (enforced in __post_init__):
        - start <= end
    """

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(
                f"Range end ({self.end.line}, {self.end.column}) precedes "
                f"start ({self.start.line}, {self.start.column})"
            )

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True, slots=True)
class Candidate:
    """A match paired with the label offered to select it."""

    label: str
    view: View
    range: Range


def count_matches(matches: Mapping[View, tuple[Range, ...]]) -> int:
    """Total number of matched ranges across all views."""
    return sum(len(ranges) for ranges in matches.values())


def first_match(matches: Mapping[View, tuple[Range, ...]]) -> tuple[View, Range] | None:
    """Return the first (view, range) pair in iteration order, if any."""
    for view, ranges in matches.items():
        if ranges:
            return view, ranges[0]
    return None


def empty_match_set(snapshot: VisibleSnapshot) -> MatchSet:
    """Map every view in ``snapshot`` to an empty match sequence."""
    return {view: () for view in snapshot}
