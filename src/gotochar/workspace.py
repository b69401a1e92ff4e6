"""Text source and cursor host contracts, plus an in-memory implementation.

The navigation engine talks to its host through two narrow protocols:

* ``TextSource``: enumerates visible ranges per view and converts between
  character offsets and (line, column) positions.
* ``CursorMover``: places the caret on a target position and reveals it.

``Workspace`` implements both over plain strings. It backs the headless
replay tool and the test suite, and doubles as a reference for hosts.
"""
from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from gotochar.types import Position, Range, View

log = logging.getLogger(__name__)


class TextSource(Protocol):
    def visible_ranges(self) -> dict[View, tuple[Range, ...]]: ...

    def get_text(self, view: View, rng: Range) -> str: ...

    def offset_at(self, view: View, position: Position) -> int: ...

    def position_at(self, view: View, offset: int) -> Position: ...


class CursorMover(Protocol):
    def move_cursor(
        self, view: View, position: Position, *, extend_selection: bool = False,
    ) -> None: ...


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextDocument:
    """Immutable text with a precomputed line-start table.

    Lines are separated by ``\\n``; a trailing newline yields a final empty
    line, matching how editors number lines.
    """

    text: str
    line_starts: tuple[int, ...]

    @classmethod
    def from_text(cls, text: str) -> TextDocument:
        starts = [0]
        pos = text.find("\n")
        while pos >= 0:
            starts.append(pos + 1)
            pos = text.find("\n", pos + 1)
        return cls(text=text, line_starts=tuple(starts))

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def line_length(self, line: int) -> int:
        start = self.line_starts[line]
        if line + 1 < len(self.line_starts):
            return self.line_starts[line + 1] - 1 - start
        return len(self.text) - start

    def position_at(self, offset: int) -> Position:
        """Convert an offset to a position, clamping into the document."""
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self.line_starts, offset) - 1
        return Position(line, offset - self.line_starts[line])

    def offset_at(self, position: Position) -> int:
        """Convert a position to an offset, clamping line and column."""
        line = min(position.line, self.line_count - 1)
        column = min(position.column, self.line_length(line))
        return self.line_starts[line] + column

    def get_text(self, rng: Range) -> str:
        return self.text[self.offset_at(rng.start):self.offset_at(rng.end)]


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass(eq=False, slots=True)
class EditorView:
    """One open text surface with its scroll windows and selection.

    ``windows`` holds inclusive ``(first_line, last_line)`` pairs; more than
    one window models folded regions. Views hash by identity.
    """

    name: str
    document: TextDocument
    windows: list[tuple[int, int]] = field(default_factory=list)
    anchor: Position = field(default_factory=lambda: Position(0, 0))
    active: Position = field(default_factory=lambda: Position(0, 0))
    revealed: Position | None = None

    @classmethod
    def from_text(
        cls,
        name: str,
        text: str,
        windows: Sequence[tuple[int, int]] | None = None,
    ) -> EditorView:
        document = TextDocument.from_text(text)
        if windows is None:
            windows = [(0, document.line_count - 1)]
        return cls(name=name, document=document, windows=list(windows))

    def visible_ranges(self) -> tuple[Range, ...]:
        last_line = self.document.line_count - 1
        ranges: list[Range] = []
        for first, last in self.windows:
            first = max(0, min(first, last_line))
            last = max(first, min(last, last_line))
            ranges.append(Range(
                Position(first, 0),
                Position(last, self.document.line_length(last)),
            ))
        return tuple(ranges)

    def scroll(self, first_line: int, last_line: int) -> None:
        self.windows = [(first_line, last_line)]

    def __repr__(self) -> str:
        return f"EditorView({self.name!r})"


class Workspace:
    """In-memory host: a set of visible editor views and a focused one."""

    def __init__(self, views: Sequence[EditorView] = ()) -> None:
        self.views: list[EditorView] = list(views)
        self.focused: EditorView | None = self.views[0] if self.views else None

    def add_view(self, view: EditorView) -> EditorView:
        self.views.append(view)
        if self.focused is None:
            self.focused = view
        return view

    def view_named(self, name: str) -> EditorView:
        for view in self.views:
            if view.name == name:
                return view
        raise KeyError(f"No view named {name!r}")

    # -- TextSource ---------------------------------------------------------

    def visible_ranges(self) -> dict[View, tuple[Range, ...]]:
        return {view: view.visible_ranges() for view in self.views}

    def get_text(self, view: View, rng: Range) -> str:
        return self._editor(view).document.get_text(rng)

    def offset_at(self, view: View, position: Position) -> int:
        return self._editor(view).document.offset_at(position)

    def position_at(self, view: View, offset: int) -> Position:
        return self._editor(view).document.position_at(offset)

    # -- CursorMover --------------------------------------------------------

    def move_cursor(
        self, view: View, position: Position, *, extend_selection: bool = False,
    ) -> None:
        editor = self._editor(view)
        self.focused = editor
        if not extend_selection:
            editor.anchor = position
        editor.active = position
        editor.revealed = position
        log.debug("cursor moved to %s:%d:%d", editor.name, position.line, position.column)

    def _editor(self, view: View) -> EditorView:
        if not isinstance(view, EditorView) or view not in self.views:
            raise KeyError(f"Unknown view: {view!r}")
        return view
