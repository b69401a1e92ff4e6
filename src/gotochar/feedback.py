"""Visual feedback sink: search highlights and inline jump labels.

The engine only ever pushes decorations; it never reads them back. Sessions
own the decorations they apply and release them on every exit path.

``RecordingSink`` keeps the live decoration state plus an ordered event log,
which the replay tool exports as JSONL and the tests assert against.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from gotochar.types import Range, View


class FeedbackSink(Protocol):
    def set_highlights(self, view: View, ranges: Sequence[Range]) -> None:
        """Replace the search highlights shown in ``view`` (empty clears)."""
        ...

    def show_label(self, view: View, rng: Range, text: str) -> int:
        """Render a label overlay at ``rng`` and return its handle."""
        ...

    def hide_label(self, handle: int) -> None: ...


@dataclass(frozen=True, slots=True)
class LabelOverlay:
    view: View
    range: Range
    text: str


def view_name(view: View) -> str:
    return str(getattr(view, "name", view))


def _range_record(rng: Range) -> list[int]:
    return [rng.start.line, rng.start.column, rng.end.line, rng.end.column]


class RecordingSink:
    """In-memory sink tracking visible decorations and their history."""

    def __init__(self) -> None:
        self.highlights: dict[View, tuple[Range, ...]] = {}
        self.labels: dict[int, LabelOverlay] = {}
        self.events: list[dict[str, Any]] = []
        self._next_handle = 1

    def set_highlights(self, view: View, ranges: Sequence[Range]) -> None:
        if ranges:
            self.highlights[view] = tuple(ranges)
        else:
            self.highlights.pop(view, None)
        self._record("highlight", view, ranges=[_range_record(r) for r in ranges])

    def show_label(self, view: View, rng: Range, text: str) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.labels[handle] = LabelOverlay(view, rng, text)
        self._record("label", view, handle=handle, range=_range_record(rng), text=text)
        return handle

    def hide_label(self, handle: int) -> None:
        overlay = self.labels.pop(handle, None)
        if overlay is not None:
            self._record("unlabel", overlay.view, handle=handle)

    # -- Inspection ---------------------------------------------------------

    @property
    def is_clear(self) -> bool:
        return not self.highlights and not self.labels

    def visible_labels(self) -> list[str]:
        return [overlay.text for overlay in self.labels.values()]

    def to_records(self) -> list[dict[str, Any]]:
        return [dict(event) for event in self.events]

    def _record(self, kind: str, view: View, **payload: Any) -> None:
        self.events.append({
            "seq": len(self.events),
            "kind": kind,
            "view": view_name(view),
            **payload,
        })
