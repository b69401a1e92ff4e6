"""Incremental match discovery over a frozen snapshot of visible text.

``MatchFinder.find`` is a pure function of (pattern, snapshot) plus the text
source it reads from: it never touches decorations or input. Each visible
range is scanned on its own slice of text, so occurrences straddling two
visible ranges (e.g. across a fold) are not reported.

Patterns are case-insensitive regular expressions; literal input is the
caller's business to escape.
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType

from gotochar.types import (
    MatchSet,
    PatternError,
    Range,
    View,
    VisibleSnapshot,
    empty_match_set,
)
from gotochar.workspace import TextSource

log = logging.getLogger(__name__)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a case-insensitive search pattern.

    Raises:
        PatternError: ``pattern`` is not a valid regular expression, or its
            repeat counts or nesting exceed what the regex engine accepts.
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except (re.error, OverflowError, RecursionError) as exc:
        raise PatternError(pattern, str(exc)) from exc


def capture_snapshot(source: TextSource) -> VisibleSnapshot:
    """Freeze the currently visible ranges of every view."""
    return MappingProxyType({
        view: tuple(ranges) for view, ranges in source.visible_ranges().items()
    })


class MatchFinder:
    """Finds all pattern occurrences inside the visible ranges of a snapshot.

    With ``max_workers > 1`` views are scanned on a thread pool; results are
    still merged in snapshot order, independent of completion order.

    ``find`` is synchronous and blocks its caller until every view is
    scanned. Sessions call it from the event loop, so the pool never frees
    the loop during a scan. ``re`` holds the GIL while matching, so on a
    GIL build the pool gives no speedup either; it only pays off on a
    free-threaded interpreter. Keep ``max_workers=1`` otherwise.
    """

    def __init__(self, source: TextSource, *, max_workers: int = 1) -> None:
        self._source = source
        self._max_workers = max(1, max_workers)

    def find(self, pattern: str, snapshot: VisibleSnapshot) -> MatchSet:
        if not pattern:
            return empty_match_set(snapshot)
        regex = compile_pattern(pattern)
        views = list(snapshot)
        if self._max_workers == 1 or len(views) < 2:
            found = [self._scan_view(regex, view, snapshot[view]) for view in views]
        else:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(views))) as pool:
                found = list(pool.map(
                    lambda view: self._scan_view(regex, view, snapshot[view]), views,
                ))
        return dict(zip(views, found, strict=True))

    def _scan_view(
        self, regex: re.Pattern[str], view: View, visible: tuple[Range, ...],
    ) -> tuple[Range, ...]:
        source = self._source
        ranges: list[Range] = []
        for visible_range in visible:
            text = source.get_text(view, visible_range)
            base = source.offset_at(view, visible_range.start)
            for match in regex.finditer(text):
                ranges.append(Range(
                    source.position_at(view, base + match.start()),
                    source.position_at(view, base + match.end()),
                ))
        return tuple(ranges)
