"""Stage 1: incremental search with debounce-driven commitment.

Every input value re-runs the match finder over the frozen snapshot and
replaces the search highlights. A non-empty result arms the debounce timer;
when it elapses the input is closed and the current matches are final.
Accepting or dismissing the input commits as well. An empty result leaves
the timer stopped, so the session keeps waiting for more input.

State machine::

    IDLE -> SEARCHING -> FINALIZING -> DONE
                 \\-> CANCELLED (task cancelled)
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum

from gotochar.debounce import DebounceTimer
from gotochar.feedback import FeedbackSink
from gotochar.input_stream import LiveInput
from gotochar.match_finder import MatchFinder
from gotochar.types import (
    MatchSet,
    PatternError,
    View,
    VisibleSnapshot,
    count_matches,
    empty_match_set,
)

log = logging.getLogger(__name__)


class SearchState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    FINALIZING = "finalizing"
    DONE = "done"
    CANCELLED = "cancelled"


class SearchSession:
    def __init__(
        self,
        input_stream: LiveInput,
        snapshot: VisibleSnapshot,
        finder: MatchFinder,
        sink: FeedbackSink,
        timeout_s: float,
    ) -> None:
        self.state = SearchState.IDLE
        self.pattern = ""
        self.matches: MatchSet = empty_match_set(snapshot)
        self.end_reason: str | None = None
        self._input = input_stream
        self._snapshot = snapshot
        self._finder = finder
        self._sink = sink
        self._timer = DebounceTimer(timeout_s, self._on_elapsed)
        self._highlighted: set[View] = set()

    async def run(self) -> MatchSet:
        """Consume input until commit; return the final (possibly empty) matches."""
        if self.state is not SearchState.IDLE:
            raise RuntimeError(f"SearchSession already ran (state={self.state.value})")
        self.state = SearchState.SEARCHING
        try:
            self._apply("")
            async for value in self._input:
                self._apply(value)
            if self.end_reason is None:
                self.end_reason = "input_end"
            self.state = SearchState.FINALIZING
        except asyncio.CancelledError:
            self.state = SearchState.CANCELLED
            raise
        finally:
            self._timer.stop()
            self._clear_highlights()
            self._input.close()
        self.state = SearchState.DONE
        log.debug(
            "search committed by %s: pattern=%r matches=%d",
            self.end_reason, self.pattern, count_matches(self.matches),
        )
        return self.matches

    def _apply(self, value: str) -> None:
        self._timer.stop()
        self.pattern = value
        try:
            matches = self._finder.find(value, self._snapshot)
        except PatternError as exc:
            log.warning("%s", exc)
            matches = empty_match_set(self._snapshot)
        self.matches = matches

        for view, ranges in matches.items():
            if ranges:
                self._sink.set_highlights(view, ranges)
                self._highlighted.add(view)
            elif view in self._highlighted:
                self._sink.set_highlights(view, ())
                self._highlighted.discard(view)

        total = count_matches(matches)
        log.debug("pattern %r: %d matches", value, total)
        if total:
            self._timer.start()

    def _on_elapsed(self) -> None:
        self.end_reason = "timeout"
        self._input.close()

    def _clear_highlights(self) -> None:
        for view in self._highlighted:
            self._sink.set_highlights(view, ())
        self._highlighted.clear()
