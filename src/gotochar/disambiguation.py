"""Stage 2: label assignment and prefix narrowing.

Each match gets a unique fixed-length label. As the label input changes,
overlays are re-rendered for the candidates whose label starts with the
typed text, showing only the part still to type. The moment exactly one
candidate survives the session resolves, without waiting for the input to
end. If the input ends first, the session is exhausted and never picks
among several survivors.

State machine::

    AWAITING_LABEL -> NARROWING -> RESOLVED | EXHAUSTED | ABORTED
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum

from gotochar.config import DEFAULT_CHARSET
from gotochar.debounce import DebounceTimer
from gotochar.feedback import FeedbackSink
from gotochar.input_stream import LiveInput
from gotochar.labels import assign_labels, narrow_candidates
from gotochar.types import Candidate, InvalidCountError, MatchSet, count_matches

log = logging.getLogger(__name__)


class LabelState(Enum):
    AWAITING_LABEL = "awaiting_label"
    NARROWING = "narrowing"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


class DisambiguationSession:
    """Narrows labelled candidates to a single one from live label input.

    ``idle_timeout_s`` closes the label input after that long without a
    keystroke; ``None`` waits until the input ends.
    """

    def __init__(
        self,
        input_stream: LiveInput,
        matches: MatchSet,
        sink: FeedbackSink,
        *,
        alphabet: str = DEFAULT_CHARSET,
        idle_timeout_s: float | None = None,
    ) -> None:
        self.state = LabelState.AWAITING_LABEL
        self.candidates: list[Candidate] = []
        self.survivors: list[tuple[Candidate, str]] = []
        self.typed = ""
        self.result: Candidate | None = None
        self._input = input_stream
        self._matches = matches
        self._sink = sink
        self._alphabet = alphabet
        self._handles: list[int] = []
        self._timer: DebounceTimer | None = None
        if idle_timeout_s is not None:
            self._timer = DebounceTimer(idle_timeout_s, self._input.close)

    async def run(self) -> Candidate | None:
        try:
            self.candidates = assign_labels(self._matches, self._alphabet)
        except InvalidCountError:
            log.error(
                "label stage entered with %d matches", count_matches(self._matches),
            )
            self._input.close()
            raise

        try:
            if not self._narrow(""):
                async for value in self._input:
                    self.state = LabelState.NARROWING
                    if self._narrow(value):
                        break
            if self.result is None:
                self.state = LabelState.EXHAUSTED
                log.debug(
                    "label input ended with %d candidates left for %r",
                    len(self.survivors), self.typed,
                )
        except asyncio.CancelledError:
            self.state = LabelState.ABORTED
            raise
        finally:
            if self._timer is not None:
                self._timer.stop()
            self._clear_labels()
            self._input.close()
        return self.result

    def _narrow(self, typed: str) -> bool:
        """Re-render overlays for ``typed``; True once a single candidate is left."""
        if self._timer is not None:
            self._timer.stop()
        self._clear_labels()
        self.typed = typed
        self.survivors = narrow_candidates(self.candidates, typed)
        log.debug("label %r: %d candidates", typed, len(self.survivors))
        if len(self.survivors) == 1:
            self.result = self.survivors[0][0]
            self.state = LabelState.RESOLVED
            return True
        for candidate, remaining in self.survivors:
            self._handles.append(
                self._sink.show_label(candidate.view, candidate.range, remaining)
            )
        if self._timer is not None:
            self._timer.start()
        return False

    def _clear_labels(self) -> None:
        for handle in self._handles:
            self._sink.hide_label(handle)
        self._handles.clear()
