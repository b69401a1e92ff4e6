"""Navigation orchestration: search, then jump directly or via labels.

One navigation at a time. ``trigger()`` cancels an in-flight navigation and
waits for its sessions to finish their cleanup before the new one captures
its snapshot, so a superseded session can never touch decorations again.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gotochar.config import JumpConfig, load_config
from gotochar.disambiguation import DisambiguationSession
from gotochar.feedback import FeedbackSink, view_name
from gotochar.input_stream import InputProvider
from gotochar.match_finder import MatchFinder, capture_snapshot
from gotochar.search_session import SearchSession
from gotochar.types import Position, View, count_matches, first_match
from gotochar.workspace import CursorMover, TextSource

log = logging.getLogger(__name__)


class Outcome(Enum):
    NO_MATCH = "no_match"
    DIRECT = "direct"
    LABEL = "label"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True, slots=True)
class NavigationResult:
    outcome: Outcome
    match_count: int = 0
    pattern: str = ""
    labels: tuple[str, ...] = ()
    view: View | None = None
    position: Position | None = None

    @property
    def jumped(self) -> bool:
        return self.position is not None

    def to_dict(self) -> dict[str, Any]:
        target = None
        if self.view is not None and self.position is not None:
            target = {
                "view": view_name(self.view),
                "line": self.position.line,
                "column": self.position.column,
            }
        return {
            "outcome": self.outcome.value,
            "match_count": self.match_count,
            "pattern": self.pattern,
            "labels": list(self.labels),
            "target": target,
        }


class NavigationController:
    def __init__(
        self,
        source: TextSource,
        sink: FeedbackSink,
        inputs: InputProvider,
        cursor: CursorMover,
        config_provider: Callable[[], JumpConfig] = load_config,
        *,
        max_workers: int = 1,
    ) -> None:
        self._source = source
        self._sink = sink
        self._inputs = inputs
        self._cursor = cursor
        self._config_provider = config_provider
        self._finder = MatchFinder(source, max_workers=max_workers)
        self._tasks: list[asyncio.Task[NavigationResult]] = []

    @property
    def active(self) -> asyncio.Task[NavigationResult] | None:
        self._tasks = [task for task in self._tasks if not task.done()]
        return self._tasks[-1] if self._tasks else None

    def trigger(self) -> asyncio.Task[NavigationResult]:
        """Start a navigation, superseding any still in flight."""
        previous = [task for task in self._tasks if not task.done()]
        if previous:
            log.info("superseding in-flight navigation")
            for task in previous:
                task.cancel()
        task = asyncio.get_running_loop().create_task(self._run_after(previous))
        self._tasks = [*previous, task]
        return task

    async def cancel(self) -> None:
        """Cancel in-flight navigations and wait for their cleanup."""
        previous = [task for task in self._tasks if not task.done()]
        if not previous:
            return
        for task in previous:
            task.cancel()
        await asyncio.wait(previous)

    async def _run_after(
        self, previous: list[asyncio.Task[NavigationResult]],
    ) -> NavigationResult:
        if previous:
            await asyncio.wait(previous)
        return await self.navigate()

    async def navigate(self) -> NavigationResult:
        """Run one complete navigation and return what happened."""
        config = self._config_provider()
        snapshot = capture_snapshot(self._source)

        search = SearchSession(
            self._inputs.open(config.search_prompt),
            snapshot,
            self._finder,
            self._sink,
            config.timeout_s,
        )
        matches = await search.run()
        total = count_matches(matches)

        if total == 0:
            log.info("no matches for %r", search.pattern)
            return NavigationResult(Outcome.NO_MATCH, pattern=search.pattern)

        if total == 1:
            found = first_match(matches)
            assert found is not None
            view, rng = found
            self._jump(view, rng.start, config)
            return NavigationResult(
                Outcome.DIRECT, 1, search.pattern, view=view, position=rng.start,
            )

        labels = DisambiguationSession(
            self._inputs.open(config.label_prompt),
            matches,
            self._sink,
            alphabet=config.charset,
            idle_timeout_s=config.label_timeout_s,
        )
        chosen = await labels.run()
        assigned = tuple(candidate.label for candidate in labels.candidates)
        if chosen is None:
            log.info("label input ended unresolved (%d candidates)", len(labels.survivors))
            return NavigationResult(Outcome.UNRESOLVED, total, search.pattern, assigned)

        self._jump(chosen.view, chosen.range.start, config)
        return NavigationResult(
            Outcome.LABEL, total, search.pattern, assigned,
            view=chosen.view, position=chosen.range.start,
        )

    def _jump(self, view: View, position: Position, config: JumpConfig) -> None:
        log.info("jumping to %s:%d:%d", view_name(view), position.line, position.column)
        self._cursor.move_cursor(view, position, extend_selection=config.extend_selection)
