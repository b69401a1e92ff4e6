"""Headless navigation replay over plain text files.

Loads files into an in-memory ``Workspace`` with the given visible line
windows, types scripted keystrokes into each input the navigation opens
(search first, then label), and reports the outcome together with the full
decoration trace.

Window specs are 1-based inclusive line spans, comma separated:
``"1-40,61-80"``. An omitted spec shows the whole file.
"""
from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TypeAlias

from gotochar.config import JumpConfig
from gotochar.controller import NavigationController, NavigationResult
from gotochar.feedback import RecordingSink
from gotochar.input_stream import QueueInput, QueueInputProvider
from gotochar.workspace import EditorView, Workspace

log = logging.getLogger(__name__)

EndAction: TypeAlias = Literal["wait", "accept", "dismiss"]

_WINDOW_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+))?\s*$")
_VIEW_SPEC_RE = re.compile(r"^(?P<path>.+?):(?P<windows>\d+(?:-\d+)?(?:,\d+(?:-\d+)?)*)$")


@dataclass(frozen=True, slots=True)
class StageScript:
    """Keystrokes for one input, and how the input ends afterwards.

    ``wait`` leaves the input open so the debounce timer, a resolved label or
    the label idle timeout can end it; ``accept``/``dismiss`` end it.
    """

    text: str = ""
    end: EndAction = "wait"


def parse_windows(spec: str) -> list[tuple[int, int]]:
    """Parse ``"1-40,61-80"`` into zero-based inclusive line windows."""
    windows: list[tuple[int, int]] = []
    for part in spec.split(","):
        m = _WINDOW_RE.match(part)
        if not m:
            raise ValueError(f"Invalid line window {part!r} in {spec!r}")
        first = int(m.group(1))
        last = int(m.group(2)) if m.group(2) else first
        if first < 1 or last < first:
            raise ValueError(f"Invalid line window {part!r} in {spec!r}")
        windows.append((first - 1, last - 1))
    return windows


def parse_view_spec(spec: str) -> tuple[Path, list[tuple[int, int]] | None]:
    """Split ``path[:windows]`` into a path and optional windows."""
    m = _VIEW_SPEC_RE.match(spec)
    if m:
        return Path(m.group("path")), parse_windows(m.group("windows"))
    return Path(spec), None


def load_workspace(specs: Sequence[str]) -> Workspace:
    workspace = Workspace()
    for spec in specs:
        path, windows = parse_view_spec(spec)
        text = path.read_text(encoding="utf-8", errors="replace")
        workspace.add_view(EditorView.from_text(str(path), text, windows))
    return workspace


class ScriptedInputProvider(QueueInputProvider):
    """Types one ``StageScript`` into each input, in opening order.

    Inputs opened beyond the scripts are dismissed right away. With
    ``settle_s`` set, an input left open by a ``wait`` script is dismissed
    that long after the last keystroke.
    """

    def __init__(
        self,
        scripts: Sequence[StageScript],
        *,
        key_delay_s: float = 0.0,
        settle_s: float | None = None,
    ) -> None:
        super().__init__()
        self._scripts = list(scripts)
        self._key_delay_s = key_delay_s
        self._settle_s = settle_s
        self._feeders: list[asyncio.Task[None]] = []

    def open(self, prompt: str) -> QueueInput:
        widget = super().open(prompt)
        stage = len(self.opened) - 1
        if stage >= len(self._scripts):
            widget.dismiss()
            return widget
        feeder = asyncio.get_running_loop().create_task(
            self._feed(widget, self._scripts[stage])
        )
        self._feeders.append(feeder)
        return widget

    async def _feed(self, widget: QueueInput, script: StageScript) -> None:
        for char in script.text:
            if self._key_delay_s:
                await asyncio.sleep(self._key_delay_s)
            if widget.closed:
                return
            widget.push(widget.value + char)
        if script.end == "accept":
            widget.accept()
        elif script.end == "dismiss":
            widget.dismiss()
        elif self._settle_s is not None:
            await asyncio.sleep(self._settle_s)
            widget.dismiss()

    async def aclose(self) -> None:
        for feeder in self._feeders:
            feeder.cancel()
        if self._feeders:
            await asyncio.wait(self._feeders)
        self._feeders.clear()


@dataclass(slots=True)
class ReplayReport:
    result: NavigationResult
    workspace: Workspace
    trace: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload = self.result.to_dict()
        focused = self.workspace.focused
        if focused is not None:
            payload["cursor"] = {
                "view": focused.name,
                "anchor": [focused.anchor.line, focused.anchor.column],
                "active": [focused.active.line, focused.active.column],
            }
        payload["trace_events"] = len(self.trace)
        return payload


async def run_replay(
    workspace: Workspace,
    scripts: Sequence[StageScript],
    config: JumpConfig | None = None,
    *,
    key_delay_s: float = 0.0,
    max_workers: int = 1,
) -> ReplayReport:
    """Run one navigation over ``workspace`` driven by ``scripts``."""
    config = config or JumpConfig()
    sink = RecordingSink()
    settle_s = 2 * max(config.timeout_s, config.label_timeout_s or 0.0) + 0.5
    inputs = ScriptedInputProvider(scripts, key_delay_s=key_delay_s, settle_s=settle_s)
    controller = NavigationController(
        workspace, sink, inputs, workspace,
        config_provider=lambda: config,
        max_workers=max_workers,
    )
    try:
        result = await controller.trigger()
    finally:
        await inputs.aclose()
    log.info("replay finished: %s (%d matches)", result.outcome.value, result.match_count)
    return ReplayReport(result=result, workspace=workspace, trace=sink.to_records())
