"""Tests for gotochar.disambiguation — label stage narrowing."""
from __future__ import annotations

import asyncio

import pytest

from gotochar.disambiguation import DisambiguationSession, LabelState
from gotochar.feedback import RecordingSink
from gotochar.input_stream import QueueInput
from gotochar.types import InvalidCountError, Position, Range


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def _rng(line: int, col: int) -> Range:
    return Range(Position(line, col), Position(line, col + 1))


def _matches(count: int, views: int = 1) -> dict[str, tuple[Range, ...]]:
    return {
        f"v{v}": tuple(_rng(i, v) for i in range(count))
        for v in range(views)
    }


# ── DisambiguationSession ─────────────────────────────────────────────


class TestDisambiguationSession:
    @pytest.mark.asyncio
    async def test_initial_render_shows_every_label(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(3, views=2), sink)
        task = asyncio.create_task(session.run())
        await _settle()
        assert sorted(sink.visible_labels()) == ["a", "b", "c", "d", "e", "f"]
        assert [c.view for c in session.candidates] == ["v0"] * 3 + ["v1"] * 3
        assert session.state is LabelState.AWAITING_LABEL
        widget.dismiss()
        assert await task is None

    @pytest.mark.asyncio
    async def test_single_keystroke_resolves_without_stream_end(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(2), sink)
        task = asyncio.create_task(session.run())
        widget.push("b")
        chosen = await asyncio.wait_for(task, timeout=1.0)
        assert chosen is not None
        assert chosen.label == "b"
        assert chosen.range == _rng(1, 0)
        assert session.state is LabelState.RESOLVED
        assert widget.closed
        assert widget.end_reason == "closed"
        assert sink.is_clear

    @pytest.mark.asyncio
    async def test_prefix_narrowing_shows_remaining_suffix(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(30), sink)
        task = asyncio.create_task(session.run())
        widget.push("a")
        await _settle()
        assert session.state is LabelState.NARROWING
        assert sorted(sink.visible_labels()) == ["a", "b"]
        widget.push("ab")
        chosen = await asyncio.wait_for(task, timeout=1.0)
        assert chosen is not None
        assert chosen.label == "ab"
        assert chosen.range == _rng(26, 0)
        assert sink.is_clear

    @pytest.mark.asyncio
    async def test_stream_end_with_several_left_is_unresolved(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(30), sink)
        task = asyncio.create_task(session.run())
        widget.push("a")
        widget.accept()
        assert await asyncio.wait_for(task, timeout=1.0) is None
        assert session.state is LabelState.EXHAUSTED
        assert len(session.survivors) == 2
        assert sink.is_clear

    @pytest.mark.asyncio
    async def test_no_survivors_then_exhausted(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(3), sink)
        task = asyncio.create_task(session.run())
        widget.push("q")
        await _settle()
        assert sink.visible_labels() == []
        widget.dismiss()
        assert await task is None
        assert session.state is LabelState.EXHAUSTED
        assert session.survivors == []

    @pytest.mark.asyncio
    async def test_backspace_restores_candidates(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(3), sink)
        task = asyncio.create_task(session.run())
        widget.push("q")
        await _settle()
        widget.backspace()
        await _settle()
        assert sorted(sink.visible_labels()) == ["a", "b", "c"]
        widget.push("c")
        chosen = await asyncio.wait_for(task, timeout=1.0)
        assert chosen is not None and chosen.range == _rng(2, 0)

    @pytest.mark.asyncio
    async def test_custom_alphabet(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(3), sink, alphabet="jk")
        task = asyncio.create_task(session.run())
        await _settle()
        assert sorted(sink.visible_labels()) == ["jj", "jk", "kj"]
        widget.type_text("kj")
        chosen = await asyncio.wait_for(task, timeout=1.0)
        assert chosen is not None and chosen.range == _rng(1, 0)

    @pytest.mark.asyncio
    async def test_cancellation_clears_labels(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(4), sink)
        task = asyncio.create_task(session.run())
        await _settle()
        assert len(sink.labels) == 4
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.state is LabelState.ABORTED
        assert sink.is_clear
        assert widget.closed

    @pytest.mark.asyncio
    async def test_idle_timeout_abandons_ambiguous_input(self) -> None:
        widget = QueueInput("label")
        sink = RecordingSink()
        session = DisambiguationSession(widget, _matches(3), sink, idle_timeout_s=0.03)
        result = await asyncio.wait_for(session.run(), timeout=1.0)
        assert result is None
        assert session.state is LabelState.EXHAUSTED
        assert widget.end_reason == "closed"
        assert sink.is_clear

    @pytest.mark.asyncio
    async def test_empty_matches_fail_loudly(self) -> None:
        widget = QueueInput("label")
        session = DisambiguationSession(widget, {"v": ()}, RecordingSink())
        with pytest.raises(InvalidCountError):
            await session.run()
        assert widget.closed
