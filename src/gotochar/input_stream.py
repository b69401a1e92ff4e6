"""Live text input as an async stream of values with an end event.

A ``LiveInput`` yields the full current value of an input widget every time
it changes and stops iterating once the widget is accepted, dismissed or
closed by its consumer. Closing is how sessions tear the widget down (timer
commit, unique label resolved, cancellation).
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol, cast

log = logging.getLogger(__name__)

_END = object()


class LiveInput(Protocol):
    prompt: str

    def __aiter__(self) -> AsyncIterator[str]: ...

    def close(self) -> None: ...


class InputProvider(Protocol):
    def open(self, prompt: str) -> LiveInput: ...


class QueueInput:
    """Queue-backed input widget.

    ``push`` delivers a new value; ``accept``/``dismiss`` end the stream after
    the values already delivered; ``close`` ends it immediately and drops any
    value not yet consumed.
    """

    def __init__(self, prompt: str = "") -> None:
        self.prompt = prompt
        self.value = ""
        self.end_reason: str | None = None
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._drained = False

    @property
    def closed(self) -> bool:
        return self.end_reason is not None

    def push(self, value: str) -> None:
        if self.closed:
            log.debug("input %r closed, dropping value %r", self.prompt, value)
            return
        self.value = value
        self._queue.put_nowait(value)

    def type_text(self, text: str) -> None:
        """Type ``text`` one character at a time."""
        for char in text:
            self.push(self.value + char)

    def backspace(self) -> None:
        if self.value:
            self.push(self.value[:-1])

    def accept(self) -> None:
        self._end("accept")

    def dismiss(self) -> None:
        self._end("dismiss")

    def close(self) -> None:
        if self.closed:
            return
        while not self._queue.empty():
            self._queue.get_nowait()
        self._end("closed")

    def _end(self, reason: str) -> None:
        if self.closed:
            return
        self.end_reason = reason
        self._queue.put_nowait(_END)

    def __aiter__(self) -> QueueInput:
        return self

    async def __anext__(self) -> str:
        if self._drained:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            self._drained = True
            raise StopAsyncIteration
        return cast(str, item)


class QueueInputProvider:
    """Opens ``QueueInput`` widgets and remembers them in opening order."""

    def __init__(self) -> None:
        self.opened: list[QueueInput] = []

    @property
    def current(self) -> QueueInput | None:
        return self.opened[-1] if self.opened else None

    def open(self, prompt: str) -> QueueInput:
        widget = QueueInput(prompt)
        self.opened.append(widget)
        log.debug("opened input %r", prompt)
        return widget
