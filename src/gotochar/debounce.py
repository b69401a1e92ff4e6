"""Restartable one-shot countdown on the asyncio event loop."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

log = logging.getLogger(__name__)


class DebounceTimer:
    """Fires ``on_elapsed`` once, ``timeout_s`` after the latest ``start()``.

    ``start()`` while running cancels the pending fire and reschedules from
    zero. ``stop()`` cancels it; stopping an idle timer is a no-op. Must be
    used from within a running event loop.
    """

    def __init__(self, timeout_s: float, on_elapsed: Callable[[], None]) -> None:
        if timeout_s < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout_s}")
        self.timeout_s = timeout_s
        self._on_elapsed = on_elapsed
        self._handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.stop()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_s, self._fire)
        log.debug("debounce started (%.3fs)", self.timeout_s)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            log.debug("debounce stopped")

    def _fire(self) -> None:
        self._handle = None
        log.debug("debounce elapsed")
        self._on_elapsed()
