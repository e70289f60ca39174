"""Periodic triggers for view refreshes."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Timer(Protocol):
    """Schedules a callback at a fixed period until the handle is cancelled."""

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class _LoopTimerHandle:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._start = loop.time()
        self._ticks = 0
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False
        self._schedule()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _schedule(self) -> None:
        # Fixed-rate: tick n fires at start + n * interval.  Ticks missed
        # because the loop was busy are skipped, not replayed.
        elapsed = self._loop.time() - self._start
        self._ticks = max(self._ticks + 1, math.floor(elapsed / self._interval) + 1)
        when = self._start + self._ticks * self._interval
        self._handle = self._loop.call_at(when, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._schedule()
        try:
            self._callback()
        except Exception:
            _logger.warning("Periodic callback %r failed", self._callback, exc_info=True)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class LoopTimer:
    """:class:`Timer` backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        loop = self._loop or asyncio.get_running_loop()
        return _LoopTimerHandle(loop, interval, callback)
