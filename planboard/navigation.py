# planboard/navigation.py
"""Press-and-hold timeline navigation.

Holding a prev/next control shifts the anchor date by one day immediately and
then once per tick (seven days per second) until released. Only one hold can
be active; starting another cancels the first.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

log = logging.getLogger(__name__)

STEP_INTERVAL = 1.0 / 7.0


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class Ticker(Protocol):
    def start(self, period: float, callback: Callable[[], None]) -> TickHandle:
        """Call `callback` every `period` seconds until the handle is cancelled."""


class _ManualHandle:
    def __init__(self, ticker: "ManualTicker", period: float, callback: Callable[[], None], due: float) -> None:
        self.ticker = ticker
        self.period = period
        self.callback = callback
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTicker:
    """Ticker driven by `advance()`; for hosts with their own clock and for tests."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: List[_ManualHandle] = []

    def start(self, period: float, callback: Callable[[], None]) -> _ManualHandle:
        h = _ManualHandle(self, float(period), callback, self.now + float(period))
        self._handles.append(h)
        return h

    @property
    def active(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in time order. Returns the tick count."""
        target = self.now + float(seconds)
        fired = 0
        while True:
            live = [h for h in self._handles if not h.cancelled and h.due <= target + 1e-9]
            if not live:
                break
            h = min(live, key=lambda x: x.due)
            self.now = h.due
            h.due += h.period
            h.callback()
            fired += 1
        self.now = target
        self._handles = [h for h in self._handles if not h.cancelled]
        return fired


class _AsyncioHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, period: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._period = period
        self._callback = callback
        self._timer: Optional[asyncio.TimerHandle] = loop.call_later(period, self._fire)

    def _fire(self) -> None:
        if self._timer is None:
            return
        self._timer = self._loop.call_later(self._period, self._fire)
        self._callback()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioTicker:
    """Ticks on an asyncio loop: the given one, else the loop running at `start()`.

    Without a loop, `start()` hands the hold to `fallback` when one is set and
    raises `RuntimeError` otherwise.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, *, fallback: Optional[Ticker] = None) -> None:
        self._loop = loop
        self.fallback = fallback

    def start(self, period: float, callback: Callable[[], None]) -> TickHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                if self.fallback is None:
                    raise
                log.debug("no running event loop; hold ticks go to %s", type(self.fallback).__name__)
                return self.fallback.start(period, callback)
        return _AsyncioHandle(loop, float(period), callback)


class HoldNavigator:
    def __init__(self, step: Callable[[int], None], ticker: Ticker, *, period: float = STEP_INTERVAL) -> None:
        self._step = step
        self._ticker = ticker
        self._period = period
        self._handle: Optional[TickHandle] = None
        self.direction = 0

    @property
    def holding(self) -> bool:
        return self._handle is not None

    def step(self, direction: int) -> None:
        """One-day move without starting a hold (keyboard arrows, plain clicks)."""
        if direction:
            self._step(1 if direction > 0 else -1)

    def start(self, direction: int) -> None:
        self.stop()
        if not direction:
            return
        # Timer first: a ticker that cannot start leaves the anchor untouched.
        handle = self._ticker.start(self._period, self._tick)
        self.direction = 1 if direction > 0 else -1
        self._handle = handle
        self._step(self.direction)
        log.debug("hold navigation started (direction=%d)", self.direction)

    def _tick(self) -> None:
        if self.direction:
            self._step(self.direction)

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self.direction = 0
        log.debug("hold navigation stopped")


__all__ = [
    "AsyncioTicker",
    "HoldNavigator",
    "ManualTicker",
    "STEP_INTERVAL",
    "TickHandle",
    "Ticker",
]
