"""TimerHost: Strategy pattern for the periodic timers driving playback."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A live periodic timer that can be cancelled."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """False once the timer has been cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the timer. Cancelling twice is harmless."""


class TimerHost(ABC):
    """
    Abstract source of periodic callbacks.

    Implementations run every callback on a single thread, so the clock needs
    no locking: at most one callback executes at a time.
    """

    @abstractmethod
    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Invoke *callback* every *period_ms* milliseconds, first after one period.

        Returns:
            A handle used to cancel the timer.
        """


# ── Deterministic host ───────────────────────────────────────────────────────

class _ManualTimer(TimerHandle):
    def __init__(
        self,
        host: ManualTimerHost,
        period_ms: float,
        callback: Callable[[], None],
        due_ms: float,
    ) -> None:
        self._host = host
        self.period_ms = period_ms
        self.callback = callback
        self.due_ms = due_ms
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._host._timers.remove(self)


class ManualTimerHost(TimerHost):
    """
    Virtual-time host: nothing fires until :meth:`advance` or :meth:`step`.

    Used by tests and by offline tooling that wants to walk a chart at full
    speed without sleeping.
    """

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._timers: list[_ManualTimer] = []

    @property
    def active_count(self) -> int:
        return len(self._timers)

    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}.")
        timer = _ManualTimer(self, period_ms, callback, self.now_ms + period_ms)
        self._timers.append(timer)
        return timer

    def step(self) -> bool:
        """
        Jump to the next due timer and fire it once.

        Returns:
            False when no timer is live.
        """
        if not self._timers:
            return False
        timer = min(self._timers, key=lambda t: t.due_ms)
        self.now_ms = timer.due_ms
        timer.due_ms += timer.period_ms
        timer.callback()
        return True

    def advance(self, ms: float) -> None:
        """Move virtual time forward by *ms*, firing every timer that falls due."""
        target = self.now_ms + ms
        while self._timers:
            timer = min(self._timers, key=lambda t: t.due_ms)
            if timer.due_ms > target:
                break
            self.now_ms = timer.due_ms
            timer.due_ms += timer.period_ms
            timer.callback()
        self.now_ms = target


# ── asyncio host ─────────────────────────────────────────────────────────────

class _AsyncioTimer(TimerHandle):
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        period_ms: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._period = period_ms / 1000.0
        self._callback = callback
        self._next_due = loop.time() + self._period
        self._handle: asyncio.TimerHandle | None = loop.call_at(self._next_due, self._fire)

    @property
    def active(self) -> bool:
        return self._handle is not None

    def _fire(self) -> None:
        if self._handle is None:
            return
        # Schedule from the ideal due time so beats do not drift, but never in
        # the past: a stalled loop skips missed beats instead of bursting.
        self._next_due = max(self._next_due + self._period, self._loop.time())
        self._handle = self._loop.call_at(self._next_due, self._fire)
        self._callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioTimerHost(TimerHost):
    """Real-time host backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}.")
        return _AsyncioTimer(self.loop, period_ms, callback)
