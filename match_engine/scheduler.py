"""Delayed-callback schedulers used to settle card resolutions."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled before it fires."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """Runs a callback after a delay."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule ``callback`` to run after ``delay`` seconds."""
        ...


class _AsyncioTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTimerHandle(loop.call_later(delay, callback))


@dataclass(eq=False)
class ManualTimer(TimerHandle):
    """Timer owned by a ManualScheduler."""

    due: float
    callback: Callable[[], None]
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ManualScheduler(Scheduler):
    """Scheduler driven by explicit clock advances.

    Used by tests and the terminal client, where the caller decides when
    time passes.
    """

    now: float = 0.0
    timers: list[ManualTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = ManualTimer(due=self.now + delay, callback=callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        """Timers that have neither fired nor been cancelled."""
        return [t for t in self.timers if not t.cancelled]

    @property
    def next_delay(self) -> float | None:
        """Seconds until the next live timer is due."""
        pending = self.pending
        if not pending:
            return None
        return max(0.0, min(t.due for t in pending) - self.now)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every timer that came due.

        Returns:
            Number of callbacks fired.
        """
        self.now += seconds
        fired = 0
        while True:
            due = sorted(
                (t for t in self.pending if t.due <= self.now), key=lambda t: t.due
            )
            if not due:
                return fired
            timer = due[0]
            self.timers.remove(timer)
            timer.callback()
            fired += 1

    def run_all(self) -> int:
        """Fire every live timer, including ones scheduled while firing."""
        fired = 0
        while (delay := self.next_delay) is not None:
            fired += self.advance(delay)
        return fired
