"""Gravity clock built on a pluggable recurring-callback scheduler.

The game never sleeps or polls on its own.  It asks a :class:`Scheduler` to
call it back every ``period_ms`` milliseconds and keeps the handle so the
registration can be cancelled or replaced when the level changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional, Protocol, Tuple


LOGGER = logging.getLogger(__name__)

Callback = Callable[[], object]


class Scheduler(Protocol):
    """Host capability for recurring callbacks."""

    def register(self, period_ms: int, callback: Callback) -> Hashable:
        ...

    def cancel(self, handle: Hashable) -> None:
        ...


class GameClock:
    """Own at most one recurring registration on ``scheduler``."""

    def __init__(self, scheduler: Scheduler, callback: Callback) -> None:
        self._scheduler = scheduler
        self._callback = callback
        self._handle: Optional[Hashable] = None
        self._period_ms: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def period_ms(self) -> Optional[int]:
        """Period of the live registration, or ``None`` when stopped."""

        return self._period_ms

    def start(self, period_ms: int) -> None:
        """Begin firing every ``period_ms``, replacing any earlier registration."""

        self.stop()
        self._handle = self._scheduler.register(period_ms, self._callback)
        self._period_ms = period_ms
        LOGGER.debug("Clock started at %d ms (handle %r)", period_ms, self._handle)

    def reschedule(self, period_ms: int) -> None:
        """Switch to a new period.

        The old registration is cancelled before the new one is made so there
        is never more than one pending tick.
        """

        self.start(period_ms)

    def stop(self) -> None:
        """Cancel the registration, if any."""

        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        self._period_ms = None
        self._scheduler.cancel(handle)
        LOGGER.debug("Clock stopped (handle %r)", handle)


@dataclass
class _Registration:
    period_ms: int
    callback: Callback
    due_ms: int


class ManualScheduler:
    """Scheduler driven by explicit calls to :meth:`advance`.

    Time is virtual: nothing fires until the host advances the clock, which
    makes it suitable for tests and for running the game headless.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._registrations: Dict[int, _Registration] = {}
        self._next_handle = 1

    @property
    def pending(self) -> Tuple[int, ...]:
        """Handles of all live registrations."""

        return tuple(self._registrations)

    def period_of(self, handle: int) -> int:
        return self._registrations[handle].period_ms

    def register(self, period_ms: int, callback: Callback) -> int:
        if period_ms <= 0:
            raise ValueError(f"Period must be positive, got {period_ms}")
        handle = self._next_handle
        self._next_handle += 1
        self._registrations[handle] = _Registration(
            period_ms=period_ms, callback=callback, due_ms=self.now_ms + period_ms
        )
        return handle

    def cancel(self, handle: int) -> None:
        self._registrations.pop(handle, None)

    def advance(self, ms: int) -> int:
        """Move virtual time forward by ``ms`` and fire everything that falls due.

        Callbacks run in due-time order and may register or cancel during the
        call.  Returns the number of callbacks fired.
        """

        target = self.now_ms + ms
        fired = 0
        while True:
            due = [
                (reg.due_ms, handle)
                for handle, reg in self._registrations.items()
                if reg.due_ms <= target
            ]
            if not due:
                break
            due_ms, handle = min(due)
            reg = self._registrations[handle]
            self.now_ms = due_ms
            reg.due_ms += reg.period_ms
            reg.callback()
            fired += 1
        self.now_ms = target
        return fired
