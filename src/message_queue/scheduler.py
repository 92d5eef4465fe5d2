"""
Event Scheduler

Discrete-event scheduler driven by a virtual clock. Timers fire only when
the clock is advanced, which keeps every simulation run deterministic and
lets tests step time explicitly.
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Optional
from loguru import logger


class SchedulerClosedError(RuntimeError):
    """Raised when a timer is requested after the scheduler was stopped."""


@dataclass(order=True)
class ScheduledEvent:
    """
    Handle for a pending timer.

    Ordered by due time, then by scheduling sequence so events due at the
    same instant fire in the order they were scheduled.
    """
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    interval: Optional[float] = field(default=None, compare=False)
    name: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        """Prevent the event from firing. Safe to call more than once."""
        self.cancelled = True


class EventScheduler:
    """
    Virtual clock with one-shot and recurring timers.

    Usage:
        scheduler = EventScheduler()
        scheduler.call_every(1.0, tick)
        scheduler.call_later(2.0, resolve)
        scheduler.advance(3.0)  # fires tick at 1, 2, 3 and resolve at 2
    """

    def __init__(self, start_time: float = 0.0):
        self._now = start_time
        self._events: list[ScheduledEvent] = []
        self._sequence = itertools.count()
        self._closed = False

    @property
    def now(self) -> float:
        """Current virtual time."""
        return self._now

    @property
    def closed(self) -> bool:
        return self._closed

    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> ScheduledEvent:
        """
        Schedule a one-shot callback.

        Args:
            delay: Time units from now, >= 0
            callback: Function to call when the event fires
            name: Label used in debug logs

        Returns:
            Handle that can cancel the event

        Raises:
            SchedulerClosedError: If the scheduler was stopped
            ValueError: If delay is negative
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        return self._push(self._now + delay, callback, None, name)

    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> ScheduledEvent:
        """
        Schedule a recurring callback, first firing one interval from now.

        Args:
            interval: Time units between firings, > 0
            callback: Function to call on every firing
            name: Label used in debug logs

        Returns:
            Handle that cancels all future firings
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        return self._push(self._now + interval, callback, interval, name)

    def _push(
        self,
        due: float,
        callback: Callable[[], None],
        interval: Optional[float],
        name: str,
    ) -> ScheduledEvent:
        if self._closed:
            raise SchedulerClosedError(f"Cannot schedule '{name}': scheduler is stopped")
        event = ScheduledEvent(
            due=due,
            seq=next(self._sequence),
            callback=callback,
            interval=interval,
            name=name,
        )
        heapq.heappush(self._events, event)
        return event

    def advance(self, duration: float) -> int:
        """
        Move the clock forward, firing every event due on the way.

        Recurring events are rescheduled before their callback runs, so a
        callback may cancel its own timer.

        Args:
            duration: Time units to advance, >= 0

        Returns:
            Number of callbacks fired
        """
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")

        target = self._now + duration
        fired = 0

        while self._events and self._events[0].due <= target:
            event = heapq.heappop(self._events)
            if event.cancelled:
                continue

            self._now = event.due

            if event.interval is not None:
                event.due += event.interval
                event.seq = next(self._sequence)
                heapq.heappush(self._events, event)

            event.callback()
            fired += 1

        self._now = target
        return fired

    def pending(self) -> int:
        """Number of events that will still fire."""
        return sum(1 for event in self._events if not event.cancelled)

    def stop(self) -> None:
        """
        Cancel every pending event and refuse new ones.

        After stop the clock can still be advanced, but nothing fires.
        """
        for event in self._events:
            event.cancel()
        cancelled = len(self._events)
        self._events.clear()
        self._closed = True
        logger.debug(f"Scheduler stopped at t={self._now}, cancelled {cancelled} events")

    def reopen(self) -> None:
        """Accept new timers again after stop()."""
        self._closed = False
