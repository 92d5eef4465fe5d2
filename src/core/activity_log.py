"""
Activity Log

Bounded most-recent window of human-readable pipeline events. Entries are
mirrored to loguru; nothing in the pipeline reads them back.
"""
from collections import deque
from typing import Callable
from loguru import logger

from src.models.snapshot import LogEntry, LogKind

_LOGURU_LEVELS = {
    LogKind.INFO: "INFO",
    LogKind.SUCCESS: "SUCCESS",
    LogKind.WARNING: "WARNING",
    LogKind.ERROR: "ERROR",
}


class ActivityLog:
    """
    Keeps the last `capacity` entries; older entries are dropped on append.

    Usage:
        log = ActivityLog(capacity=10, clock=lambda: scheduler.now)
        log.append("Message queued: POST /login", LogKind.SUCCESS)
    """

    def __init__(self, capacity: int, clock: Callable[[], float]):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._clock = clock
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def append(self, message: str, kind: LogKind = LogKind.INFO, **context) -> LogEntry:
        """
        Record an entry and mirror it to the application log.

        Args:
            message: Human-readable event text
            kind: Entry severity
            **context: Structured fields bound to the loguru record

        Returns:
            The stored entry
        """
        entry = LogEntry(message=message, kind=kind, timestamp=self._clock())
        self._entries.append(entry)
        logger.bind(**context).log(_LOGURU_LEVELS[kind], message)
        return entry

    def entries(self) -> list[LogEntry]:
        """Entries oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
