"""
Tests for ActivityLog.
"""
import pytest

from src.core.activity_log import ActivityLog
from src.models.snapshot import LogKind


class TestActivityLog:
    """Tests for the bounded activity log."""

    def test_append_records_clock(self):
        """Entries carry the time of the clock callable."""
        now = [3.0]
        log = ActivityLog(capacity=5, clock=lambda: now[0])

        entry = log.append("Message queued: POST /login", LogKind.SUCCESS)

        assert entry.timestamp == 3.0
        assert entry.kind == LogKind.SUCCESS
        assert log.entries() == [entry]

    def test_truncates_to_capacity(self):
        """Only the most recent entries are kept."""
        log = ActivityLog(capacity=3, clock=lambda: 0.0)

        for i in range(7):
            log.append(f"entry {i}")

        assert len(log) == 3
        assert [e.message for e in log.entries()] == ["entry 4", "entry 5", "entry 6"]

    def test_clear(self):
        log = ActivityLog(capacity=3, clock=lambda: 0.0)
        log.append("entry")

        log.clear()

        assert log.entries() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ActivityLog(capacity=0, clock=lambda: 0.0)
