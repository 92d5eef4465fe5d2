"""
Tests for Prometheus metrics collection.
"""
import pytest
from src.utils.metrics import MetricsRegistry, Counter, Gauge


class TestCounter:
    """Tests for Counter metric type."""

    def test_counter_increment(self):
        """Counter increments correctly."""
        counter = Counter("test_counter", "Test counter")
        counter.inc()
        counter.inc(5)

        values = counter.collect()
        assert len(values) == 1
        assert values[0].value == 6

    def test_counter_with_labels(self):
        """Counter tracks separate values per label combination."""
        counter = Counter("test_counter", "Test counter", ["channel"])
        counter.inc(channel="email")
        counter.inc(2, channel="push")
        counter.inc(channel="email")

        values = {v.labels["channel"]: v.value for v in counter.collect()}
        assert values == {"email": 2, "push": 2}
        assert counter.total() == 4

    def test_counter_cannot_decrease(self):
        counter = Counter("test_counter", "Test counter")

        with pytest.raises(ValueError):
            counter.inc(-1)

    def test_counter_rejects_undeclared_labels(self):
        """Labels must match the names declared for the counter."""
        counter = Counter("test_counter", "Test counter", ["channel"])

        with pytest.raises(ValueError):
            counter.inc(endpoint="POST /login")
        with pytest.raises(ValueError):
            counter.inc()

        assert counter.collect() == []


class TestGauge:
    """Tests for Gauge metric type."""

    def test_gauge_set(self):
        gauge = Gauge("test_gauge", "Test gauge", ["channel"])
        gauge.set(3, channel="email")
        gauge.set(1, channel="email")

        values = gauge.collect()
        assert len(values) == 1
        assert values[0].value == 1

    def test_gauge_rejects_undeclared_labels(self):
        gauge = Gauge("test_gauge", "Test gauge")

        with pytest.raises(ValueError):
            gauge.set(1, channel="email")


class TestMetricsRegistry:
    """Tests for the per-engine registry."""

    def test_registries_are_independent(self):
        a = MetricsRegistry()
        b = MetricsRegistry()

        a.processed.inc(channel="email")

        assert a.processed.total() == 1
        assert b.processed.total() == 0

    def test_export_format(self):
        registry = MetricsRegistry()
        registry.failed.inc(channel="push")
        registry.dead_letter_size.set(1)

        output = registry.export()

        assert "# HELP dlq_messages_failed_total Messages moved to the dead letter queue" in output
        assert "# TYPE dlq_messages_failed_total counter" in output
        assert 'dlq_messages_failed_total{channel="push"} 1.0' in output
        assert "# TYPE dlq_dead_letter_size gauge" in output
        assert "dlq_dead_letter_size 1" in output

    def test_reset(self):
        registry = MetricsRegistry()
        registry.retried.inc(channel="email")

        registry.reset()

        assert registry.retried.total() == 0
        assert 'channel="email"' not in registry.export()
