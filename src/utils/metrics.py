"""
Prometheus Metrics Collector

Lightweight metrics collection for observability without external dependencies.
Generates Prometheus text exposition format (text/plain; version=0.0.4).

Each engine owns its own registry so independent simulations never share
counters.
"""
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class MetricType(str, Enum):
    """Prometheus metric types."""
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class Counter:
    """
    Prometheus Counter metric.

    A counter is a cumulative metric that only goes up.
    Used for: processed, retried and failed delivery counts.
    """

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        """Increment counter by amount."""
        if amount < 0:
            raise ValueError("Counters can only increase")
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def total(self) -> float:
        """Sum across every label combination."""
        with self._lock:
            return sum(self._values.values())

    def _label_key(self, labels: Dict[str, str]) -> tuple:
        """Create hashable key from labels."""
        if set(labels) != set(self.label_names):
            raise ValueError(
                f"{self.name} expects labels {sorted(self.label_names)}, got {sorted(labels)}"
            )
        return tuple(sorted(labels.items()))

    def collect(self) -> List[MetricValue]:
        """Collect all metric values."""
        with self._lock:
            return [
                MetricValue(value=v, labels=dict(k))
                for k, v in self._values.items()
            ]


class Gauge:
    """
    Prometheus Gauge metric.

    A gauge can go up and down.
    Used for: queue depth, busy workers, dead letter size.
    """

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    def set(self, value: float, **labels: str) -> None:
        """Set gauge to value."""
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = value

    def _label_key(self, labels: Dict[str, str]) -> tuple:
        """Create hashable key from labels."""
        if set(labels) != set(self.label_names):
            raise ValueError(
                f"{self.name} expects labels {sorted(self.label_names)}, got {sorted(labels)}"
            )
        return tuple(sorted(labels.items()))

    def collect(self) -> List[MetricValue]:
        """Collect all metric values."""
        with self._lock:
            return [
                MetricValue(value=v, labels=dict(k))
                for k, v in self._values.items()
            ]


class MetricsRegistry:
    """
    Registry for the delivery pipeline metrics of one engine.

    Provides named accessors for the pipeline counters and gauges and
    Prometheus text format export.
    """

    def __init__(self, prefix: str = "dlq"):
        self.prefix = prefix
        self._metrics: Dict[str, Counter | Gauge] = {}
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize all pipeline metrics."""

        # ============================================
        # DELIVERY OUTCOMES
        # ============================================
        self.processed = self.counter(
            f"{self.prefix}_messages_processed_total",
            "Messages delivered successfully",
            ["channel"]
        )

        self.retried = self.counter(
            f"{self.prefix}_messages_retried_total",
            "Failed deliveries sent back to their queue",
            ["channel"]
        )

        self.failed = self.counter(
            f"{self.prefix}_messages_failed_total",
            "Messages moved to the dead letter queue",
            ["channel"]
        )

        # ============================================
        # PIPELINE STATE
        # ============================================
        self.queue_depth = self.gauge(
            f"{self.prefix}_queue_depth",
            "Messages waiting in each channel queue",
            ["channel"]
        )

        self.worker_busy = self.gauge(
            f"{self.prefix}_worker_busy",
            "1 while the channel worker holds a message",
            ["channel"]
        )

        self.dead_letter_size = self.gauge(
            f"{self.prefix}_dead_letter_size",
            "Messages in the dead letter queue"
        )

    def counter(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> Counter:
        """Create and register a counter."""
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def gauge(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> Gauge:
        """Create and register a gauge."""
        metric = Gauge(name, description, labels)
        self._metrics[name] = metric
        return metric

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.

        Format specification:
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")

            if isinstance(metric, Counter):
                lines.append(f"# TYPE {name} {MetricType.COUNTER.value}")
            else:
                lines.append(f"# TYPE {name} {MetricType.GAUGE.value}")

            for mv in metric.collect():
                label_str = self._format_labels(mv.labels)
                lines.append(f"{name}{label_str} {mv.value}")

            lines.append("")  # Empty line between metrics

        return "\n".join(lines)

    def _format_labels(self, labels: Dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""

        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self._metrics.clear()
        self._setup_metrics()
