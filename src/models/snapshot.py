"""
Snapshot Models

Read-only views of the engine state handed to renderers, subscribers and
the HTTP layer.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.message_queue.base import Channel, Message


class LogKind(str, Enum):
    """Severity of an activity log entry."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class LogEntry(BaseModel):
    """Single activity log line."""
    model_config = ConfigDict(frozen=True)

    message: str
    kind: LogKind = LogKind.INFO
    timestamp: float


class WorkerState(BaseModel):
    """
    Per-channel worker state.

    `active` is derived from `current_message`, so the two can never
    disagree.
    """
    model_config = ConfigDict(frozen=True)

    current_message: Optional[Message] = None

    @computed_field
    @property
    def active(self) -> bool:
        return self.current_message is not None


class MetricsSnapshot(BaseModel):
    """
    Pipeline counters.

    Attributes:
        processed: Successful deliveries
        retried: Failed attempts that were re-enqueued
        failed: Messages moved to the dead letter queue
        dead_letter: Current dead letter queue size
    """
    processed: int = 0
    retried: int = 0
    failed: int = 0
    dead_letter: int = 0


class EngineSnapshot(BaseModel):
    """Complete engine state at one instant of the simulation clock."""
    model_config = ConfigDict(frozen=True)

    clock: float
    running: bool
    queues: dict[Channel, list[Message]]
    workers: dict[Channel, WorkerState]
    dlq: list[Message] = Field(default_factory=list)
    metrics: MetricsSnapshot = Field(default_factory=MetricsSnapshot)
    activity_log: list[LogEntry] = Field(default_factory=list)

    def message_ids(self) -> list[str]:
        """Ids of every message currently queued, in flight or dead-lettered."""
        ids = [m.id for queue in self.queues.values() for m in queue]
        ids.extend(
            w.current_message.id for w in self.workers.values() if w.current_message
        )
        ids.extend(m.id for m in self.dlq)
        return ids
