"""
Channel Worker

Single-concurrency processor for one channel. Holds at most one message at
a time and resolves it after a simulated delivery delay.
"""

import random
from typing import Callable, Optional
from loguru import logger

from src.core.activity_log import ActivityLog
from src.message_queue.base import ChannelQueue, Message, MessageStatus
from src.message_queue.memory import DeadLetterStore
from src.message_queue.retry import Retry, RetryPolicy
from src.message_queue.scheduler import EventScheduler, ScheduledEvent
from src.models.snapshot import LogKind, WorkerState
from src.utils.metrics import MetricsRegistry


class ChannelWorker:
    """
    Idle/Busy state machine for one channel.

    A tick while Idle with a non-empty queue dequeues the head message and
    schedules its resolution `processing_delay` time units later. Ticks
    while Busy, or against an empty queue, do nothing.

    Attributes:
        queue: Channel queue to drain
        processing_delay: Simulated delivery latency in time units
        success_probability: Chance that a delivery attempt succeeds
    """

    def __init__(
        self,
        queue: ChannelQueue,
        scheduler: EventScheduler,
        retry_policy: RetryPolicy,
        dead_letters: DeadLetterStore,
        metrics: MetricsRegistry,
        activity_log: ActivityLog,
        processing_delay: float = 2.0,
        success_probability: float = 0.8,
        rng: Optional[random.Random] = None,
        on_transition: Optional[Callable[[], None]] = None,
    ):
        self.queue = queue
        self.channel = queue.channel
        self.scheduler = scheduler
        self.retry_policy = retry_policy
        self.dead_letters = dead_letters
        self.metrics = metrics
        self.activity_log = activity_log
        self.processing_delay = processing_delay
        self.success_probability = success_probability
        self._rng = rng or random.Random()
        self._on_transition = on_transition or (lambda: None)

        self._current: Optional[Message] = None
        self._dequeued: Optional[Message] = None
        self._resolution: Optional[ScheduledEvent] = None

    @property
    def busy(self) -> bool:
        return self._current is not None

    @property
    def current_message(self) -> Optional[Message]:
        return self._current

    def state(self) -> WorkerState:
        return WorkerState(current_message=self._current)

    def tick(self) -> bool:
        """
        Start processing the head message if the worker is Idle.

        Returns:
            True if a message was dequeued
        """
        if self.busy:
            logger.debug(f"{self.channel.value} worker busy, tick skipped")
            return False

        message = self.queue.dequeue()
        if message is None:
            return False

        self._dequeued = message
        self._current = message.with_status(MessageStatus.PROCESSING)
        self._resolution = self.scheduler.call_later(
            self.processing_delay,
            self._resolve,
            name=f"resolve:{self.channel.value}:{message.id}",
        )
        logger.debug(
            f"Processing {self.channel.value} message {message.id} (retry {message.retry_count})"
        )
        self._on_transition()
        return True

    def _resolve(self) -> None:
        """Draw the delivery outcome and route the message."""
        message = self._current
        self._resolution = None
        if message is None:
            return

        if self._rng.random() < self.success_probability:
            self.metrics.processed.inc(channel=self.channel.value)
            self.activity_log.append(
                f"{self.channel.value} message processed: {message.id}",
                LogKind.SUCCESS,
                channel=self.channel.value,
                message_id=message.id,
                retry_count=message.retry_count,
            )
        else:
            self._handle_failure(message)

        self._current = None
        self._dequeued = None
        self._on_transition()

    def _handle_failure(self, message: Message) -> None:
        decision = self.retry_policy.resolve_failure(message)

        if isinstance(decision, Retry):
            self.queue.enqueue(decision.message)
            self.metrics.retried.inc(channel=self.channel.value)
            self.activity_log.append(
                f"Retrying message: {message.id}",
                LogKind.WARNING,
                channel=self.channel.value,
                message_id=message.id,
                retry_count=decision.message.retry_count,
            )
        else:
            self.dead_letters.append(decision.message)
            self.metrics.failed.inc(channel=self.channel.value)
            self.activity_log.append(
                f"Message sent to DLQ: {message.id}",
                LogKind.ERROR,
                channel=self.channel.value,
                message_id=message.id,
                retry_count=message.retry_count,
            )

    def cancel(self) -> Optional[Message]:
        """
        Drop in-flight work without resolving it.

        Returns:
            The discarded message, if any
        """
        if self._resolution is not None:
            self._resolution.cancel()
        discarded = self._current
        self._current = None
        self._dequeued = None
        self._resolution = None
        return discarded

    def interrupt(self) -> Optional[Message]:
        """
        Abort in-flight work and put the message back at the queue head.

        The message keeps the status it had before it was dequeued.

        Returns:
            The returned message, if any
        """
        original = self._dequeued
        self.cancel()
        if original is not None:
            self.queue.requeue_front(original)
        return original
