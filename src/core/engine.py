"""
Delivery Engine

Owns every piece of pipeline state (queues, workers, dead letter store,
metrics, activity log) and exposes the command and snapshot surfaces.

All mutations run synchronously on the caller's thread, driven either by
explicit commands or by the virtual clock. Callers that drive the engine
from several coroutines must serialize access (see PipelineRunner).
"""
import random
from typing import Callable, Optional, Union
from loguru import logger

from src.config import Settings, get_settings
from src.core.activity_log import ActivityLog
from src.message_queue import (
    Channel,
    DeadLetterStore,
    EventScheduler,
    InMemoryChannelQueue,
    Message,
    RetryPolicy,
    ScheduledEvent,
    create_message,
)
from src.message_queue.worker import ChannelWorker
from src.models.snapshot import EngineSnapshot, LogKind, MetricsSnapshot
from src.utils.metrics import MetricsRegistry
from src.utils.observability import log_delivery_event

Subscriber = Callable[[EngineSnapshot], None]


class InvalidCommandError(ValueError):
    """Command input was rejected; engine state is unchanged."""


class DeliveryEngine:
    """
    Headless multi-channel delivery simulation.

    Lifecycle:
        created -> start() -> running -> stop() -> stopped -> start() ...

    Commands are accepted while created or running. Ticks only happen while
    running. After stop() nothing is scheduled and nothing mutates until the
    engine is started again.

    Reset policy: reset() cancels in-flight work. Pending resolutions and
    staggered load-test enqueues are dropped, never applied afterwards.

    Usage:
        engine = DeliveryEngine(Settings(success_probability=1.0))
        engine.start()
        engine.enqueue("email", "POST /login")
        engine.advance(3)
        assert engine.snapshot().metrics.processed == 1
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[EventScheduler] = None,
    ):
        """
        Initialize engine.

        Args:
            settings: Simulation settings (default from environment)
            rng: Random source for outcome draws and load-test channel choice
            scheduler: Virtual clock (default starts at 0)
        """
        self.settings = settings or get_settings()
        self.scheduler = scheduler or EventScheduler()
        self._rng = rng or random.Random()

        self.channels: list[Channel] = list(dict.fromkeys(self.settings.channels))
        self.queues = {channel: InMemoryChannelQueue(channel) for channel in self.channels}
        self.dead_letters = DeadLetterStore()
        self.metrics = MetricsRegistry()
        self.activity_log = ActivityLog(
            capacity=self.settings.activity_log_capacity,
            clock=lambda: self.scheduler.now,
        )
        self.retry_policy = RetryPolicy(self.settings.max_retry_attempts)
        self.workers = {
            channel: ChannelWorker(
                queue=self.queues[channel],
                scheduler=self.scheduler,
                retry_policy=self.retry_policy,
                dead_letters=self.dead_letters,
                metrics=self.metrics,
                activity_log=self.activity_log,
                processing_delay=self.settings.processing_delay,
                success_probability=self.settings.success_probability,
                rng=self._rng,
                on_transition=self._publish,
            )
            for channel in self.channels
        }

        self._ticks: dict[Channel, ScheduledEvent] = {}
        self._pending_enqueues: list[ScheduledEvent] = []
        self._subscribers: list[Subscriber] = []
        self._running = False
        self._stopped = False

    # ============================================
    # LIFECYCLE
    # ============================================

    @property
    def running(self) -> bool:
        return self._running

    @property
    def now(self) -> float:
        return self.scheduler.now

    def start(self) -> None:
        """Begin ticking every channel worker at the configured interval."""
        if self._running:
            logger.warning("Engine already running")
            return

        if self.scheduler.closed:
            self.scheduler.reopen()

        for channel in self.channels:
            self._ticks[channel] = self.scheduler.call_every(
                self.settings.tick_interval,
                self.workers[channel].tick,
                name=f"tick:{channel.value}",
            )

        self._running = True
        self._stopped = False
        log_delivery_event(
            "engine_started",
            self.now,
            channels=[c.value for c in self.channels],
            tick_interval=self.settings.tick_interval,
        )
        self._publish()

    def stop(self) -> None:
        """
        Cancel every timer and return in-flight messages to their queue head.

        No state changes after this call until start() is called again.
        """
        if self._stopped:
            return

        requeued = 0
        for worker in self.workers.values():
            if worker.interrupt() is not None:
                requeued += 1

        self.scheduler.stop()
        self._ticks.clear()
        self._pending_enqueues.clear()
        self._running = False
        self._stopped = True

        log_delivery_event("engine_stopped", self.now, requeued=requeued)
        self._publish()

    def advance(self, duration: float) -> int:
        """
        Move the virtual clock forward.

        Args:
            duration: Time units to advance

        Returns:
            Number of timer callbacks fired
        """
        if duration < 0:
            raise InvalidCommandError(f"Cannot advance by a negative duration: {duration}")
        return self.scheduler.advance(duration)

    # ============================================
    # COMMANDS
    # ============================================

    def parse_channel(self, channel: Union[Channel, str]) -> Channel:
        """
        Validate a channel name against the configured channel set.

        Raises:
            InvalidCommandError: If the channel is unknown or disabled
        """
        try:
            parsed = Channel(channel)
        except ValueError:
            raise InvalidCommandError(f"Unknown channel: {channel!r}") from None

        if parsed not in self.queues:
            raise InvalidCommandError(f"Channel not enabled: {parsed.value}")
        return parsed

    def enqueue(self, channel: Union[Channel, str], endpoint: Optional[str] = None) -> Message:
        """
        Create a message and append it to its channel queue.

        Args:
            channel: Target channel
            endpoint: Destination label (default: the channel's configured endpoint)

        Returns:
            The queued message

        Raises:
            InvalidCommandError: On unknown channel, empty endpoint or stopped engine
        """
        parsed = self.parse_channel(channel)
        if endpoint is None:
            endpoint = self.settings.channel_endpoints[parsed]
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise InvalidCommandError("Endpoint must be a non-empty string")
        self._ensure_accepting_commands()

        message = create_message(parsed, endpoint, self.now)
        self.queues[parsed].enqueue(message)
        self.activity_log.append(
            f"Message queued: {endpoint}",
            LogKind.SUCCESS,
            channel=parsed.value,
            message_id=message.id,
        )
        self._publish()
        return message

    def load_test(self, count: Optional[int] = None) -> None:
        """
        Enqueue `count` messages to randomly chosen channels.

        Message i is enqueued `i * load_test_stagger` time units from now,
        so the first one is queued immediately.

        Args:
            count: Number of messages (default from settings)

        Raises:
            InvalidCommandError: If count is not a non-negative integer
        """
        if count is None:
            count = self.settings.load_test_size
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidCommandError(f"Load test size must be a non-negative integer, got {count!r}")
        self._ensure_accepting_commands()

        log_delivery_event(
            "load_test",
            self.now,
            count=count,
            stagger=self.settings.load_test_stagger,
        )

        for i in range(count):
            delay = i * self.settings.load_test_stagger
            if delay == 0:
                self._enqueue_random()
            else:
                self._schedule_enqueue(delay, name=f"load_test:{i}")

    def _schedule_enqueue(self, delay: float, name: str) -> None:
        handle: list[ScheduledEvent] = []

        def fire() -> None:
            if handle[0] in self._pending_enqueues:
                self._pending_enqueues.remove(handle[0])
            self._enqueue_random()

        handle.append(self.scheduler.call_later(delay, fire, name=name))
        self._pending_enqueues.append(handle[0])

    def _enqueue_random(self) -> Message:
        channel = self._rng.choice(self.channels)
        return self.enqueue(channel)

    def reset(self) -> None:
        """
        Clear queues, workers, dead letters, metrics and the activity log.

        In-flight resolutions and pending load-test enqueues are cancelled
        first, so no stale result can land after the reset. Ticks keep
        running if the engine is running.
        """
        for handle in self._pending_enqueues:
            handle.cancel()
        self._pending_enqueues.clear()

        discarded = 0
        for worker in self.workers.values():
            if worker.cancel() is not None:
                discarded += 1

        for queue in self.queues.values():
            queue.clear()
        self.dead_letters.clear()
        self.metrics.reset()
        self.activity_log.clear()

        log_delivery_event("reset", self.now, discarded_in_flight=discarded)
        self.activity_log.append("System reset completed", LogKind.INFO)
        self._publish()

    def _ensure_accepting_commands(self) -> None:
        if self._stopped:
            raise InvalidCommandError("Engine is stopped")

    # ============================================
    # QUERIES
    # ============================================

    def snapshot(self) -> EngineSnapshot:
        """
        Get a read-only view of the complete engine state.

        Returns:
            Snapshot at the current virtual time
        """
        return EngineSnapshot(
            clock=self.now,
            running=self._running,
            queues={channel: queue.messages() for channel, queue in self.queues.items()},
            workers={channel: worker.state() for channel, worker in self.workers.items()},
            dlq=self.dead_letters.messages(),
            metrics=MetricsSnapshot(
                processed=int(self.metrics.processed.total()),
                retried=int(self.metrics.retried.total()),
                failed=int(self.metrics.failed.total()),
                dead_letter=len(self.dead_letters),
            ),
            activity_log=self.activity_log.entries(),
        )

    def export_metrics(self) -> str:
        """Prometheus text exposition of the pipeline metrics."""
        for channel in self.channels:
            self.metrics.queue_depth.set(len(self.queues[channel]), channel=channel.value)
            self.metrics.worker_busy.set(int(self.workers[channel].busy), channel=channel.value)
        self.metrics.dead_letter_size.set(len(self.dead_letters))
        return self.metrics.export()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Receive a snapshot after every state transition.

        Args:
            callback: Called synchronously with each new snapshot

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        if not self._subscribers:
            return

        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                # Subscribers are observers only
                logger.exception("Snapshot subscriber failed")
