"""
Pipeline Runner

Background asyncio driver that advances the engine's virtual clock in real
time. Every engine call goes through a single asyncio.Lock so clock
advances and commands never interleave.
"""
import asyncio
from typing import Callable, Optional
from loguru import logger

from src.core.engine import DeliveryEngine
from src.message_queue import Channel, Message
from src.models.snapshot import EngineSnapshot


class PipelineRunner:
    """
    Real-time driver for a DeliveryEngine.

    Attributes:
        engine: Engine being driven
        time_unit_seconds: Wall-clock seconds per virtual time unit
        resolution_seconds: Seconds between clock advances
    """

    def __init__(
        self,
        engine: DeliveryEngine,
        time_unit_seconds: Optional[float] = None,
        resolution_seconds: Optional[float] = None,
    ):
        """
        Initialize runner.

        Args:
            engine: Engine to drive
            time_unit_seconds: Seconds per time unit (default from engine settings)
            resolution_seconds: Seconds between advances (default from engine settings)
        """
        self.engine = engine
        self.time_unit_seconds = time_unit_seconds or engine.settings.time_unit_seconds
        self.resolution_seconds = resolution_seconds or engine.settings.driver_resolution_seconds
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the engine and the background clock task."""
        if self._running:
            logger.warning("Runner already running")
            return

        async with self._lock:
            self.engine.start()

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"🚀 Pipeline runner started (time_unit={self.time_unit_seconds}s, "
            f"resolution={self.resolution_seconds}s)"
        )

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()

        try:
            while self._running:
                await asyncio.sleep(self.resolution_seconds)

                current = loop.time()
                elapsed = current - last
                last = current

                async with self._lock:
                    if self._running:
                        self.engine.advance(elapsed / self.time_unit_seconds)

        except Exception as e:
            logger.error(f"Pipeline runner crashed: {e}", exc_info=True)
            raise

        finally:
            logger.info("🛑 Pipeline runner stopped")

    async def stop(self) -> None:
        """
        Stop the clock task and the engine.

        In-flight messages go back to the head of their queue.
        """
        if not self._running:
            return

        self._running = False

        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        async with self._lock:
            self.engine.stop()

    async def enqueue(self, channel: Channel | str, endpoint: Optional[str] = None) -> Message:
        async with self._lock:
            return self.engine.enqueue(channel, endpoint)

    async def load_test(self, count: Optional[int] = None) -> None:
        async with self._lock:
            self.engine.load_test(count)

    async def reset(self) -> EngineSnapshot:
        async with self._lock:
            self.engine.reset()
            return self.engine.snapshot()

    async def snapshot(self) -> EngineSnapshot:
        async with self._lock:
            return self.engine.snapshot()

    async def export_metrics(self) -> str:
        async with self._lock:
            return self.engine.export_metrics()

    def open_stream(self, max_pending: int = 100) -> tuple[asyncio.Queue, Callable[[], None]]:
        """
        Subscribe an asyncio.Queue to engine snapshots.

        When the consumer falls behind, the oldest snapshot is dropped.

        Args:
            max_pending: Snapshots buffered before dropping

        Returns:
            (queue, unsubscribe)
        """
        stream: asyncio.Queue[EngineSnapshot] = asyncio.Queue(maxsize=max_pending)

        def push(snapshot: EngineSnapshot) -> None:
            if stream.full():
                stream.get_nowait()
            stream.put_nowait(snapshot)

        unsubscribe = self.engine.subscribe(push)
        return stream, unsubscribe

    async def open_snapshot_stream(
        self, max_pending: int = 100
    ) -> tuple[EngineSnapshot, asyncio.Queue, Callable[[], None]]:
        """
        Take the current snapshot and subscribe to later ones atomically.

        Every transition after the returned snapshot lands on the queue
        exactly once.

        Returns:
            (initial snapshot, queue, unsubscribe)
        """
        async with self._lock:
            initial = self.engine.snapshot()
            stream, unsubscribe = self.open_stream(max_pending)
        return initial, stream, unsubscribe
