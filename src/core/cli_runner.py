"""
CLI Runner for the Delivery Engine
Headless console demo: runs a load test on the virtual clock and prints
the resulting pipeline state.
"""
import argparse
import random
from loguru import logger

from src.config import Settings, get_settings
from src.core.engine import DeliveryEngine
from src.models.snapshot import EngineSnapshot
from src.utils.observability import configure_logging


def render_snapshot(snapshot: EngineSnapshot) -> str:
    """Plain-text rendering of a snapshot."""
    lines = [f"t={snapshot.clock:.1f}"]

    for channel, queue in snapshot.queues.items():
        worker = snapshot.workers[channel]
        status = f"Processing {worker.current_message.id}" if worker.active else "Idle"
        lines.append(f"   {channel.value:<6} queued={len(queue):<3} {status}")

    metrics = snapshot.metrics
    lines.append(
        f"   processed={metrics.processed} retried={metrics.retried} "
        f"failed={metrics.failed} dlq={metrics.dead_letter}"
    )
    return "\n".join(lines)


def run_simulation(
    settings: Settings,
    messages: int,
    duration: float,
    seed: int | None = None,
) -> EngineSnapshot:
    """
    Run a load test for `duration` time units.

    Args:
        settings: Simulation settings
        messages: Load test size
        duration: Virtual time units to simulate
        seed: Random seed for reproducible runs

    Returns:
        Final snapshot
    """
    engine = DeliveryEngine(settings, rng=random.Random(seed))
    engine.start()
    engine.load_test(messages)

    elapsed = 0.0
    step = settings.tick_interval
    while elapsed < duration:
        engine.advance(min(step, duration - elapsed))
        elapsed += step
        print(render_snapshot(engine.snapshot()))

    final = engine.snapshot()
    engine.stop()
    return final


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Multi-channel delivery pipeline simulation")
    parser.add_argument("--messages", type=int, default=None, help="load test size")
    parser.add_argument("--duration", type=float, default=30.0, help="virtual time units to run")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    messages = args.messages if args.messages is not None else settings.load_test_size
    logger.info(f"Running load test: {messages} messages for {args.duration} time units")

    final = run_simulation(settings, messages, args.duration, args.seed)

    print("\n" + "=" * 50)
    print("Dead Letter Queue")
    print("=" * 50)
    if not final.dlq:
        print("No failed messages")
    for message in final.dlq:
        print(f"{message.id} - {message.endpoint} (retries: {message.retry_count})")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
