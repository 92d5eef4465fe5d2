"""
Structured Logging & Observability
Logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from typing import Any, Optional
from src.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None):
    """
    Configure loguru for simulation observability.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = settings or get_settings()

    # Remove default handler
    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_delivery_event(
    event_type: str,
    clock: float,
    channel: Optional[str] = None,
    message_id: Optional[str] = None,
    **details: Any
):
    """
    Structured logging for engine lifecycle and command events.

    Args:
        event_type: Type of event (e.g., "engine_started", "load_test", "reset")
        clock: Virtual time at which the event happened
        channel: Channel involved, if any
        message_id: Message involved, if any
        **details: Event-specific data

    Example:
        >>> log_delivery_event(
        ...     event_type="load_test",
        ...     clock=12.0,
        ...     count=5,
        ...     stagger=0.2
        ... )
    """
    log_data = {
        "event_type": event_type,
        "clock": round(clock, 3),
    }

    if channel is not None:
        log_data["channel"] = channel
    if message_id is not None:
        log_data["message_id"] = message_id

    log_data.update(details)

    logger.bind(**log_data).info(f"Pipeline Event: {event_type}")
