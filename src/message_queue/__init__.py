"""
Message Queue System

Building blocks of the multi-channel delivery pipeline:
- Message record, channel/status enums and the message factory
- In-memory FIFO queue per channel
- Bounded retry policy
- Dead letter store for exhausted messages
- Virtual-clock event scheduler
- Single-concurrency channel worker (src.message_queue.worker)
"""

from src.message_queue.base import (
    Channel,
    ChannelQueue,
    Message,
    MessageStatus,
    create_message,
)
from src.message_queue.memory import DeadLetterStore, InMemoryChannelQueue
from src.message_queue.retry import Exhausted, Retry, RetryPolicy
from src.message_queue.scheduler import EventScheduler, ScheduledEvent, SchedulerClosedError

__all__ = [
    "Channel",
    "ChannelQueue",
    "Message",
    "MessageStatus",
    "create_message",
    "DeadLetterStore",
    "InMemoryChannelQueue",
    "Exhausted",
    "Retry",
    "RetryPolicy",
    "EventScheduler",
    "ScheduledEvent",
    "SchedulerClosedError",
]
