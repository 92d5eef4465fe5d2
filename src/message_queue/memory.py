"""
In-Memory Channel Queue

Deque-backed FIFO queue per channel and the append-only dead letter store.
Data is lost on restart.
"""

from collections import deque
from typing import Optional

from src.message_queue.base import Channel, ChannelQueue, Message


class InMemoryChannelQueue(ChannelQueue):
    """
    In-memory FIFO queue for one channel.

    Capacity is unbounded; there is no backpressure.

    Suitable for:
    - Testing
    - Simulation runs in a single process

    Not suitable for:
    - Multi-instance deployments
    - Long-term message persistence
    """

    def __init__(self, channel: Channel):
        """
        Initialize in-memory queue.

        Args:
            channel: Channel whose messages this queue holds
        """
        self.channel = channel
        self._pending: deque[Message] = deque()

    def enqueue(self, message: Message) -> None:
        if message.channel != self.channel:
            raise ValueError(
                f"Message {message.id} belongs to {message.channel.value}, "
                f"not {self.channel.value}"
            )
        self._pending.append(message)

    def dequeue(self) -> Optional[Message]:
        if not self._pending:
            return None
        return self._pending.popleft()

    def requeue_front(self, message: Message) -> None:
        self._pending.appendleft(message)

    def clear(self) -> None:
        self._pending.clear()

    def messages(self) -> list[Message]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)


class DeadLetterStore:
    """
    Terminal storage for messages that exhausted their retry budget.

    Append-only; the only way to empty it is a full engine reset.
    """

    def __init__(self):
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        """
        Record a terminally failed message.

        Args:
            message: Message with status failed
        """
        self._messages.append(message)

    def messages(self, limit: Optional[int] = None) -> list[Message]:
        """
        Get dead letter messages in arrival order.

        Args:
            limit: Maximum messages to return

        Returns:
            List of dead letter messages

        Raises:
            ValueError: If limit is negative
        """
        if limit is None:
            return list(self._messages)
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        return self._messages[:limit]

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)
