"""
Base Queue Interface

Message record, channel and status enums, the message factory and the
abstract per-channel FIFO queue interface.
"""

import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Channel(str, Enum):
    """Delivery channel. Each channel has its own queue and worker."""
    EMAIL = "email"
    IN_APP = "inApp"
    PUSH = "push"


class MessageStatus(str, Enum):
    """Message processing status."""
    QUEUED = "queued"
    PROCESSING = "processing"
    RETRYING = "retrying"
    PROCESSED = "processed"
    FAILED = "failed"


class Message(BaseModel):
    """
    Message travelling through the delivery pipeline.

    Records are immutable: every state change produces a copy, so a
    snapshot handed to a subscriber never changes underneath it.

    Attributes:
        id: Unique message identifier, shared by every retry of the message
        channel: Channel the message is delivered on
        endpoint: Simulated destination action (e.g. "POST /login")
        created_at: Virtual clock time when the message was created
        retry_count: Number of retries so far
        status: Current processing status
    """
    model_config = ConfigDict(frozen=True)

    id: str
    channel: Channel
    endpoint: str
    created_at: float
    retry_count: int = 0
    status: MessageStatus = MessageStatus.QUEUED

    def with_status(self, status: MessageStatus, **changes) -> "Message":
        """Return a copy carrying the new status and any other field changes."""
        return self.model_copy(update={"status": status, **changes})


def create_message(channel: Channel, endpoint: str, created_at: float) -> Message:
    """
    Build a fresh message record.

    Args:
        channel: Channel the message is delivered on
        endpoint: Simulated destination action
        created_at: Creation time on the simulation clock

    Returns:
        Queued message with a random 128-bit identifier
    """
    return Message(
        id=uuid.uuid4().hex,
        channel=channel,
        endpoint=endpoint,
        created_at=created_at,
    )


class ChannelQueue(ABC):
    """
    Abstract FIFO queue for a single channel.

    Implementations must provide:
    - Enqueue: Append message to the tail
    - Dequeue: Remove and return the head
    - Requeue front: Put an interrupted message back at the head
    - Clear: Drop every pending message
    """

    @abstractmethod
    def enqueue(self, message: Message) -> None:
        """
        Append message to the tail of the queue.

        Used for fresh messages and for retries alike.

        Args:
            message: Message to enqueue
        """

    @abstractmethod
    def dequeue(self) -> Optional[Message]:
        """
        Remove the message at the head of the queue.

        Returns:
            Head message or None if queue is empty
        """

    @abstractmethod
    def requeue_front(self, message: Message) -> None:
        """
        Put a message back at the head of the queue.

        Only used when in-flight work is interrupted, so the message keeps
        its original position.

        Args:
            message: Message that was dequeued last
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop every pending message."""

    @abstractmethod
    def messages(self) -> list[Message]:
        """
        Get pending messages in dequeue order.

        Returns:
            Copy of the pending messages, head first
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of pending messages."""
