"""
Retry Policy

Decides whether a failed delivery goes back to its queue or to the
dead letter store.
"""

from dataclasses import dataclass
from typing import Union

from src.message_queue.base import Message, MessageStatus


@dataclass(frozen=True)
class Retry:
    """Failed message should be re-enqueued at the tail of its queue."""
    message: Message


@dataclass(frozen=True)
class Exhausted:
    """Retry budget spent; message belongs in the dead letter store."""
    message: Message


RetryDecision = Union[Retry, Exhausted]


class RetryPolicy:
    """
    Bounded retry policy.

    A message is retried while its retry_count is below max_attempts.
    Deterministic: the outcome depends only on retry_count.
    """

    def __init__(self, max_attempts: int = 3):
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self.max_attempts = max_attempts

    def resolve_failure(self, message: Message) -> RetryDecision:
        """
        Resolve a failed delivery attempt.

        Args:
            message: Message whose delivery just failed

        Returns:
            Retry with an incremented retry_count, or Exhausted with
            status failed
        """
        if message.retry_count < self.max_attempts:
            return Retry(message.with_status(
                MessageStatus.RETRYING,
                retry_count=message.retry_count + 1,
            ))
        return Exhausted(message.with_status(MessageStatus.FAILED))
