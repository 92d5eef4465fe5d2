"""
Pydantic models for command request payloads.
"""
from pydantic import BaseModel, Field
from typing import Optional


class EnqueueRequest(BaseModel):
    """Request to queue one message on a channel."""
    channel: str = Field(..., description="Target channel: email, inApp or push")
    endpoint: Optional[str] = Field(
        None,
        description="Simulated destination action (defaults to the channel's endpoint label)"
    )


class LoadTestRequest(BaseModel):
    """Request to enqueue a staggered burst of messages to random channels."""
    count: Optional[int] = Field(None, ge=0, description="Number of messages (default from settings)")
