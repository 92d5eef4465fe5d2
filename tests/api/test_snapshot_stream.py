"""
Tests for the Server-Sent Events snapshot stream.

The stream never ends on its own, so the route's body iterator is driven
directly instead of through TestClient, which waits for the full body.
"""
import asyncio
import json
import random
import pytest

from src.api.routes.snapshot import stream_snapshots
from src.core.engine import DeliveryEngine
from src.core.runner import PipelineRunner


class ConnectedRequest:
    """Request stand-in that stays connected until told otherwise."""

    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


def parse_frame(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


class TestSnapshotStream:
    """Tests for GET /snapshot/stream."""

    @pytest.fixture
    def runner(self, make_settings):
        engine = DeliveryEngine(make_settings(), rng=random.Random(5))
        return PipelineRunner(engine)

    @pytest.mark.asyncio
    async def test_stream_frames_follow_transitions(self, runner):
        """First frame is the current state; an enqueue produces the next frame."""
        request = ConnectedRequest()
        response = await stream_snapshots(request, runner)
        events = response.body_iterator

        assert response.media_type == "text/event-stream"

        first = parse_frame(await asyncio.wait_for(events.__anext__(), timeout=1.0))
        assert first["queues"]["email"] == []

        message = await runner.enqueue("email", "POST /login")
        second = parse_frame(await asyncio.wait_for(events.__anext__(), timeout=1.0))

        assert [m["id"] for m in second["queues"]["email"]] == [message.id]
        assert second["activity_log"][-1]["message"] == "Message queued: POST /login"

        await events.aclose()

    @pytest.mark.asyncio
    async def test_closing_stream_unsubscribes(self, runner):
        response = await stream_snapshots(ConnectedRequest(), runner)
        events = response.body_iterator
        await asyncio.wait_for(events.__anext__(), timeout=1.0)

        assert len(runner.engine._subscribers) == 1

        await events.aclose()

        assert runner.engine._subscribers == []

    @pytest.mark.asyncio
    async def test_stream_ends_when_client_disconnects(self, runner):
        request = ConnectedRequest()
        response = await stream_snapshots(request, runner)
        events = response.body_iterator
        await asyncio.wait_for(events.__anext__(), timeout=1.0)

        request.disconnected = True

        with pytest.raises(StopAsyncIteration):
            await events.__anext__()
        assert runner.engine._subscribers == []
