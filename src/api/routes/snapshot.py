"""
Snapshot Endpoints

Read-only pipeline state, as a single document or a Server-Sent Events
stream with one frame per state transition.
"""
import asyncio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from typing import AsyncIterator

from src.api.dependencies import get_runner
from src.core.runner import PipelineRunner
from src.models.snapshot import EngineSnapshot

router = APIRouter(prefix="/snapshot", tags=["Snapshot"])

# Seconds between keep-alive comments when nothing changes
KEEPALIVE_SECONDS = 15.0


def format_sse(snapshot: EngineSnapshot) -> str:
    """SSE data frame for a snapshot."""
    return f"data: {snapshot.model_dump_json()}\n\n"


@router.get("", response_model=EngineSnapshot)
async def get_snapshot(runner: PipelineRunner = Depends(get_runner)):
    """Current pipeline state."""
    return await runner.snapshot()


@router.get("/stream")
async def stream_snapshots(
    request: Request,
    runner: PipelineRunner = Depends(get_runner),
):
    """
    Server-Sent Events stream of snapshots.

    The first frame is the current state; each later frame follows a
    state transition.
    """
    initial, stream, unsubscribe = await runner.open_snapshot_stream()

    async def events() -> AsyncIterator[str]:
        try:
            yield format_sse(initial)
            while not await request.is_disconnected():
                try:
                    snapshot = await asyncio.wait_for(stream.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield format_sse(snapshot)
        finally:
            unsubscribe()

    return StreamingResponse(events(), media_type="text/event-stream")
