"""
Command Endpoints

Enqueue, load test and reset commands for the running pipeline.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from src.api.dependencies import get_runner
from src.api.models.commands import EnqueueRequest, LoadTestRequest
from src.core.engine import InvalidCommandError
from src.core.runner import PipelineRunner
from src.message_queue import Message
from src.models.snapshot import EngineSnapshot

router = APIRouter(tags=["Commands"])


@router.post("/messages", status_code=status.HTTP_201_CREATED, response_model=Message)
async def enqueue_message(
    payload: EnqueueRequest,
    runner: PipelineRunner = Depends(get_runner),
):
    """
    Queue one message on a channel.

    Returns:
        The created message

    Raises:
        HTTPException: 422 if the channel is unknown or the endpoint is empty
    """
    try:
        return await runner.enqueue(payload.channel, payload.endpoint)
    except InvalidCommandError as e:
        logger.warning(f"🚫 Rejected enqueue: {e}")
        raise HTTPException(
            status_code=422,
            detail=str(e)
        )


@router.post("/load-test", status_code=status.HTTP_202_ACCEPTED)
async def load_test(
    payload: LoadTestRequest | None = None,
    runner: PipelineRunner = Depends(get_runner),
):
    """
    Enqueue a staggered burst of messages to random channels.

    Messages arrive over time; watch /snapshot or /snapshot/stream.
    """
    count = payload.count if payload else None
    try:
        await runner.load_test(count)
    except InvalidCommandError as e:
        logger.warning(f"🚫 Rejected load test: {e}")
        raise HTTPException(
            status_code=422,
            detail=str(e)
        )

    return {
        "status": "accepted",
        "count": count if count is not None else runner.engine.settings.load_test_size
    }


@router.post("/reset", response_model=EngineSnapshot)
async def reset_pipeline(runner: PipelineRunner = Depends(get_runner)):
    """
    Clear every queue, the dead letter queue, metrics and the activity log.

    In-flight deliveries are cancelled.
    """
    return await runner.reset()
