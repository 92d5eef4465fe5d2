"""
Metrics Endpoints

Prometheus-compatible metrics and pipeline counters for observability.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.api.dependencies import get_runner
from src.core.runner import PipelineRunner

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics(runner: PipelineRunner = Depends(get_runner)):
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format for scraping.
    Includes:
    - Processed, retried and failed counts per channel
    - Queue depth and worker state per channel
    - Dead letter queue size

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    output = await runner.export_metrics()

    return Response(
        content=output,
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get("/metrics/pipeline")
async def pipeline_metrics(runner: PipelineRunner = Depends(get_runner)):
    """
    Get pipeline counters as JSON.

    Returns:
        processed, retried, failed and dead letter counts
    """
    snapshot = await runner.snapshot()
    return {
        "status": "ok",
        "metrics": snapshot.metrics.model_dump()
    }
