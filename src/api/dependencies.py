"""
FastAPI Dependencies

Reusable dependencies for accessing the running pipeline.
"""

from fastapi import Request, HTTPException, status
from loguru import logger

from src.core.runner import PipelineRunner


def get_runner(request: Request) -> PipelineRunner:
    """
    Dependency returning the pipeline runner created at startup.

    Raises:
        HTTPException: 503 if the runner is not initialized
    """
    runner = getattr(request.app.state, "runner", None)
    if runner is None:
        logger.error("❌ Pipeline runner requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pipeline not initialized"
        )
    return runner
