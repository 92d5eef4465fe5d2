"""
FastAPI Application

Main entry point for the delivery pipeline simulator API.
Handles application lifecycle and router mounting.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loguru import logger

from src.config import get_settings
from src.core.engine import DeliveryEngine
from src.core.runner import PipelineRunner
from src.utils.observability import configure_logging
from src.api.routes import health_router, commands_router, snapshot_router, metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Configure logging
    - Build the delivery engine from settings
    - Start the real-time pipeline runner

    Shutdown:
    - Stop the runner; in-flight messages return to their queues
    """
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting delivery pipeline API server...")

    engine = DeliveryEngine(settings)
    runner = PipelineRunner(engine)
    app.state.runner = runner

    await runner.start()
    logger.info("API server ready to accept commands")

    yield

    logger.info("Shutting down API server...")
    await runner.stop()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Delivery Pipeline Simulator API",
    description="Multi-channel queue, retry and dead letter simulation",
    version="0.1.0",
    lifespan=lifespan
)

# Mount routers
app.include_router(health_router)
app.include_router(commands_router)
app.include_router(snapshot_router)
app.include_router(metrics_router)
