"""
Health and Readiness Endpoints

Kubernetes-compatible health probes for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "0.1.0"


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": "delivery-pipeline-sim",
        "version": API_VERSION
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe - checks the pipeline runner is ticking.

    Returns 200 if ready, 503 if not ready.
    """
    runner = getattr(request.app.state, "runner", None)
    if runner is None or not runner.running:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "reason": "Pipeline runner not running"
            }
        )

    return {
        "status": "ready",
        "channels": [c.value for c in runner.engine.channels]
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Delivery Pipeline Simulator API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "metrics": "/metrics",
            "enqueue": "/messages (POST)",
            "load_test": "/load-test (POST)",
            "reset": "/reset (POST)",
            "snapshot": "/snapshot",
            "snapshot_stream": "/snapshot/stream"
        }
    }
