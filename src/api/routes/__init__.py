"""
API Routes

Modular route definitions for the delivery pipeline API.
"""
from src.api.routes.health import router as health_router
from src.api.routes.commands import router as commands_router
from src.api.routes.snapshot import router as snapshot_router
from src.api.routes.metrics import router as metrics_router

__all__ = [
    "health_router",
    "commands_router",
    "snapshot_router",
    "metrics_router",
]
