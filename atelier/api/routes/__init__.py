"""API route registration."""

from fastapi import APIRouter, FastAPI

from atelier.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from atelier.api.routes.messages import router as messages_router

    router.include_router(messages_router, tags=["Messages"])
    return router


def register_routes(app: FastAPI, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics_enabled: Whether to expose the Prometheus endpoint
    """
    app.include_router(create_v1_router())

    from atelier.api.routes.health import metrics_router
    from atelier.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])

    logger.info("routes_registered")
