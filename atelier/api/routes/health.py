"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from atelier import __version__
from atelier.api.dependencies import ComponentsDep
from atelier.api.models.health import HealthResponse
from atelier.jobs.queue import HatchetJobQueue
from atelier.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(components: ComponentsDep) -> HealthResponse:
    """Report service status.

    Degraded means memory extraction jobs are configured for Hatchet but
    the client could not be created.
    """
    queue = components.job_queue
    remote = isinstance(queue, HatchetJobQueue)
    jobs_available = remote and queue.is_available
    status = "degraded" if remote and not jobs_available else "healthy"

    logger.debug("health_check_completed", status=status)
    return HealthResponse(
        status=status,
        version=__version__,
        provider=components.provider.provider_name,
        jobs_available=jobs_available,
        timestamp=datetime.now(UTC),
    )


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
