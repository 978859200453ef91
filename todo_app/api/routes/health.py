"""Health check and metrics endpoints."""

from typing import Literal

from fastapi import APIRouter, Response

from todo_app import __version__
from todo_app.api.dependencies import (
    MetricsRegistryDep,
    SettingsDep,
    TodosServiceDep,
)
from todo_app.api.models.health import ComponentHealth, HealthResponse
from todo_app.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: SettingsDep,
    todos_service: TodosServiceDep,
) -> HealthResponse:
    """Report service health and the status of each observability component.

    Disabled tracing or metrics exposure is reported as degraded rather
    than unhealthy: requests are still served.
    """
    logger.debug("health_check_request")

    observability = settings.observability
    components = [
        ComponentHealth(name="todo_store", status="healthy"),
        ComponentHealth(
            name="metrics",
            status="healthy" if observability.metrics.enabled else "degraded",
            message=None if observability.metrics.enabled else "Metrics endpoint is disabled",
        ),
        ComponentHealth(
            name="tracing",
            status="healthy" if observability.tracing.enabled else "degraded",
            message=None if observability.tracing.enabled else "Tracing is disabled",
        ),
    ]

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        environment=settings.environment,
        todo_count=len(todos_service),
        components=components,
    )


def create_metrics_router(path: str = "/metrics") -> APIRouter:
    """Build the router serving Prometheus metrics at ``path``."""
    metrics_router = APIRouter()

    @metrics_router.get(path)
    async def get_metrics(metrics: MetricsRegistryDep) -> Response:
        """Prometheus metrics in text exposition format."""
        logger.debug("metrics_request")
        return Response(content=metrics.render(), media_type=metrics.content_type)

    return metrics_router
