"""Health and liveness endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from verify_proxy.api.dependencies import get_app_settings, get_queue, get_shutdown_coordinator
from verify_proxy.api.models import HealthResponse, ServiceInfoResponse
from verify_proxy.config.constants import HealthStatus, ShutdownState
from verify_proxy.config.settings import Settings
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue
from verify_proxy.services.shutdown.coordinator import ShutdownCoordinator

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthResponse)
async def health(
    queue: RateLimitedQueue = Depends(get_queue),  # noqa: B008
    coordinator: ShutdownCoordinator = Depends(get_shutdown_coordinator),  # noqa: B008
) -> HealthResponse:
    """Report queue depth and worker activity so operators can spot buildup."""
    status = HealthStatus.SHUTTING_DOWN if coordinator.is_shutting_down else HealthStatus.HEALTHY
    return HealthResponse(
        status=status.value,
        queue_length=queue.length,
        is_processing=queue.is_processing,
        timestamp=_now(),
    )


@router.get("/", response_model=ServiceInfoResponse)
async def service_info(
    settings: Settings = Depends(get_app_settings),  # noqa: B008
    coordinator: ShutdownCoordinator = Depends(get_shutdown_coordinator),  # noqa: B008
) -> ServiceInfoResponse:
    """Liveness check with queue status."""
    status = "running" if coordinator.state is ShutdownState.RUNNING else HealthStatus.SHUTTING_DOWN.value
    return ServiceInfoResponse(
        service=settings.app_name,
        version=settings.app_version,
        status=status,
        timestamp=_now(),
    )
