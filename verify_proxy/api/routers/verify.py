"""Single and batch verification endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from verify_proxy.api.dependencies import (
    get_orchestrator,
    get_queue,
    get_shutdown_coordinator,
)
from verify_proxy.api.errors import error_response
from verify_proxy.api.models import BatchReportResponse, BatchVerifyRequest, ErrorResponse
from verify_proxy.config.constants import MISSING_PARAMS_MESSAGE
from verify_proxy.services.batch.orchestrator import BatchOrchestrator
from verify_proxy.services.errors import ShutdownRejectedError
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue
from verify_proxy.services.shutdown.coordinator import ShutdownCoordinator

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get("/verify", responses=_ERROR_RESPONSES)
async def verify(
    email: str | None = None,
    key: str | None = None,
    queue: RateLimitedQueue = Depends(get_queue),  # noqa: B008
    coordinator: ShutdownCoordinator = Depends(get_shutdown_coordinator),  # noqa: B008
) -> Response:
    """
    Verify a single email address.

    The request waits its turn in the rate-limited queue. The upstream body
    is passed through unchanged with a 200, whatever the upstream status was.
    """
    if not email or not key:
        raise HTTPException(status_code=400, detail=MISSING_PARAMS_MESSAGE)
    if coordinator.is_shutting_down:
        raise ShutdownRejectedError()

    result = await queue.verify(email, key)
    if not result.success:
        return error_response(500, result.error or "Verification failed")

    return Response(
        content=result.data,
        status_code=200,
        media_type=result.content_type or "application/json",
    )


@router.post(
    "/verify/batch",
    response_model=BatchReportResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def verify_batch(
    request: BatchVerifyRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),  # noqa: B008
    coordinator: ShutdownCoordinator = Depends(get_shutdown_coordinator),  # noqa: B008
) -> dict[str, Any]:
    """
    Verify up to 1000 emails.

    Emails are processed in sub-batches through the same queue as single
    requests. Individual failures are reported per email; the call itself
    only fails for malformed input or shutdown.
    """
    if coordinator.is_shutting_down:
        raise ShutdownRejectedError()

    logger.info("Batch verification requested for %d email(s)", len(request.emails))
    report = await orchestrator.verify_batch(request.emails, request.key)
    return report.to_dict()
