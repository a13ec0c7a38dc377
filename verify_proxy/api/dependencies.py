"""FastAPI dependencies."""

from fastapi import Request

from verify_proxy.config.settings import Settings
from verify_proxy.services.batch.orchestrator import BatchOrchestrator
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue
from verify_proxy.services.shutdown.coordinator import ShutdownCoordinator


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_queue(request: Request) -> RateLimitedQueue:
    return request.app.state.queue


def get_orchestrator(request: Request) -> BatchOrchestrator:
    return request.app.state.orchestrator


def get_shutdown_coordinator(request: Request) -> ShutdownCoordinator:
    return request.app.state.shutdown
