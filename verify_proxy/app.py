"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from verify_proxy.api.errors import register_exception_handlers
from verify_proxy.api.middleware import log_middleware
from verify_proxy.api.routers import api_router
from verify_proxy.config.settings import Settings, get_settings
from verify_proxy.infrastructure.logging.logger import setup_logging
from verify_proxy.infrastructure.upstream.client import UpstreamVerifier
from verify_proxy.services.batch.orchestrator import BatchOrchestrator
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue, Verifier
from verify_proxy.services.shutdown.coordinator import ShutdownCoordinator

logger = logging.getLogger(__name__)


def _validate_startup_config(settings: Settings) -> None:
    """Validate configuration at startup."""
    if settings.max_concurrent_requests > 1:
        logger.warning(
            "max_concurrent_requests=%d is reserved; the queue is drained by a single worker",
            settings.max_concurrent_requests,
        )
    if not settings.upstream_url.startswith(("http://", "https://")):
        logger.warning("upstream_url %r is not an http(s) URL", settings.upstream_url)


def create_app(settings: Settings | None = None, verifier: Verifier | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
        verifier: Optional verifier replacing the upstream HTTP client.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup and shutdown lifecycle."""
        logger.info("Starting %s %s", settings.app_name, settings.app_version)
        _validate_startup_config(settings)

        upstream = UpstreamVerifier(settings) if verifier is None else None
        queue = RateLimitedQueue(
            verifier if verifier is not None else upstream,
            rate_limit_delay=settings.rate_limit_delay_seconds,
        )
        app.state.settings = settings
        app.state.queue = queue
        app.state.orchestrator = BatchOrchestrator.from_settings(queue, settings)
        app.state.shutdown = ShutdownCoordinator.from_settings(queue, settings)

        yield

        logger.info("Shutting down %s", settings.app_name)
        try:
            await app.state.shutdown.shutdown()
        finally:
            if upstream is not None:
                await upstream.close()
                logger.info("Upstream HTTP client closed")

    app = FastAPI(
        title="Email Verification Proxy",
        description="Rate-limited, batching proxy for an email verification API",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    app.middleware("http")(log_middleware)

    register_exception_handlers(app)

    app.include_router(api_router)
    return app


settings = get_settings()

setup_logging(
    level=settings.log_level,
    json_output=not settings.debug,
    silence_noisy_loggers=True,
)

app = create_app(settings)
