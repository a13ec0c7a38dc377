"""Graceful shutdown: stop admissions, drain the queue, then stop."""

import asyncio
import logging
import time

from verify_proxy.config.constants import ShutdownState
from verify_proxy.config.settings import Settings
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """
    Moves the service through RUNNING -> DRAINING -> STOPPED.

    Jobs admitted before draining begins are never abandoned: the coordinator
    waits for the queue to empty and its worker to go idle before stopping it.
    """

    def __init__(
        self,
        queue: RateLimitedQueue,
        poll_interval: float = 0.1,
        timeout: float | None = None,
    ):
        """
        Initialize the coordinator.

        Args:
            queue: Queue to drain
            poll_interval: Seconds between queue checks while draining
            timeout: Optional upper bound in seconds on the drain wait
        """
        self.queue = queue
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._state = ShutdownState.RUNNING

    @classmethod
    def from_settings(cls, queue: RateLimitedQueue, settings: Settings) -> "ShutdownCoordinator":
        return cls(
            queue,
            poll_interval=settings.shutdown_poll_interval_seconds,
            timeout=settings.shutdown_timeout_s,
        )

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def is_shutting_down(self) -> bool:
        return self._state is not ShutdownState.RUNNING

    def begin_draining(self) -> None:
        """Refuse new work. Safe to call from a signal handler and more than once."""
        if self._state is not ShutdownState.RUNNING:
            return
        self._state = ShutdownState.DRAINING
        self.queue.begin_draining()
        logger.info(
            "Shutdown requested, draining %d queued job(s) (worker active: %s)",
            self.queue.length,
            self.queue.is_processing,
        )

    async def wait_until_drained(self) -> bool:
        """
        Poll until no job is queued or in flight.

        Returns:
            True if the queue drained, False if the timeout expired first
        """
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        while self.queue.length > 0 or self.queue.is_processing:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval)
        return True

    async def shutdown(self) -> None:
        """Drain the queue and stop it."""
        if self._state is ShutdownState.STOPPED:
            return
        self.begin_draining()
        started = time.perf_counter()
        drained = await self.wait_until_drained()
        if not drained:
            logger.warning(
                "Drain timeout of %.1fs expired with %d job(s) still queued",
                self.timeout,
                self.queue.length,
            )
        await self.queue.close()
        self._state = ShutdownState.STOPPED
        logger.info("Queue drained in %.0fms, shutdown complete", (time.perf_counter() - started) * 1000)
