"""Single-worker FIFO queue that rate-limits upstream verification calls."""

import asyncio
import logging
from collections import deque
from typing import Protocol

from verify_proxy.config.constants import SHUTTING_DOWN_MESSAGE, QueueState
from verify_proxy.infrastructure.logging.logger import StructuredLogger
from verify_proxy.services.errors import ShutdownRejectedError
from verify_proxy.services.verification.models import VerificationJob, VerificationResult

logger = logging.getLogger(__name__)


class Verifier(Protocol):
    async def verify(self, email: str, key: str) -> VerificationResult: ...


class RateLimitedQueue:
    """
    FIFO queue of verification jobs drained by exactly one worker task.

    Jobs are serviced strictly one at a time in submission order, with a fixed
    delay between consecutive upstream calls. Once draining starts new
    submissions are refused, but jobs already admitted keep being serviced
    until `close()` stops the worker.
    """

    def __init__(self, verifier: Verifier, rate_limit_delay: float = 0.1):
        """
        Initialize the queue.

        Args:
            verifier: Performs the actual upstream call for each job
            rate_limit_delay: Seconds to wait between consecutive jobs
        """
        self._verifier = verifier
        self._delay = rate_limit_delay
        self._pending: deque[VerificationJob] = deque()
        self._worker_active = False
        self._worker_task: asyncio.Task[None] | None = None
        self._draining = False
        self._stopped = False
        self._events = StructuredLogger(__name__)

    @property
    def length(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._worker_active

    @property
    def is_draining(self) -> bool:
        return self._draining

    @property
    def state(self) -> QueueState:
        if self._stopped:
            return QueueState.STOPPED
        if self._draining:
            return QueueState.DRAINING
        if self._worker_active:
            return QueueState.PROCESSING
        return QueueState.IDLE

    def submit(self, email: str, key: str) -> "asyncio.Future[VerificationResult]":
        """
        Admit a job and return the future its result will be delivered to.

        Raises:
            ShutdownRejectedError: If the queue is draining or stopped
        """
        if self._draining or self._stopped:
            raise ShutdownRejectedError()

        future: asyncio.Future[VerificationResult] = asyncio.get_running_loop().create_future()
        self._pending.append(VerificationJob(email=email, key=key, future=future))
        self._ensure_worker()
        return future

    async def verify(self, email: str, key: str) -> VerificationResult:
        """Submit a single job and wait for its result."""
        return await self.submit(email, key)

    def begin_draining(self) -> None:
        """Refuse new submissions from now on. Admitted jobs are still serviced."""
        if self._draining:
            return
        self._draining = True
        self._events.log_event(
            "queue_draining",
            {"queue_length": self.length, "is_processing": self.is_processing},
        )

    async def close(self) -> None:
        """Stop the worker and fail every job that has not been serviced yet."""
        self._draining = True
        self._stopped = True
        abandoned = 0
        while self._pending:
            job = self._pending.popleft()
            if job.resolve(VerificationResult.failure(job.email, SHUTTING_DOWN_MESSAGE)):
                abandoned += 1
        if abandoned:
            logger.warning("Queue closed with %d unserviced job(s)", abandoned)

        task = self._worker_task
        if task is not None and not task.done():
            await task

    def _ensure_worker(self) -> None:
        if self._worker_active:
            return
        # Flag is set before the task exists so a second submit in the same
        # tick never spawns another loop.
        self._worker_active = True
        self._worker_task = asyncio.create_task(self._drain(), name="verification-queue-drain")

    async def _drain(self) -> None:
        processed = 0
        try:
            while self._pending and not self._stopped:
                job = self._pending.popleft()
                if job.future.cancelled():
                    logger.debug("Skipping cancelled job for %s", job.email)
                    continue

                result = await self._run_job(job)
                job.resolve(result)
                processed += 1

                if self._pending and not self._stopped and self._delay > 0:
                    await asyncio.sleep(self._delay)
        finally:
            self._worker_active = False
            logger.debug("Drain loop exited after %d job(s)", processed)

    async def _run_job(self, job: VerificationJob) -> VerificationResult:
        try:
            return await self._verifier.verify(job.email, job.key)
        except Exception as e:
            self._events.log_error("queue_job_failed", e, {"email": job.email})
            return VerificationResult.failure(job.email, str(e) or type(e).__name__)
