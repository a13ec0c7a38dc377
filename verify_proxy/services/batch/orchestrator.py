"""Batch verification: sub-batching, submission and aggregation."""

import asyncio
import logging
from collections.abc import Sequence

from verify_proxy.config.constants import SHUTTING_DOWN_MESSAGE
from verify_proxy.config.settings import Settings
from verify_proxy.infrastructure.logging.logger import StructuredLogger
from verify_proxy.services.errors import BatchValidationError, ShutdownRejectedError
from verify_proxy.services.queue.rate_limited_queue import RateLimitedQueue
from verify_proxy.services.verification.models import BatchReport, VerificationResult
from verify_proxy.utils.timing import timed_operation

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Verifies a list of emails through the rate-limited queue."""

    def __init__(
        self,
        queue: RateLimitedQueue,
        batch_size: int = 50,
        max_batch_emails: int = 1000,
    ):
        """
        Initialize the orchestrator.

        Args:
            queue: Queue every email is submitted through
            batch_size: Maximum number of emails submitted concurrently
            max_batch_emails: Maximum number of emails accepted per call
        """
        self.queue = queue
        self.batch_size = batch_size
        self.max_batch_emails = max_batch_emails
        self._events = StructuredLogger(__name__)

    @classmethod
    def from_settings(cls, queue: RateLimitedQueue, settings: Settings) -> "BatchOrchestrator":
        return cls(
            queue,
            batch_size=settings.batch_size,
            max_batch_emails=settings.max_batch_emails,
        )

    def validate(self, emails: Sequence[str]) -> None:
        """
        Check the batch bounds.

        Raises:
            BatchValidationError: If the batch is empty or too large
        """
        if not emails:
            raise BatchValidationError("emails array is empty")
        if len(emails) > self.max_batch_emails:
            raise BatchValidationError(
                f"emails array exceeds maximum of {self.max_batch_emails}"
            )

    async def verify_batch(self, emails: Sequence[str], key: str) -> BatchReport:
        """
        Verify every email and aggregate the outcomes in input order.

        Sub-batches are processed one after another. Per-email failures are
        recorded in that email's result and never fail the whole call. If the
        queue starts draining, the remaining sub-batches are marked failed
        without being submitted.

        Args:
            emails: Emails to verify
            key: API key forwarded to the upstream service

        Returns:
            BatchReport with one result per input email

        Raises:
            BatchValidationError: If the batch is empty or too large
        """
        self.validate(emails)
        report = BatchReport()

        async with timed_operation("batch_completed", self._events) as timer:
            total_chunks = (len(emails) + self.batch_size - 1) // self.batch_size
            for index, offset in enumerate(range(0, len(emails), self.batch_size)):
                if self.queue.is_draining:
                    skipped = emails[offset:]
                    logger.warning(
                        "Shutdown requested, skipping %d email(s) in %d remaining sub-batch(es)",
                        len(skipped),
                        total_chunks - index,
                    )
                    report.results.extend(
                        VerificationResult.failure(email, SHUTTING_DOWN_MESSAGE) for email in skipped
                    )
                    break

                chunk = emails[offset : offset + self.batch_size]
                logger.info(
                    "Processing sub-batch %d/%d (%d emails)", index + 1, total_chunks, len(chunk)
                )
                report.results.extend(await self._process_sub_batch(chunk, key))

            timer.stop()
            report.processing_time_ms = timer.elapsed_ms
            timer.set_state(
                total=report.total,
                successful=report.successful,
                failed=report.failed,
            )

        return report

    async def _process_sub_batch(self, chunk: Sequence[str], key: str) -> list[VerificationResult]:
        # Every email enters the queue before any result is awaited.
        pending: list[asyncio.Future[VerificationResult] | VerificationResult] = []
        for email in chunk:
            try:
                pending.append(self.queue.submit(email, key))
            except ShutdownRejectedError as e:
                pending.append(VerificationResult.failure(email, str(e)))

        futures = [p for p in pending if isinstance(p, asyncio.Future)]
        outcomes = iter(await asyncio.gather(*futures, return_exceptions=True))

        results: list[VerificationResult] = []
        for email, item in zip(chunk, pending):
            if isinstance(item, VerificationResult):
                results.append(item)
                continue
            outcome = next(outcomes)
            if isinstance(outcome, BaseException):
                logger.error("Verification failed for %s: %s", email, outcome)
                results.append(VerificationResult.failure(email, str(outcome) or type(outcome).__name__))
            else:
                results.append(outcome)
        return results
