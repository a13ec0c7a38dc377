"""Verification job, result and batch report models."""

import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying a single email against the upstream service.

    ``success`` only reflects transport-level success: any upstream response,
    whatever its status code, is a successful result carrying the raw body.
    """

    email: str
    success: bool
    data: str | None = None
    status: int | None = None
    error: str | None = None
    is_timeout: bool = False
    content_type: str | None = None

    @classmethod
    def ok(
        cls,
        email: str,
        data: str,
        status: int,
        content_type: str | None = None,
    ) -> "VerificationResult":
        return cls(email=email, success=True, data=data, status=status, content_type=content_type)

    @classmethod
    def failure(cls, email: str, error: str, is_timeout: bool = False) -> "VerificationResult":
        return cls(email=email, success=False, error=error, is_timeout=is_timeout)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation used in batch reports."""
        payload: dict[str, Any] = {"email": self.email, "success": self.success}
        if self.success:
            payload["data"] = self.data
            payload["status"] = self.status
        else:
            payload["error"] = self.error
        payload["isTimeout"] = self.is_timeout
        return payload


@dataclass
class VerificationJob:
    """A pending verification owned by the queue until it is dequeued."""

    email: str
    key: str
    future: "asyncio.Future[VerificationResult]"

    def resolve(self, result: VerificationResult) -> bool:
        """Resolve the job's future unless the caller already gave up on it."""
        if self.future.done():
            return False
        self.future.set_result(result)
        return True


@dataclass
class BatchReport:
    """Aggregated outcome of a batch verification."""

    results: list[VerificationResult] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body returned by the batch endpoint."""
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "processingTime": f"{round(self.processing_time_ms)}ms",
            "results": [r.to_dict() for r in self.results],
        }
