"""Pytest configuration and fixtures."""

import asyncio
import json
import time

import pytest

from verify_proxy.config.settings import Settings
from verify_proxy.services.verification.models import VerificationResult


class FakeVerifier:
    """In-memory stand-in for the upstream verifier that records its calls."""

    def __init__(
        self,
        delay: float = 0.0,
        failures: dict[str, str] | None = None,
        raises: set[str] | None = None,
    ):
        self.delay = delay
        self.failures = failures or {}
        self.raises = raises or set()
        self.calls: list[str] = []
        self.call_times: list[float] = []
        self.active = 0
        self.max_active = 0

    async def verify(self, email: str, key: str) -> VerificationResult:
        self.calls.append(email)
        self.call_times.append(time.monotonic())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if email in self.raises:
                raise RuntimeError(f"verifier exploded on {email}")
            if email in self.failures:
                return VerificationResult.failure(email, self.failures[email])
            body = json.dumps({"email": email, "valid": True})
            return VerificationResult.ok(email, data=body, status=200, content_type="application/json")
        finally:
            self.active -= 1


@pytest.fixture
def settings():
    """Provide settings fixture."""
    return Settings(rate_limit_delay_ms=0, shutdown_poll_interval_ms=5)


@pytest.fixture
def fake_verifier():
    return FakeVerifier()


@pytest.fixture
def make_verifier():
    """Factory for verifiers with custom delay/failure behaviour."""
    return FakeVerifier
