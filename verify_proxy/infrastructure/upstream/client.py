"""
Client for the upstream email verification API.
"""

import asyncio
import logging

import httpx

from verify_proxy.config.constants import TIMEOUT_MESSAGE
from verify_proxy.config.settings import Settings
from verify_proxy.services.verification.models import VerificationResult

logger = logging.getLogger(__name__)


class UpstreamVerifier:
    """Performs one deadline-bounded verification call per invocation."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the verifier.

        Args:
            settings: Application settings (upstream URL, user agent, timeout)
            client: Optional shared HTTP client. When omitted the verifier creates
                one and closes it in `close()`.
        """
        self.url = settings.upstream_url
        self.timeout = settings.timeout_seconds
        self._owns_client = client is None
        # Deadline is enforced per call in verify(), not by the client.
        self._client = client or httpx.AsyncClient(timeout=None)
        self._headers = {"User-Agent": settings.user_agent}

    async def verify(self, email: str, key: str) -> VerificationResult:
        """
        Verify one email address. Never raises.

        Any upstream response counts as success, regardless of status code;
        only transport failures and deadline expiry produce failed results.
        """
        try:
            response = await asyncio.wait_for(self._fetch(email, key), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Upstream verification timed out after %.1fs for %s", self.timeout, email)
            return VerificationResult.failure(email, TIMEOUT_MESSAGE, is_timeout=True)
        except (httpx.HTTPError, OSError) as e:
            logger.error("Upstream verification failed for %s: %s", email, e)
            return VerificationResult.failure(email, str(e) or type(e).__name__)

        return VerificationResult.ok(
            email,
            data=response.text,
            status=response.status_code,
            content_type=response.headers.get("content-type"),
        )

    async def _fetch(self, email: str, key: str) -> httpx.Response:
        return await self._client.get(
            self.url,
            params={"email": email, "key": key},
            headers=self._headers,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
