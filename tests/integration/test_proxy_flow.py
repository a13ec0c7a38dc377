"""End-to-end tests: HTTP endpoints -> queue -> upstream client (mocked transport)."""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from verify_proxy.app import create_app
from verify_proxy.config.constants import TIMEOUT_MESSAGE
from verify_proxy.config.settings import Settings
from verify_proxy.infrastructure.upstream.client import UpstreamVerifier


class FakeUpstream:
    """Mock verification API recording every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        email = request.url.params["email"]
        if email.startswith("down@"):
            raise httpx.ConnectError("upstream unreachable", request=request)
        if email.startswith("slow@"):
            await asyncio.sleep(5)
        if request.url.params["key"] != "good-key":
            return httpx.Response(401, json={"error": "invalid key"})
        return httpx.Response(200, json={"Email": email, "Valid": True, "Status": "Valid"})


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(upstream):
    settings = Settings(
        upstream_url="https://verify.test/verify",
        user_agent="proxy-integration/1.0",
        timeout_ms=100,
        rate_limit_delay_ms=1,
        batch_size=3,
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    verifier = UpstreamVerifier(settings, client=http_client)
    with TestClient(create_app(settings, verifier=verifier)) as client:
        yield client


def test_single_verification_round_trip(client, upstream):
    response = client.get("/verify", params={"email": "jane@example.com", "key": "good-key"})

    assert response.status_code == 200
    assert response.json()["Valid"] is True
    sent = upstream.requests[0]
    assert sent.url.host == "verify.test"
    assert sent.headers["User-Agent"] == "proxy-integration/1.0"


def test_upstream_error_status_is_passed_through(client):
    response = client.get("/verify", params={"email": "jane@example.com", "key": "wrong"})
    assert response.status_code == 200
    assert response.json() == {"error": "invalid key"}


def test_upstream_timeout_surfaces_as_500(client):
    response = client.get("/verify", params={"email": "slow@example.com", "key": "good-key"})
    assert response.status_code == 500
    assert response.json() == {"error": TIMEOUT_MESSAGE}


def test_batch_with_partial_failures(client, upstream):
    emails = [
        "a@example.com",
        "down@example.com",
        "b@example.com",
        "slow@example.com",
        "c@example.com",
        "d@example.com",
        "e@example.com",
    ]
    response = client.post("/verify/batch", json={"emails": emails, "key": "good-key"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 7
    assert body["successful"] == 5
    assert body["failed"] == 2
    assert [r["email"] for r in body["results"]] == emails

    down, slow = body["results"][1], body["results"][3]
    assert down["success"] is False
    assert down["isTimeout"] is False
    assert slow["success"] is False
    assert slow["isTimeout"] is True
    assert slow["error"] == TIMEOUT_MESSAGE

    # Upstream saw every email exactly once, in order.
    assert [r.url.params["email"] for r in upstream.requests] == emails
