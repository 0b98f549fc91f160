import asyncio
import time

import aiohttp
import pytest

from gql_pager.errors import TransportError
from gql_pager.transport import AsyncTransport


class FakeResponse:
    def __init__(self, status, text="", headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps(monkeypatch):
    calls = []

    async def fake_sleep(seconds):
        calls.append(seconds)

    monkeypatch.setattr("gql_pager.transport.asyncio.sleep", fake_sleep)
    return calls


def make_transport(outcomes):
    transport = AsyncTransport()
    transport.session = FakeSession(outcomes)
    return transport


def test_issue_returns_status_and_raw_body(sleeps):
    transport = make_transport([FakeResponse(200, '{"data": {}}', {"X-RateLimit-Remaining": "4999"})])
    status, body = asyncio.run(transport.issue("https://x.test/graphql", "POST", {"A": "b"}, {"query": "q"}))
    assert (status, body) == (200, '{"data": {}}')
    method, url, kwargs = transport.session.requests[0]
    assert method == "POST"
    assert kwargs["json"] == {"query": "q"}
    assert kwargs["headers"] == {"A": "b"}
    assert transport.remaining_quota == 4999
    assert "4999" in transport.quota_info()
    assert sleeps == []


def test_server_errors_are_retried_with_backoff(sleeps):
    transport = make_transport([FakeResponse(502), FakeResponse(503), FakeResponse(200, "ok")])
    status, body = asyncio.run(transport.issue("u", "POST", {}, {}))
    assert (status, body) == (200, "ok")
    assert sleeps == [1, 2]


def test_last_server_error_is_returned_to_caller(sleeps):
    transport = make_transport([FakeResponse(500), FakeResponse(500), FakeResponse(500, "down")])
    assert asyncio.run(transport.issue("u", "POST", {}, {})) == (500, "down")


def test_rate_limit_waits_until_reset(sleeps):
    reset = str(int(time.time()) + 10)
    limited = FakeResponse(403, "", {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": reset})
    transport = make_transport([limited, FakeResponse(200, "ok", {"X-RateLimit-Remaining": "5000"})])
    assert asyncio.run(transport.issue("u", "POST", {}, {})) == (200, "ok")
    assert len(sleeps) == 1
    assert 1 < sleeps[0] <= 12


def test_rate_limit_far_in_future_raises(sleeps):
    reset = str(int(time.time()) + 3600)
    limited = FakeResponse(429, "", {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": reset})
    transport = make_transport([limited])
    with pytest.raises(TransportError) as e:
        asyncio.run(transport.issue("u", "POST", {}, {}))
    assert e.value.status == 429
    assert sleeps == []


def test_connection_errors_exhaust_into_transport_error(sleeps):
    failures = [aiohttp.ClientConnectionError("refused") for _ in range(3)]
    transport = make_transport(failures)
    with pytest.raises(TransportError) as e:
        asyncio.run(transport.issue("u", "POST", {}, {}))
    assert "Connection error" in str(e.value)
    assert sleeps == [1, 1]


def test_timeouts_exhaust_into_transport_error(sleeps):
    transport = make_transport([asyncio.TimeoutError(), asyncio.TimeoutError(), asyncio.TimeoutError()])
    with pytest.raises(TransportError):
        asyncio.run(transport.issue("u", "POST", {}, {}))


def test_issue_requires_open_session():
    with pytest.raises(TransportError):
        asyncio.run(AsyncTransport().issue("u", "POST", {}, {}))
