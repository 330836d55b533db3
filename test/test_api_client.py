"""Tests for the retrying HTTP client."""

import httpx
import pytest

from api_client import ResilientClient
from errors import TransportError

URL = "https://example.test/exec"


def _flaky(failures, failure=None):
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] <= failures:
            if failure is not None:
                raise failure
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json={"status": "success"})

    return handler


def test_fails_twice_then_succeeds(make_client):
    client, seen = make_client(_flaky(2), max_attempts=3)
    response = client.request("GET", URL)
    assert response.status_code == 200
    assert len(seen) == 3


def test_always_failing_raises_after_max_attempts(make_client):
    client, seen = make_client(lambda request: httpx.Response(500), max_attempts=3)
    with pytest.raises(TransportError) as excinfo:
        client.request("GET", URL, params={"action": "getShifts"})
    assert len(seen) == 3
    err = excinfo.value
    assert err.attempts == 3
    assert err.method == "GET"
    assert "getShifts" in err.endpoint
    assert "500" in str(err)


def test_per_call_max_attempts_overrides_default(make_client):
    client, seen = make_client(lambda request: httpx.Response(502), max_attempts=3)
    with pytest.raises(TransportError):
        client.request("POST", URL, max_attempts=5)
    assert len(seen) == 5


def test_connection_errors_are_retried(make_client):
    client, seen = make_client(_flaky(1, failure=httpx.ConnectError("refused")), max_attempts=2)
    assert client.request("GET", URL).status_code == 200
    assert len(seen) == 2


def test_backoff_delays_follow_powers_of_two_plus_jitter():
    delays = []
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    client = ResilientClient(http, max_attempts=4, sleep=delays.append, jitter=lambda: 0.25)
    with pytest.raises(TransportError):
        client.request("GET", URL)
    # no sleep after the last attempt
    assert delays == [1.25, 2.25, 4.25]
    http.close()


def test_success_on_first_attempt_does_not_sleep():
    delays = []
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    client = ResilientClient(http, sleep=delays.append)
    client.request("GET", URL)
    assert delays == []
    http.close()


def test_invalid_max_attempts():
    with pytest.raises(ValueError):
        ResilientClient(httpx.Client(), max_attempts=0)


def test_request_body_and_headers_are_forwarded(make_client):
    client, seen = make_client(lambda request: httpx.Response(200))
    client.request("POST", URL, content='{"id": "1"}', headers={"Content-Type": "text/plain"})
    assert seen[0].content == b'{"id": "1"}'
    assert seen[0].headers["content-type"] == "text/plain"
