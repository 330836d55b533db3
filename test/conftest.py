import json

import httpx
import pytest

from api_client import ResilientClient
from config import AppConfig
from domain import Shift

API_URL = "https://script.google.com/macros/s/test-deployment/exec"


def envelope(status="success", **extra) -> httpx.Response:
    return httpx.Response(200, text=json.dumps({"status": status, **extra}))


@pytest.fixture
def config():
    return AppConfig(api_url=API_URL)


@pytest.fixture
def make_client():
    """Builds a ResilientClient over a MockTransport, recording every request."""
    clients = []

    def _make(handler, max_attempts=3):
        seen = []

        def _record(request):
            seen.append(request)
            return handler(request)

        http = httpx.Client(transport=httpx.MockTransport(_record))
        client = ResilientClient(http, max_attempts=max_attempts, sleep=lambda _s: None, jitter=lambda: 0.0)
        clients.append(http)
        return client, seen

    yield _make
    for http in clients:
        http.close()


@pytest.fixture
def shift_factory():
    def _make(**overrides):
        values = dict(
            id="s1",
            date="2024-03-05",
            display_date="05/03/2024",
            agency="Locum Agency 1",
            location="City Hospital",
            hours=8.0,
            rate=50.0,
            day_salary=400.0,
        )
        values.update(overrides)
        return Shift(**values)

    return _make
