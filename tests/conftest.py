"""
Global pytest configuration and fixtures for comingsoon tests

Provides:
- A fake subscription backend on httpx.MockTransport
- A controllable clock
- Client/form/page factories wired to the fake backend
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

import httpx
import pytest

from comingsoon.countdown import LaunchTarget
from comingsoon.page import ComingSoonPage
from comingsoon.subscription import SubscriptionClient, SubscriptionForm


BASE_URL = "http://backend.test"
LAUNCH = datetime(2026, 12, 1, 20, 0, tzinfo=timezone.utc)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")


# ============================================================================
# Fake Backend
# ============================================================================

@dataclass
class FakeBackend:
    """
    Scriptable stand-in for the subscription API.

    Set ``subscribe_response`` / ``subscribers_response`` to an
    httpx.Response, or to an exception instance to simulate a transport
    failure.
    """

    subscribe_response: Any = field(
        default_factory=lambda: httpx.Response(201, json={"ok": True})
    )
    subscribers_response: Any = field(
        default_factory=lambda: httpx.Response(200, json=[])
    )
    requests: List[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/subscribe":
            outcome = self.subscribe_response
        elif request.url.path == "/api/subscribers":
            outcome = self.subscribers_response
        else:
            outcome = httpx.Response(404, json={"detail": "Not Found"})

        if isinstance(outcome, Exception):
            raise outcome
        # Fresh copy so one scripted response can answer repeated requests
        return httpx.Response(
            outcome.status_code,
            headers=outcome.headers,
            content=outcome.content,
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def posts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def posted_json(self, index: int = -1) -> dict:
        return json.loads(self.posts()[index].content)


@pytest.fixture
def backend():
    """Fake subscription backend recording every request."""
    return FakeBackend()


@pytest.fixture
def client(backend):
    """SubscriptionClient talking to the fake backend."""
    return SubscriptionClient(BASE_URL, transport=backend.transport)


@pytest.fixture
def form(client):
    """SubscriptionForm with a change counter attached."""
    changes = []
    form = SubscriptionForm(client, on_change=lambda: changes.append(form.status))
    form.changes = changes
    return form


# ============================================================================
# Clock
# ============================================================================

class FakeClock:
    """Callable returning a settable epoch-millisecond time."""

    def __init__(self, now_ms: int):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def launch_target():
    return LaunchTarget(target_time=LAUNCH, pinned=True)


@pytest.fixture
def clock(launch_target):
    """Clock set to exactly one day before launch."""
    return FakeClock(launch_target.target_ms - 86_400_000)


@pytest.fixture
def make_page(backend, launch_target, clock):
    """Factory for pages wired to the fake backend and clock."""
    def _make(
        tick_interval: float = 0.01,
        on_change: Optional[Callable[[], None]] = None,
    ) -> ComingSoonPage:
        client = SubscriptionClient(BASE_URL, transport=backend.transport)
        return ComingSoonPage(
            launch_target,
            client,
            tick_interval=tick_interval,
            clock=clock,
            on_change=on_change,
        )
    return _make
