"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from src.usage_tracker.client import UsageClient
from src.usage_tracker.models import UsageSnapshot
from tests.helpers import FakeClock, make_snapshot


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def snapshot() -> UsageSnapshot:
    return make_snapshot()


@pytest.fixture
def usage_payload() -> dict[str, Any]:
    return {
        "five_hour": {"utilization": 42.0, "resets_at": "2026-10-18T15:00:00Z"},
        "seven_day": {"utilization": 12.5, "resets_at": "2026-10-22T00:00:00Z"},
        "seven_day_opus": None,
    }


@pytest.fixture
def make_client() -> Callable[..., UsageClient]:
    """Build a UsageClient backed by an httpx.MockTransport handler."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        token: str | None = "test-token",
    ) -> UsageClient:
        return UsageClient(
            token_provider=lambda: token,
            url="https://usage.test/api/oauth/usage",
            timeout=1.0,
            transport=httpx.MockTransport(handler),
        )

    return _make
