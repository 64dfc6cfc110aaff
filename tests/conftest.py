"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import json
import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL") or "sqlite://"
os.environ["OPENROUTER_API_KEY"] = "sk-or-test-key"
os.environ["LOG_DIR"] = os.environ.get("LOG_DIR") or "logs"

from app.logging_config import configure_logging

configure_logging()

from app.main import app
from app.models.schemas import ActivityStats
from app.services.openrouter_client import OpenRouterClient
from fakes import TEST_API_KEY, RecordingSleep, completion


@pytest.fixture(scope="session")
def test_client() -> TestClient:
    """Provide a FastAPI test client."""

    return TestClient(app)


@pytest.fixture
def make_stats() -> Callable[..., ActivityStats]:
    """Build ``ActivityStats`` for a mid-month snapshot, overriding any field."""

    def _make(**overrides: Any) -> ActivityStats:
        values: dict[str, Any] = {
            "total_activities": 6,
            "run_count": 3,
            "walk_count": 2,
            "mixed_count": 1,
            "total_distance_meters": 42_500.0,
            "total_duration_seconds": 19_800,
            "month": 3,
            "year": 2025,
            "days_elapsed": 15,
            "days_remaining": 16,
            "total_days_in_month": 31,
            "distance_unit": "km",
        }
        values.update(overrides)
        return ActivityStats(**values)

    return _make


@pytest.fixture
def good_completion() -> dict[str, Any]:
    return completion(
        json.dumps({"message": "Six sessions in and half the month to go - keep stacking them!", "tone": "encouraging"})
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_client(recording_sleep: RecordingSleep) -> Callable[..., OpenRouterClient]:
    """Build an ``OpenRouterClient`` whose HTTP traffic goes to ``handler``."""

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> OpenRouterClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        kwargs.setdefault("sleep", recording_sleep)
        return OpenRouterClient(TEST_API_KEY, http_client=http_client, **kwargs)

    return _make
