"""Tests for the command-line message generator."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from app.models.schemas import ActivityRecord, MotivationalMessage
from app.services.errors import DataAccessError
from app.services.motivation_cache import InMemoryMotivationCache
from app.services.motivation_service import MotivationService
from scripts import generate_motivation


class StubClient:
    def __init__(self, connected: bool = True) -> None:
        self.connected = connected
        self.options = []

    async def generate(self, prompt, options=None):
        self.options.append(options)
        return MotivationalMessage(
            message="Strong start to February - keep it rolling!",
            tone="encouraging",
            generated_at=datetime(2025, 2, 10, tzinfo=timezone.utc),
            model=options.model or "default/model",
        )

    async def test_connection(self) -> bool:
        return self.connected

    async def aclose(self) -> None:
        return None


class StubRepository:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.ranges = []

    def fetch_activities(self, user_id, start, end):
        self.ranges.append((user_id, start, end))
        if self.error:
            raise self.error
        return [ActivityRecord(activity_date=datetime(2025, 2, 3, 6), activity_type="Run", duration="PT30M", distance_meters=5000)]


def test_parse_month():
    assert generate_motivation.parse_month("2025-02") == date(2025, 2, 1)
    with pytest.raises(ValueError):
        generate_motivation.parse_month("2025-13")


def test_user_id_required_without_connection_check():
    with pytest.raises(SystemExit):
        generate_motivation.parse_args([])
    assert generate_motivation.parse_args(["--check-connection"]).check_connection is True


@pytest.mark.asyncio
async def test_run_generates_for_requested_month():
    client = StubClient()
    repository = StubRepository()
    args = generate_motivation.parse_args(
        ["--user-id", "user-1", "--month", "2025-02", "--model", "other/model", "--bypass-cache"]
    )

    code = await generate_motivation.run(args, MotivationService(InMemoryMotivationCache(), client), repository)

    assert code == 0
    assert repository.ranges == [("user-1", datetime(2025, 2, 1), datetime(2025, 3, 1))]
    assert client.options[0].model == "other/model"
    assert client.options[0].bypass_cache is True


@pytest.mark.asyncio
async def test_run_rejects_bad_month():
    args = generate_motivation.parse_args(["--user-id", "user-1", "--month", "February"])

    code = await generate_motivation.run(args, MotivationService(InMemoryMotivationCache()), StubRepository())

    assert code == 2


@pytest.mark.asyncio
async def test_run_reports_data_access_failure():
    args = generate_motivation.parse_args(["--user-id", "user-1", "--month", "2025-02"])
    repository = StubRepository(error=DataAccessError("locked"))

    code = await generate_motivation.run(args, MotivationService(InMemoryMotivationCache()), repository)

    assert code == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("connected, expected", [(True, 0), (False, 1)])
async def test_connection_check(connected, expected):
    args = generate_motivation.parse_args(["--check-connection"])
    service = MotivationService(InMemoryMotivationCache(), StubClient(connected))

    assert await generate_motivation.run(args, service, StubRepository()) == expected


@pytest.mark.asyncio
async def test_connection_check_without_client_fails():
    args = generate_motivation.parse_args(["--check-connection"])

    assert await generate_motivation.run(args, MotivationService(InMemoryMotivationCache()), StubRepository()) == 1


@pytest.mark.asyncio
async def test_run_rejects_month_outside_supported_years():
    client = StubClient()
    args = generate_motivation.parse_args(["--user-id", "user-1", "--month", "1999-05"])

    code = await generate_motivation.run(args, MotivationService(InMemoryMotivationCache(), client), StubRepository())

    assert code == 2
    assert client.options == []
