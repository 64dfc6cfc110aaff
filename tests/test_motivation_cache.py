"""Tests for the in-memory motivation cache."""
from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from app.models.schemas import MotivationalMessage
from app.services.motivation_cache import InMemoryMotivationCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryMotivationCache:
    return InMemoryMotivationCache(ttl_ms=15 * 60 * 1000, clock=clock)


@pytest.fixture
def message() -> MotivationalMessage:
    return MotivationalMessage(
        message="Keep it up!",
        tone="encouraging",
        generated_at=datetime(2025, 3, 15, 8, 0, tzinfo=timezone.utc),
        model="meta-llama/llama-3.3-70b-instruct",
    )


def test_round_trip_marks_message_cached(cache, make_stats, message):
    stats = make_stats()
    cache.set("user-1", stats, message)

    hit = cache.get("user-1", stats)
    assert hit is not None
    assert hit.cached is True
    assert hit.message == message.message
    assert hit.tone == message.tone
    assert hit.model == message.model
    assert hit.generated_at == message.generated_at


def test_stored_message_is_not_mutated(cache, make_stats, message):
    cache.set("user-1", make_stats(), message)
    cache.get("user-1", make_stats())
    assert message.cached is False


def test_miss_for_unknown_key(cache, make_stats):
    assert cache.get("user-1", make_stats()) is None


def test_expires_after_ttl(cache, clock, make_stats, message):
    stats = make_stats()
    cache.set("user-1", stats, message)

    clock.advance(15 * 60)
    assert cache.get("user-1", stats) is not None

    clock.advance(1)
    assert cache.get("user-1", stats) is None
    assert len(cache) == 0


@pytest.mark.parametrize(
    "changes",
    [
        {"total_activities": 7, "run_count": 4},
        {"total_distance_meters": 43_000.0},
    ],
)
def test_stats_drift_evicts_within_ttl(cache, make_stats, message, changes):
    cache.set("user-1", make_stats(), message)

    assert cache.get("user-1", make_stats(**changes)) is None
    # evicted, so even the original stats miss now
    assert cache.get("user-1", make_stats()) is None


def test_duration_only_edit_keeps_cache(cache, make_stats, message):
    cache.set("user-1", make_stats(), message)
    hit = cache.get("user-1", make_stats(total_duration_seconds=32_400))
    assert hit is not None


def test_keys_are_per_user_and_month(cache, make_stats, message):
    cache.set("user-1", make_stats(month=3), message)

    assert cache.get("user-2", make_stats(month=3)) is None
    assert cache.get("user-1", make_stats(month=4)) is None
    assert cache.get("user-1", make_stats(month=3, year=2024)) is None


def test_set_overwrites_existing_entry(cache, make_stats, message):
    stats = make_stats()
    cache.set("user-1", stats, message)
    newer = message.model_copy(update={"message": "Even better!"})
    cache.set("user-1", stats, newer)

    assert cache.get("user-1", stats).message == "Even better!"
    assert len(cache) == 1


def test_invalidate_all_only_touches_one_user(cache, make_stats, message):
    cache.set("user-1", make_stats(month=2), message)
    cache.set("user-1", make_stats(month=3), message)
    cache.set("user-2", make_stats(month=3), message)

    cache.invalidate_all("user-1")

    assert cache.get("user-1", make_stats(month=2)) is None
    assert cache.get("user-1", make_stats(month=3)) is None
    assert cache.get("user-2", make_stats(month=3)) is not None


def test_clear_drops_everything(cache, make_stats, message):
    cache.set("user-1", make_stats(), message)
    cache.set("user-2", make_stats(), message)
    cache.clear()
    assert len(cache) == 0


def test_oldest_entry_evicted_when_full(clock, make_stats, message):
    cache = InMemoryMotivationCache(max_entries=2, clock=clock)
    cache.set("user-1", make_stats(), message)
    cache.set("user-2", make_stats(), message)
    cache.set("user-3", make_stats(), message)

    assert len(cache) == 2
    assert cache.get("user-1", make_stats()) is None
    assert cache.get("user-3", make_stats()) is not None


def test_concurrent_writers_to_same_key(cache, make_stats, message):
    stats = make_stats()

    def writer(idx: int) -> None:
        for _ in range(200):
            cache.set("user-1", stats, message.model_copy(update={"message": f"writer {idx}"}))
            cache.get("user-1", stats)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 1
    assert cache.get("user-1", stats).message.startswith("writer ")
