"""Monthly activity aggregation feeding the motivation prompt."""
from __future__ import annotations

import calendar
import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime

from app.models.schemas import ActivityRecord, ActivityStats, DistanceUnit
from app.services.durations import duration_seconds_or_zero
from app.services.errors import DataAccessError


logger = logging.getLogger(__name__)

# (user_id, start inclusive, end exclusive) -> records
ActivityFetcher = Callable[[str, datetime, datetime], Iterable[ActivityRecord]]

_TYPE_COUNTERS = {"Run": "run_count", "Walk": "walk_count", "Mixed": "mixed_count"}


def month_bounds(reference: date) -> tuple[datetime, datetime, int]:
    """Return ``(first day 00:00, first day of next month 00:00, days in month)``."""
    total_days = calendar.monthrange(reference.year, reference.month)[1]
    start = datetime(reference.year, reference.month, 1)
    if reference.month == 12:
        end = datetime(reference.year + 1, 1, 1)
    else:
        end = datetime(reference.year, reference.month + 1, 1)
    return start, end, total_days


def month_progress(reference: date, today: date | None = None) -> tuple[int, int, int]:
    """Return ``(days_elapsed, days_remaining, total_days)`` for the reference month.

    Only the current month is partially elapsed; any other month counts as
    fully elapsed.
    """
    today = today or date.today()
    total_days = calendar.monthrange(reference.year, reference.month)[1]
    if (reference.year, reference.month) == (today.year, today.month):
        days_elapsed = today.day
    else:
        days_elapsed = total_days
    return days_elapsed, total_days - days_elapsed, total_days


def summarize_activities(
    records: Iterable[ActivityRecord],
    reference: date,
    distance_unit: DistanceUnit = "km",
    today: date | None = None,
) -> ActivityStats:
    """Reduce already-fetched records for one month into ``ActivityStats``."""

    counts = {"run_count": 0, "walk_count": 0, "mixed_count": 0}
    total_distance = 0.0
    total_seconds = 0

    for record in records:
        counter = _TYPE_COUNTERS.get(record.activity_type)
        if counter is None:
            logger.warning(
                "Ignoring activity on %s with unknown type %r",
                record.activity_date.isoformat(),
                record.activity_type,
            )
            continue

        counts[counter] += 1
        if record.distance_meters is not None:
            total_distance += record.distance_meters
        total_seconds += duration_seconds_or_zero(record.duration)

    days_elapsed, days_remaining, total_days = month_progress(reference, today)

    return ActivityStats(
        total_activities=sum(counts.values()),
        run_count=counts["run_count"],
        walk_count=counts["walk_count"],
        mixed_count=counts["mixed_count"],
        total_distance_meters=total_distance,
        total_duration_seconds=total_seconds,
        month=reference.month,
        year=reference.year,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        total_days_in_month=total_days,
        distance_unit=distance_unit,
    )


def aggregate_activity_stats(
    fetch_activities: ActivityFetcher,
    user_id: str,
    reference: date,
    distance_unit: DistanceUnit = "km",
    today: date | None = None,
) -> ActivityStats:
    """Fetch a user's activities for the reference month and aggregate them.

    Args:
        fetch_activities: Data store capability returning records in ``[start, end)``
        user_id: Owner of the activities
        reference: Any date inside the month to summarise
        distance_unit: Unit the user prefers for prompts
        today: Override for the current date (defaults to ``date.today()``)

    Raises:
        DataAccessError: if the data store cannot be read. Not retried here.
    """
    start, end, _ = month_bounds(reference)
    logger.debug("Fetching activities for user %s between %s and %s", user_id, start.date(), end.date())

    try:
        records = list(fetch_activities(user_id, start, end))
    except DataAccessError:
        raise
    except Exception as exc:
        raise DataAccessError(f"Failed to fetch activities: {exc}") from exc

    stats = summarize_activities(records, reference, distance_unit, today=today)
    logger.info(
        "Aggregated %d activities for user %s (%04d-%02d)",
        stats.total_activities,
        user_id,
        stats.year,
        stats.month,
    )
    return stats
