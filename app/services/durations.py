"""Parsing and formatting of activity durations.

Durations reach us in three text encodings depending on how the row was
written: ``HH:MM:SS`` (database interval output), ``PT1H30M`` (designator
form used by the API) and ``1 hour 30 minutes`` (verbose interval output).
"""
from __future__ import annotations

import logging
import re


logger = logging.getLogger(__name__)

_COLON_RE = re.compile(r"^(\d+):(\d{1,2}):(\d{1,2})$")
_DESIGNATOR_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")
_WORD_HOURS_RE = re.compile(r"(\d+)\s*(?:hours?|hrs?)\b")
_WORD_MINUTES_RE = re.compile(r"(\d+)\s*(?:minutes?|mins?)\b")
_WORD_SECONDS_RE = re.compile(r"(\d+)\s*(?:seconds?|secs?)\b")


class DurationParseError(ValueError):
    """Raised when a duration string matches none of the known encodings."""


def parse_duration_to_seconds(value: str) -> int:
    """Convert any supported duration encoding to whole seconds.

    Raises:
        DurationParseError: if ``value`` is not in a recognised encoding.
    """
    text = value.strip()

    colon = _COLON_RE.match(text)
    if colon:
        hours, minutes, seconds = (int(part) for part in colon.groups())
        return hours * 3600 + minutes * 60 + seconds

    designator = _DESIGNATOR_RE.match(text.upper())
    if designator and text.upper() != "PT":
        hours, minutes, seconds = (int(part or 0) for part in designator.groups())
        return hours * 3600 + minutes * 60 + seconds

    lowered = text.lower()
    hours_match = _WORD_HOURS_RE.search(lowered)
    minutes_match = _WORD_MINUTES_RE.search(lowered)
    seconds_match = _WORD_SECONDS_RE.search(lowered)
    if hours_match or minutes_match or seconds_match:
        hours = int(hours_match.group(1)) if hours_match else 0
        minutes = int(minutes_match.group(1)) if minutes_match else 0
        seconds = int(seconds_match.group(1)) if seconds_match else 0
        return hours * 3600 + minutes * 60 + seconds

    raise DurationParseError(f"Unrecognised duration: {value!r}")


def duration_seconds_or_zero(value: str | None) -> int:
    """Soft-fail variant used during aggregation: bad input counts as zero."""
    if value is None or not value.strip():
        return 0
    try:
        return parse_duration_to_seconds(value)
    except DurationParseError:
        logger.warning("Skipping unparsable duration %r (counted as 0s)", value)
        return 0


def seconds_to_designator(total_seconds: int) -> str:
    """Encode seconds as ``PTnHnMnS``, omitting zero components (``PT0S`` for zero)."""
    hours, remainder = divmod(max(0, int(total_seconds)), 3600)
    minutes, seconds = divmod(remainder, 60)

    encoded = "PT"
    if hours:
        encoded += f"{hours}H"
    if minutes:
        encoded += f"{minutes}M"
    if seconds:
        encoded += f"{seconds}S"
    return "PT0S" if encoded == "PT" else encoded


def format_duration_compact(designator: str) -> str:
    """Render a designator duration as ``1h 30m`` / ``45m 10s``.

    Seconds are shown only when there is no hour component.
    """
    match = _DESIGNATOR_RE.match(designator.strip().upper())
    if not match:
        return "0m"

    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 and hours == 0:
        parts.append(f"{seconds}s")
    return " ".join(parts) or "0m"
