"""Prompt construction for motivational message generation."""
from __future__ import annotations

import calendar
from typing import Any

from app.models.schemas import TONES, ActivityStats, DistanceUnit, PromptBundle
from app.services.durations import format_duration_compact


METERS_PER_MILE = 1609.34

SYSTEM_MESSAGE = """You are a fitness motivation expert. Generate short, encouraging messages (1-2 sentences) based on the user's running and walking activity for the current month.

Focus on:
- Acknowledging their progress and achievements
- Encouraging continued effort
- Using the time remaining in the month as context
- Being positive, specific, and actionable

Tone options:
- "encouraging" - For steady progress, keep it up
- "celebratory" - For impressive achievements, celebrate them
- "challenging" - For minimal activity, gentle push to do more

Respond with ONLY a JSON object with the keys "message" and "tone". Keep messages concise, personal, and motivating."""


def format_distance(meters: float, unit: DistanceUnit) -> str:
    """Convert meters to the requested unit with two decimals (``12.35 km``)."""
    if unit == "km":
        return f"{meters / 1000:.2f} km"
    return f"{meters / METERS_PER_MILE:.2f} mi"


def build_user_message(stats: ActivityStats) -> str:
    month_name = calendar.month_name[stats.month]
    distance = format_distance(stats.total_distance_meters, stats.distance_unit)
    duration = format_duration_compact(stats.total_duration)

    return f"""Generate a motivational message for {month_name} {stats.year}:

Activity Summary:
- Total activities: {stats.total_activities} ({stats.run_count} runs, {stats.walk_count} walks, {stats.mixed_count} mixed)
- Total distance: {distance}
- Total time: {duration}
- Month progress: Day {stats.days_elapsed} of {stats.total_days_in_month} ({stats.days_remaining} days remaining)

Respond with ONLY a JSON object in this exact format:
{{
  "message": "your motivational message here (1-2 sentences)",
  "tone": "encouraging" OR "celebratory" OR "challenging"
}}

Choose tone based on activity level:
- "encouraging" if steady progress (5-15 activities)
- "celebratory" if impressive (15+ activities)
- "challenging" if minimal (< 5 activities)"""


def build_response_format() -> dict[str, Any]:
    """JSON-schema ``response_format`` accepted by OpenAI-compatible endpoints."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "motivation_message",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {
                    "message": {
                        "type": "string",
                        "description": "The motivational message (1-2 sentences, max 150 characters)",
                    },
                    "tone": {
                        "type": "string",
                        "enum": list(TONES),
                        "description": "The tone of the message based on activity level",
                    },
                },
                "required": ["message", "tone"],
                "additionalProperties": False,
            },
        },
    }


def build_prompt(stats: ActivityStats) -> PromptBundle:
    """Assemble system instruction, user message and output schema for ``stats``."""
    return PromptBundle(
        system_message=SYSTEM_MESSAGE,
        user_message=build_user_message(stats),
        response_format=build_response_format(),
    )
