"""Rule-based motivational messages used whenever AI generation is unavailable."""
from __future__ import annotations

from datetime import datetime, timezone

from app.models.schemas import FALLBACK_MODEL, ActivityStats, MotivationalMessage


def _pick_message(stats: ActivityStats) -> tuple[str, str]:
    # First matching branch wins; order matters.
    if stats.total_activities == 0:
        return "Ready to start? Add your first activity and begin your journey!", "encouraging"
    if stats.total_activities >= 20:
        return "Incredible consistency! You're crushing your fitness goals this month.", "celebratory"
    if stats.total_activities >= 10:
        return (
            f"Great progress with {stats.total_activities} activities! Keep the momentum going.",
            "encouraging",
        )
    if stats.days_remaining > 7:
        return (
            f"{stats.total_activities} activities so far. Plenty of time to add more!",
            "challenging",
        )
    return "Every step counts! Keep moving and finish the month strong.", "encouraging"


def fallback_motivation(stats: ActivityStats, now: datetime | None = None) -> MotivationalMessage:
    """Return a deterministic message for ``stats`` without touching the network."""
    message, tone = _pick_message(stats)
    return MotivationalMessage(
        message=message,
        tone=tone,
        generated_at=now or datetime.now(timezone.utc),
        model=FALLBACK_MODEL,
        cached=False,
    )
