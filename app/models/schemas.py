"""Pydantic models describing activity statistics and motivational payloads."""
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field

from app.services.durations import seconds_to_designator


ActivityType = Literal["Run", "Walk", "Mixed"]
DistanceUnit = Literal["km", "mi"]
Tone = Literal["encouraging", "celebratory", "challenging"]

TONES: tuple[str, ...] = ("encouraging", "celebratory", "challenging")
FALLBACK_MODEL = "fallback"


class ActivityRecord(BaseModel):
    """A single logged activity as read from the data store."""

    activity_date: datetime
    activity_type: str
    duration: str | None = None
    distance_meters: float | None = None

    class Config:
        from_attributes = True


class ActivityStats(BaseModel):
    """Monthly aggregate used to build prompts and pick fallback messages.

    Ranges are checked by ``MotivationService`` rather than here, so that
    malformed statistics surface as the service's own ``ValidationError``.
    """

    total_activities: int
    run_count: int
    walk_count: int
    mixed_count: int
    total_distance_meters: float
    total_duration_seconds: int = 0
    month: int
    year: int
    days_elapsed: int
    days_remaining: int
    total_days_in_month: int
    distance_unit: DistanceUnit = "km"

    @computed_field
    @property
    def total_duration(self) -> str:
        """Total time as a ``PTnHnMnS`` designator, derived from ``total_duration_seconds``."""
        return seconds_to_designator(self.total_duration_seconds)


class MotivationalMessage(BaseModel):
    """Short motivational text shown above the activity list."""

    message: str
    tone: Tone
    generated_at: datetime
    model: str
    cached: bool = False


class GenerationOptions(BaseModel):
    """Per-request overrides for message generation."""

    model: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, gt=0)
    bypass_cache: bool = False


class PromptBundle(BaseModel):
    """Everything the generation API needs besides sampling parameters."""

    system_message: str
    user_message: str
    response_format: dict[str, Any]


class MotivationRequest(BaseModel):
    """Body of ``POST /api/motivation/generate``."""

    user_id: str = Field(min_length=1)
    distance_unit: DistanceUnit = "km"
    bypass_cache: bool = False
    reference_date: date | None = None


class MotivationStatus(BaseModel):
    """Availability of AI generation for the current process."""

    ai_enabled: bool
    model: str
    cache_ttl_ms: int
