"""Motivational message orchestration: cache, AI generation and fallback."""
from __future__ import annotations

import logging

from app.config import Settings
from app.models.schemas import ActivityStats, GenerationOptions, MotivationalMessage
from app.services.errors import ValidationError
from app.services.fallback import fallback_motivation
from app.services.motivation_cache import InMemoryMotivationCache, MotivationCache
from app.services.openrouter_client import OpenRouterClient
from app.services.prompt_builder import build_prompt


logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100


def validate_stats(stats: ActivityStats) -> None:
    """Reject statistics that could not have come from a real month.

    Raises:
        ValidationError: describing the first problem found.
    """
    if not 1 <= stats.month <= 12:
        raise ValidationError("Invalid month: must be 1-12")
    if not MIN_YEAR <= stats.year <= MAX_YEAR:
        raise ValidationError(f"Invalid year: must be {MIN_YEAR}-{MAX_YEAR}")

    for field in (
        "total_activities",
        "run_count",
        "walk_count",
        "mixed_count",
        "total_distance_meters",
        "total_duration_seconds",
        "days_elapsed",
        "days_remaining",
        "total_days_in_month",
    ):
        if getattr(stats, field) < 0:
            raise ValidationError(f"Invalid {field}: cannot be negative")

    if stats.run_count + stats.walk_count + stats.mixed_count != stats.total_activities:
        raise ValidationError("Per-type counts do not add up to total_activities")
    if stats.days_elapsed + stats.days_remaining != stats.total_days_in_month:
        raise ValidationError("Invalid day counts")
    if stats.distance_unit not in ("km", "mi"):
        raise ValidationError("Invalid distance unit: must be km or mi")


class MotivationService:
    """Single entry point that always answers with a ``MotivationalMessage``.

    Only malformed statistics raise; every failure of the generation API is
    logged and answered by the rule-based fallback instead.

    Args:
        cache: Shared message cache
        client: Generation client, or ``None`` when AI generation is disabled
    """

    def __init__(self, cache: MotivationCache, client: OpenRouterClient | None = None) -> None:
        self.cache = cache
        self.client = client

    @property
    def ai_enabled(self) -> bool:
        return self.client is not None

    async def generate_motivational_message(
        self,
        user_id: str,
        stats: ActivityStats,
        options: GenerationOptions | None = None,
    ) -> MotivationalMessage:
        validate_stats(stats)
        options = options or GenerationOptions()

        if self.client is None:
            logger.debug("AI motivation disabled - using fallback for user %s", user_id)
            return fallback_motivation(stats)

        if not options.bypass_cache:
            cached = self.cache.get(user_id, stats)
            if cached is not None:
                logger.info("Cache HIT for user %s (%04d-%02d)", user_id, stats.year, stats.month)
                return cached
            logger.info("Cache MISS for user %s (%04d-%02d)", user_id, stats.year, stats.month)
        else:
            logger.info("Bypassing cache for user %s", user_id)

        prompt = build_prompt(stats)

        try:
            message = await self.client.generate(prompt, options)
        except Exception as exc:
            logger.warning(
                "AI motivation failed for user %s (%s: %s) - using fallback",
                user_id,
                type(exc).__name__,
                exc,
            )
            return fallback_motivation(stats)

        try:
            self.cache.set(user_id, stats, message)
        except Exception as exc:
            # Non-fatal - log and continue
            logger.warning("Failed to cache motivation: %s", exc, exc_info=True)

        return message.model_copy(update={"cached": False})

    def clear_cache(self, user_id: str) -> None:
        """Forget every cached message for ``user_id`` (e.g. after editing activities)."""
        self.cache.invalidate_all(user_id)

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()


def create_motivation_service(settings: Settings) -> MotivationService:
    """Build the process-wide service from configuration.

    Called once at startup; request handlers receive the instance through
    dependency injection.
    """
    cache = InMemoryMotivationCache(
        ttl_ms=settings.openrouter_cache_ttl_ms,
        max_entries=settings.motivation_cache_max_entries,
    )

    if not settings.enable_ai_motivation:
        logger.info("AI motivation disabled by feature flag; serving fallback messages only")
        return MotivationService(cache)
    if settings.openrouter_api_key is None:
        logger.warning("OpenRouter API key not configured; serving fallback messages only")
        return MotivationService(cache)

    client = OpenRouterClient(
        settings.openrouter_api_key.get_secret_value(),
        base_url=settings.openrouter_base_url,
        model=settings.openrouter_model,
        timeout_ms=settings.openrouter_timeout_ms,
        max_retries=settings.openrouter_max_retries,
        app_url=settings.openrouter_app_url,
        app_title=settings.openrouter_app_title,
    )
    logger.info(
        "OpenRouter motivation enabled (model=%s, cache TTL=%dms)",
        settings.openrouter_model,
        settings.openrouter_cache_ttl_ms,
    )
    return MotivationService(cache, client)
