"""API endpoints for AI-generated monthly motivation."""
from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.config import get_settings
from app.database import SessionLocal
from app.models.schemas import GenerationOptions, MotivationalMessage, MotivationRequest, MotivationStatus
from app.services.activity_repository import ActivityRepository
from app.services.activity_stats import aggregate_activity_stats
from app.services.errors import DataAccessError, ValidationError
from app.services.motivation_service import MotivationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/motivation", tags=["motivation"])


def get_motivation_service(request: Request) -> MotivationService:
    """Return the service built at startup (see ``app.main.lifespan``)."""
    return request.app.state.motivation_service


def get_activity_repository() -> ActivityRepository:
    return ActivityRepository(SessionLocal)


@router.post("/generate", response_model=MotivationalMessage)
async def generate_motivation(
    payload: MotivationRequest,
    service: MotivationService = Depends(get_motivation_service),
    repository: ActivityRepository = Depends(get_activity_repository),
) -> MotivationalMessage:
    """
    Generate a motivational message for the user's month.

    Aggregates the month's activities and asks the model for a short
    message. Failures of the AI provider are answered with a rule-based
    message, so this endpoint only errors when the activity data cannot be
    read.
    """
    reference = payload.reference_date or date.today()
    logger.info(
        "Handling motivation request | user=%s month=%04d-%02d bypass_cache=%s",
        payload.user_id,
        reference.year,
        reference.month,
        payload.bypass_cache,
    )

    try:
        stats = aggregate_activity_stats(
            repository.fetch_activities,
            payload.user_id,
            reference,
            payload.distance_unit,
        )
        return await service.generate_motivational_message(
            payload.user_id,
            stats,
            GenerationOptions(bypass_cache=payload.bypass_cache),
        )
    except DataAccessError:
        logger.exception("Failed to load activities for user %s", payload.user_id)
        raise HTTPException(status_code=503, detail="Activity data is temporarily unavailable")
    except ValidationError as e:
        logger.warning("Rejected motivation request for user %s: %s", payload.user_id, e)
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/cache/{user_id}", status_code=204)
async def clear_motivation_cache(
    user_id: str,
    service: MotivationService = Depends(get_motivation_service),
) -> Response:
    """Drop cached messages for a user, e.g. after activities were edited."""
    service.clear_cache(user_id)
    return Response(status_code=204)


@router.get("/status", response_model=MotivationStatus)
async def get_motivation_status(
    service: MotivationService = Depends(get_motivation_service),
) -> MotivationStatus:
    """Report whether AI generation is active or only fallback messages are served."""
    settings = get_settings()
    return MotivationStatus(
        ai_enabled=service.ai_enabled,
        model=settings.openrouter_model,
        cache_ttl_ms=settings.openrouter_cache_ttl_ms,
    )
