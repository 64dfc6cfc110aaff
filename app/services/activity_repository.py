"""Read-only access to logged activities for statistics aggregation."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.database_models import Activity
from app.models.schemas import ActivityRecord
from app.services.errors import DataAccessError


logger = logging.getLogger(__name__)


class ActivityRepository:
    """Fetch activities for a user in a half-open date range."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def fetch_activities(self, user_id: str, start: datetime, end: datetime) -> list[ActivityRecord]:
        """
        Return the user's activities with ``start <= activity_date < end``.

        Raises:
            DataAccessError: if the query fails.
        """
        db = self._session_factory()
        try:
            rows = (
                db.query(Activity)
                .filter(
                    Activity.user_id == user_id,
                    Activity.activity_date >= start,
                    Activity.activity_date < end,
                )
                .order_by(Activity.activity_date)
                .all()
            )
            return [ActivityRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Activity query failed for user %s", user_id)
            db.rollback()
            raise DataAccessError("Failed to fetch activities") from exc
        finally:
            db.close()
