"""SQLAlchemy ORM models for logged activities."""
from datetime import datetime
from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Activity(Base):
    """A run, walk or mixed session logged by a user."""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    activity_type: Mapped[str] = mapped_column(String(20), nullable=False)  # Run, Walk, Mixed

    # Stored as interval text; may be HH:MM:SS, PT1H30M or "1 hour 30 minutes"
    duration: Mapped[str | None] = mapped_column(String(64), nullable=True)
    distance_meters: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_activities_user_date", "user_id", "activity_date"),
    )
