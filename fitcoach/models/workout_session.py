"""Logged workout session for one day of a workout plan."""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text

from fitcoach.db.database import Base
from fitcoach.models.enums import SessionStatus


class WorkoutSession(Base):
    """A user working through one plan day.

    Created when the day is started, patched as sets are logged, and
    finalized once ``ended_at`` is set. ``exercises`` holds the per-exercise
    logs (with their sets) as a JSON document.
    """
    __tablename__ = "workout_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    plan_id = Column(Integer, ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False)
    plan_day_index = Column(Integer, nullable=False)
    plan_day_label = Column(String(255), nullable=False)

    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=True)
    total_duration_seconds = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=SessionStatus.PARTIAL.value)

    perceived_intensity = Column(Integer, nullable=True)  # 1-10
    energy_level = Column(Integer, nullable=True)  # 1-5
    pain_or_discomfort = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    exercises = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_workout_sessions_user_started", "user_id", "started_at"),
    )

    @property
    def is_finalized(self) -> bool:
        return self.ended_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "planId": self.plan_id,
            "planDayIndex": self.plan_day_index,
            "planDayLabel": self.plan_day_label,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "endedAt": self.ended_at.isoformat() if self.ended_at else None,
            "totalDurationSeconds": self.total_duration_seconds,
            "status": self.status,
            "perceivedIntensity": self.perceived_intensity,
            "energyLevel": self.energy_level,
            "painOrDiscomfort": self.pain_or_discomfort,
            "notes": self.notes,
            "exercises": self.exercises or [],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
