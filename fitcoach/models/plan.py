"""Generated plan envelopes.

Workout and diet plans live in separate tables but share one shape: the
model's output as canonical text, the parsed document, and an ``is_active``
flag of which at most one row per user is set.
"""
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declared_attr

from fitcoach.db.database import Base
from fitcoach.models.enums import PlanType


class PlanRecordMixin:
    plan_type: PlanType

    id = Column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    plan_text = Column(Text, nullable=True)
    structured_plan = Column(JSON, nullable=True)
    model = Column(String(200), nullable=True)
    prompt_version = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "planType": self.plan_type.value,
            "title": self.title,
            "description": self.description,
            "planText": self.plan_text,
            "structuredPlan": self.structured_plan,
            "model": self.model,
            "promptVersion": self.prompt_version,
            "isActive": bool(self.is_active),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class WorkoutPlanRecord(PlanRecordMixin, Base):
    __tablename__ = "workout_plans"
    plan_type = PlanType.WORKOUT

    __table_args__ = (
        Index("ix_workout_plans_user_active", "user_id", "is_active"),
    )


class DietPlanRecord(PlanRecordMixin, Base):
    __tablename__ = "diet_plans"
    plan_type = PlanType.DIET

    __table_args__ = (
        Index("ix_diet_plans_user_active", "user_id", "is_active"),
    )


PLAN_MODELS: dict[PlanType, type[PlanRecordMixin]] = {
    PlanType.WORKOUT: WorkoutPlanRecord,
    PlanType.DIET: DietPlanRecord,
}
