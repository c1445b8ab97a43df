"""SQLAlchemy models."""
from fitcoach.models.ai_model import AiModel
from fitcoach.models.enums import (
    ExerciseStatus,
    Language,
    MessageRole,
    PlanType,
    ProviderType,
    SessionStatus,
    Units,
    UserRole,
    UserStatus,
    WorkoutLocation,
)
from fitcoach.models.message import Message
from fitcoach.models.plan import PLAN_MODELS, DietPlanRecord, PlanRecordMixin, WorkoutPlanRecord
from fitcoach.models.user import User, UserProfile, UserSettings
from fitcoach.models.workout_session import WorkoutSession

__all__ = [
    "AiModel",
    "DietPlanRecord",
    "ExerciseStatus",
    "Language",
    "Message",
    "MessageRole",
    "PLAN_MODELS",
    "PlanRecordMixin",
    "PlanType",
    "ProviderType",
    "SessionStatus",
    "Units",
    "User",
    "UserProfile",
    "UserRole",
    "UserSettings",
    "UserStatus",
    "WorkoutLocation",
    "WorkoutPlanRecord",
    "WorkoutSession",
]
