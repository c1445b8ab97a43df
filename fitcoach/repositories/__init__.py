"""Repositories package."""
from fitcoach.repositories.ai_model_repository import AiModelRepository, ModelChoice
from fitcoach.repositories.base import Repository
from fitcoach.repositories.message_repository import MessageRepository
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.repositories.user_repository import UserRepository
from fitcoach.repositories.workout_session_repository import WorkoutSessionRepository

__all__ = [
    "AiModelRepository",
    "MessageRepository",
    "ModelChoice",
    "PlanRepository",
    "Repository",
    "UserRepository",
    "WorkoutSessionRepository",
]
