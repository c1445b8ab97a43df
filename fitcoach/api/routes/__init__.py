"""API routes module."""
from fitcoach.api.routes.ai_models import router as ai_models_router
from fitcoach.api.routes.auth import router as auth_router
from fitcoach.api.routes.health import router as health_router
from fitcoach.api.routes.me import router as me_router
from fitcoach.api.routes.messages import router as messages_router
from fitcoach.api.routes.plans import router as plans_router
from fitcoach.api.routes.workout_sessions import router as workout_sessions_router

__all__ = [
    "ai_models_router",
    "auth_router",
    "health_router",
    "me_router",
    "messages_router",
    "plans_router",
    "workout_sessions_router",
]
