"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.error_handlers import register_error_handlers
from fitcoach.core.logging import configure_logging
from fitcoach.db.database import Database
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    # Startup: database and the shared provider client
    database = Database.from_settings(settings)
    await database.create_all()
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.llm_timeout))

    app.state.database = database
    app.state.providers = ProviderRegistry.from_settings(settings, client=http_client)
    logger.info("Started %s with providers %s", settings.app_name, [t.value for t in app.state.providers.types])

    yield

    # Shutdown
    await app.state.providers.close()
    await http_client.aclose()
    try:
        await database.dispose()
    except Exception as e:
        logger.warning(f"Failed to close database engine: {e}")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="AI fitness and diet coach: plan generation, workout logging and chat",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    from fitcoach.api.routes import (
        ai_models_router,
        auth_router,
        health_router,
        me_router,
        messages_router,
        plans_router,
        workout_sessions_router,
    )

    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(me_router, prefix="/api/me", tags=["Account"])
    app.include_router(plans_router, prefix="/api/plans", tags=["Plans"])
    app.include_router(ai_models_router, prefix="/api/ai-models", tags=["AI Models"])
    app.include_router(workout_sessions_router, prefix="/api/workout-sessions", tags=["Workout Sessions"])
    app.include_router(messages_router, prefix="/api/messages", tags=["Messages"])

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fitcoach.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
