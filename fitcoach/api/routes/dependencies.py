"""Shared dependencies for API routes."""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.exceptions import AuthenticationError, AuthorizationError, ConfigurationError
from fitcoach.db.database import get_db
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.llm.router import AiRouter
from fitcoach.models.user import User
from fitcoach.repositories.ai_model_repository import AiModelRepository
from fitcoach.security import verify_token


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> int:
    """User id from the session cookie.

    Runs before anything touches the database, so an anonymous request is
    rejected without side effects.

    Raises:
        AuthenticationError: If the cookie is missing, invalid or expired
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise AuthenticationError()

    user_id = verify_token(token, settings)
    if user_id is None:
        raise AuthenticationError()
    return user_id


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError()
    if not user.is_active:
        raise AuthorizationError()
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Only users with the admin role get past this dependency."""
    if not current_user.is_admin:
        raise AuthorizationError()
    return current_user


def get_providers(request: Request) -> ProviderRegistry:
    providers = getattr(request.app.state, "providers", None)
    if providers is None:
        raise ConfigurationError("Provider registry is not initialized")
    return providers


async def get_ai_router(
    db: AsyncSession = Depends(get_db),
    providers: ProviderRegistry = Depends(get_providers),
) -> AiRouter:
    return AiRouter(AiModelRepository(db), providers)
