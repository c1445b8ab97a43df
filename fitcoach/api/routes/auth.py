"""Authentication endpoints: signup, login and logout with a session cookie."""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import get_app_settings
from fitcoach.config.settings import Settings
from fitcoach.core.exceptions import AuthenticationError, AuthorizationError, ConflictError
from fitcoach.db.database import get_db
from fitcoach.models.enums import UserRole, UserStatus
from fitcoach.models.user import User
from fitcoach.repositories.user_repository import UserRepository
from fitcoach.schemas.auth import LoginRequest, SignupRequest
from fitcoach.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_PROFILE = {
    "goal": "general fitness",
    "experience_level": "beginner",
    "days_per_week": 3,
    "available_equipment": [],
    "allergies": [],
    "disliked_foods": [],
}


def set_auth_cookie(response: Response, user_id: int, settings: Settings) -> None:
    token = create_access_token(user_id, settings=settings)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.auth_token_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Create an account with a starter profile and sign the user in."""
    users = UserRepository(db)
    if await users.get_by_email(payload.email):
        raise ConflictError("Email already in use.", code="email_taken")

    user = await users.create(
        User(
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            name=payload.name.strip() if payload.name else None,
            role=UserRole.USER.value,
            status=UserStatus.ACTIVE.value,
        )
    )
    await users.save_profile(user.id, dict(DEFAULT_PROFILE))
    set_auth_cookie(response, user.id, settings)
    logger.info("User %s signed up", user.id)
    return {"user": user.to_dict()}


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await UserRepository(db).get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Invalid email or password.", code="invalid_credentials")
    if not user.is_active:
        raise AuthorizationError("Account is blocked.", code="account_blocked")

    set_auth_cookie(response, user.id, settings)
    return {"user": user.to_dict()}


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return {"ok": True}
