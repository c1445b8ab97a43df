"""Current user's profile, settings and password."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import get_current_user, get_current_user_id
from fitcoach.core.exceptions import AuthenticationError, ValidationError
from fitcoach.db.database import get_db
from fitcoach.models.user import User
from fitcoach.repositories.user_repository import UserRepository
from fitcoach.schemas.profile import REQUIRED_ON_CREATE, PasswordChange, ProfileUpdate, SettingsUpdate
from fitcoach.security import get_password_hash, verify_password
from fitcoach.services.prompts import normalize_language

router = APIRouter()


@router.get("/profile")
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    profile = await UserRepository(db).get_profile(user_id)
    return {"profile": profile.to_dict() if profile else None}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    users = UserRepository(db)
    values = payload.clamped_values()
    existing = await users.get_profile(user_id)

    if existing is None:
        missing = {key: "Field required" for key in REQUIRED_ON_CREATE if values.get(key) is None}
        if missing:
            raise ValidationError("Goal, experience level and days per week are required.", fields=missing)
    else:
        # Required fields can be changed but not cleared.
        values = {k: v for k, v in values.items() if not (k in REQUIRED_ON_CREATE and v is None)}

    for key in ("available_equipment", "allergies", "disliked_foods"):
        if key in values and values[key] is None:
            values[key] = []

    profile = await users.save_profile(user_id, values)
    return {"profile": profile.to_dict()}


@router.get("/settings")
async def get_user_settings(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user_settings = await UserRepository(db).get_settings(user_id)
    if user_settings is None:
        return {"settings": {"language": normalize_language(None).value, "units": None, "notificationsEnabled": None}}
    return {"settings": user_settings.to_dict()}


@router.put("/settings")
async def update_user_settings(
    payload: SettingsUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    values = payload.model_dump(exclude_unset=True)
    if "language" in values:
        values["language"] = normalize_language(values["language"]).value
    if values.get("units") is not None:
        values["units"] = values["units"].value
    user_settings = await UserRepository(db).save_settings(user_id, values)
    return {"settings": user_settings.to_dict()}


@router.put("/password")
async def change_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise AuthenticationError("Current password is incorrect.", code="invalid_credentials")
    current_user.password_hash = get_password_hash(payload.new_password)
    return {"ok": True}


@router.get("")
async def me(current_user: User = Depends(get_current_user)):
    return {"user": current_user.to_dict()}
