from __future__ import annotations
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.models.user import User, UserProfile, UserSettings
from fitcoach.repositories.base import Repository


class UserRepository(Repository[User, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> User | None:
        return await self._session.get(User, id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create(self, entity: User) -> User:
        entity.email = entity.email.strip().lower()
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: int, updates: dict) -> User | None:
        user = await self.get(id)
        if user:
            for key, value in updates.items():
                setattr(user, key, value)
            await self._session.flush()
        return user

    async def delete(self, id: int) -> bool:
        user = await self.get(id)
        if user:
            await self._session.delete(user)
            await self._session.flush()
            return True
        return False

    async def get_profile(self, user_id: int) -> UserProfile | None:
        result = await self._session.execute(
            select(UserProfile).where(UserProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def save_profile(self, user_id: int, values: dict) -> UserProfile:
        profile = await self.get_profile(user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id, **values)
            self._session.add(profile)
        else:
            for key, value in values.items():
                setattr(profile, key, value)
        await self._session.flush()
        return profile

    async def get_settings(self, user_id: int) -> UserSettings | None:
        result = await self._session.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def save_settings(self, user_id: int, values: dict) -> UserSettings:
        settings = await self.get_settings(user_id)
        if settings is None:
            settings = UserSettings(user_id=user_id, **values)
            self._session.add(settings)
        else:
            for key, value in values.items():
                setattr(settings, key, value)
        await self._session.flush()
        return settings
