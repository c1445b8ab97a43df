from __future__ import annotations
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.models.workout_session import WorkoutSession
from fitcoach.repositories.base import Repository


class WorkoutSessionRepository(Repository[WorkoutSession, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> WorkoutSession | None:
        return await self._session.get(WorkoutSession, id)

    async def get_for_user(self, id: int, user_id: int) -> WorkoutSession | None:
        result = await self._session.execute(
            select(WorkoutSession).where(
                WorkoutSession.id == id,
                WorkoutSession.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list(self, filter: dict, limit: int = 50) -> list[WorkoutSession]:
        query = select(WorkoutSession)

        if 'user_id' in filter:
            query = query.where(WorkoutSession.user_id == filter['user_id'])

        if 'plan_id' in filter:
            query = query.where(WorkoutSession.plan_id == filter['plan_id'])

        if 'start_date' in filter:
            query = query.where(WorkoutSession.started_at >= filter['start_date'])

        if 'end_date' in filter:
            query = query.where(WorkoutSession.started_at <= filter['end_date'])

        query = query.order_by(WorkoutSession.started_at.desc(), WorkoutSession.id.desc()).limit(limit)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def create(self, entity: WorkoutSession) -> WorkoutSession:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: int, updates: dict) -> WorkoutSession | None:
        workout_session = await self.get(id)
        if workout_session:
            for key, value in updates.items():
                setattr(workout_session, key, value)
            await self._session.flush()
        return workout_session

    async def delete(self, id: int) -> bool:
        workout_session = await self.get(id)
        if workout_session:
            await self._session.delete(workout_session)
            await self._session.flush()
            return True
        return False
