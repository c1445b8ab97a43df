from __future__ import annotations
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.models.enums import PlanType
from fitcoach.models.plan import PLAN_MODELS, PlanRecordMixin
from fitcoach.repositories.base import Repository


class PlanRepository(Repository[PlanRecordMixin, int]):
    """Workout or diet plan envelopes, one repository per plan kind."""

    def __init__(self, session: AsyncSession, plan_type: PlanType):
        self._session = session
        self.plan_type = plan_type
        self.model = PLAN_MODELS[plan_type]

    async def get(self, id: int) -> PlanRecordMixin | None:
        return await self._session.get(self.model, id)

    async def get_for_user(self, id: int, user_id: int) -> PlanRecordMixin | None:
        result = await self._session.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, entity: PlanRecordMixin) -> PlanRecordMixin:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: int, updates: dict) -> PlanRecordMixin | None:
        plan = await self.get(id)
        if plan:
            for key, value in updates.items():
                setattr(plan, key, value)
            await self._session.flush()
        return plan

    async def delete(self, id: int) -> bool:
        plan = await self.get(id)
        if plan:
            await self._session.delete(plan)
            await self._session.flush()
            return True
        return False

    def _newest_first(self, query):
        return query.order_by(self.model.created_at.desc(), self.model.id.desc())

    async def get_active(self, user_id: int) -> PlanRecordMixin | None:
        result = await self._session.execute(
            self._newest_first(
                select(self.model).where(
                    self.model.user_id == user_id,
                    self.model.is_active.is_(True),
                )
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest(self, user_id: int) -> PlanRecordMixin | None:
        result = await self._session.execute(
            self._newest_first(select(self.model).where(self.model.user_id == user_id)).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_current(self, user_id: int) -> PlanRecordMixin | None:
        """Active plan, or the newest one when none is flagged active."""
        return await self.get_active(user_id) or await self.get_latest(user_id)

    async def list_active(self, user_id: int) -> list[PlanRecordMixin]:
        result = await self._session.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self.model.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    async def save_active(
        self,
        user_id: int,
        values: dict,
        default_title: str | None = None,
        default_description: str | None = None,
    ) -> PlanRecordMixin:
        """Store ``values`` as the user's single active plan.

        The newest active plan is updated in place (keeping a title or
        description it already has), otherwise a new one is created. Every
        other active plan of this kind is then deactivated. The user's active
        rows are locked for the rest of the transaction so two concurrent
        generations cannot both leave an active plan behind.
        """
        result = await self._session.execute(
            self._newest_first(
                select(self.model).where(
                    self.model.user_id == user_id,
                    self.model.is_active.is_(True),
                )
            ).with_for_update()
        )
        plan = result.scalars().first()

        if plan is None:
            plan = self.model(
                user_id=user_id,
                title=default_title,
                description=default_description,
                is_active=True,
                **values,
            )
            self._session.add(plan)
        else:
            for key, value in values.items():
                setattr(plan, key, value)
            plan.title = plan.title or default_title
            plan.description = plan.description or default_description
            plan.is_active = True
        await self._session.flush()

        await self._session.execute(
            update(self.model)
            .where(
                self.model.user_id == user_id,
                self.model.id != plan.id,
                self.model.is_active.is_(True),
            )
            .values(is_active=False)
        )
        return plan
