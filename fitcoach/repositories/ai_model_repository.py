from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.core.exceptions import NoModelsAvailableError
from fitcoach.models.ai_model import AiModel
from fitcoach.models.enums import ProviderType
from fitcoach.repositories.base import Repository


@dataclass(frozen=True)
class ModelChoice:
    """The model picked for one call. ``id`` is None when it did not come from a row."""
    name: str
    type: str
    id: int | None = None


class AiModelRepository(Repository[AiModel, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> AiModel | None:
        return await self._session.get(AiModel, id)

    async def list(self) -> list[AiModel]:
        result = await self._session.execute(
            select(AiModel).order_by(AiModel.usage_count.asc(), AiModel.name.asc())
        )
        return list(result.scalars().all())

    async def create(self, entity: AiModel) -> AiModel:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: int, updates: dict) -> AiModel | None:
        model = await self.get(id)
        if model:
            for key, value in updates.items():
                setattr(model, key, value)
            await self._session.flush()
        return model

    async def delete(self, id: int) -> bool:
        model = await self.get(id)
        if model:
            await self._session.delete(model)
            await self._session.flush()
            return True
        return False

    async def get_by_name(self, name: str) -> AiModel | None:
        result = await self._session.execute(select(AiModel).where(AiModel.name == name))
        return result.scalar_one_or_none()

    async def pick_model(self) -> ModelChoice:
        """Least-used enabled model, ties broken by oldest update then lowest id."""
        result = await self._session.execute(
            select(AiModel)
            .where(or_(AiModel.enabled.is_(True), AiModel.enabled.is_(None)))
            .order_by(
                AiModel.usage_count.asc(),
                AiModel.updated_at.asc(),
                AiModel.id.asc(),
            )
            .limit(1)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NoModelsAvailableError()
        return ModelChoice(
            id=record.id,
            name=record.name,
            type=record.type or ProviderType.GEMINI.value,
        )

    async def record_usage(self, model: ModelChoice) -> None:
        """Atomically add one to the model's usage counter.

        When the id no longer matches a row (or was never known) the record
        is upserted by ``(name, type)`` instead.
        """
        now = datetime.utcnow()
        if model.id is not None:
            result = await self._session.execute(
                update(AiModel)
                .where(AiModel.id == model.id)
                .values(usage_count=AiModel.usage_count + 1, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                return

        result = await self._session.execute(
            update(AiModel)
            .where(AiModel.name == model.name, AiModel.type == model.type)
            .values(usage_count=AiModel.usage_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return

        self._session.add(
            AiModel(
                name=model.name,
                type=model.type,
                enabled=True,
                usage_count=1,
                created_at=now,
                updated_at=now,
            )
        )
        await self._session.flush()
