from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.models.enums import MessageRole
from fitcoach.models.message import Message
from fitcoach.repositories.base import Repository


class MessageRepository(Repository[Message, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> Message | None:
        return await self._session.get(Message, id)

    async def create(self, entity: Message) -> Message:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def create_many(self, messages: list[Message]) -> list[Message]:
        self._session.add_all(messages)
        await self._session.flush()
        return messages

    async def update(self, id: int, updates: dict) -> Message | None:
        message = await self.get(id)
        if message:
            for key, value in updates.items():
                setattr(message, key, value)
            await self._session.flush()
        return message

    async def delete(self, id: int) -> bool:
        message = await self.get(id)
        if message:
            await self._session.delete(message)
            await self._session.flush()
            return True
        return False

    async def list_recent(
        self,
        user_id: int,
        plan_id: int | None = None,
        limit: int = 50,
        include_system: bool = True,
    ) -> list[Message]:
        """The newest ``limit`` messages, returned oldest first."""
        query = select(Message).where(Message.user_id == user_id)
        if plan_id is not None:
            query = query.where(Message.plan_id == plan_id)
        if not include_system:
            query = query.where(Message.role != MessageRole.SYSTEM.value)
        result = await self._session.execute(
            query.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def latest_assistant(
        self,
        user_id: int,
        plan_id: int,
        plan_type: str,
    ) -> Message | None:
        result = await self._session.execute(
            select(Message)
            .where(
                Message.user_id == user_id,
                Message.plan_id == plan_id,
                Message.plan_type == plan_type,
                Message.role == MessageRole.ASSISTANT.value,
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
