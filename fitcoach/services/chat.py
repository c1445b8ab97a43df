"""Plan-aware chat assistant."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.core.exceptions import NotFoundError
from fitcoach.llm.base import ChatMessage
from fitcoach.llm.router import AiRouter
from fitcoach.models.enums import MessageRole, PlanType
from fitcoach.models.message import Message
from fitcoach.repositories.message_repository import MessageRepository
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.repositories.user_repository import UserRepository
from fitcoach.services import prompts

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


class ChatService:
    def __init__(self, session: AsyncSession, router: AiRouter | None = None):
        self._router = router
        self._users = UserRepository(session)
        self._messages = MessageRepository(session)
        self._plans = PlanRepository(session, PlanType.WORKOUT)

    async def send(self, user_id: int, content: str, plan_id: int | None = None) -> list[Message]:
        """Answer one user message and store both sides of the exchange.

        The conversation is anchored to the given workout plan, or to the
        active one. One router call, no retry.
        """
        content = content.strip()
        profile = await self._users.get_profile(user_id)
        if plan_id is not None:
            plan = await self._plans.get_for_user(plan_id, user_id)
            if plan is None:
                raise NotFoundError("plan")
        else:
            plan = await self._plans.get_active(user_id)

        history = await self._messages.list_recent(
            user_id, plan_id, limit=HISTORY_LIMIT, include_system=False
        )
        chat = [
            ChatMessage(
                MessageRole.SYSTEM.value,
                prompts.chat_system_prompt(profile, plan.title if plan else None),
            )
        ]
        chat += [
            ChatMessage(
                MessageRole.ASSISTANT.value if m.role == MessageRole.ASSISTANT.value else MessageRole.USER.value,
                m.content,
            )
            for m in history
        ]
        chat.append(ChatMessage(MessageRole.USER.value, content))

        result = await self._router.ask(chat)

        common = {
            "user_id": user_id,
            "plan_id": plan.id if plan else None,
            "plan_type": plan.plan_type.value if plan else None,
        }
        return await self._messages.create_many([
            Message(role=MessageRole.USER.value, content=content, **common),
            Message(role=MessageRole.ASSISTANT.value, content=result.text, model=result.model, **common),
        ])

    async def rate(self, user_id: int, plan_id: int, plan_type: PlanType, rating: int) -> Message:
        """Rate the newest assistant message of a plan conversation."""
        message = await self._messages.latest_assistant(user_id, plan_id, plan_type.value)
        if message is None:
            raise NotFoundError("message")
        message.rating = rating
        return message
