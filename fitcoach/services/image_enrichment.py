"""Attach model-suggested image URLs to a stored plan's exercises and meals."""
import copy
import json
import logging
from typing import Any
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.core.exceptions import (
    ImageResponseInvalidError,
    ImageUrlInvalidError,
    NotFoundError,
)
from fitcoach.llm.base import JSON_MIME_TYPE, ChatMessage, ChatOptions
from fitcoach.llm.router import AiRouter
from fitcoach.models.enums import MessageRole, PlanType
from fitcoach.models.plan import PlanRecordMixin
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.services import prompts
from fitcoach.services.plan_validation import serialize_plan

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def parse_image_url(text: str) -> str:
    """Extract and check ``imageUrl`` from a ``{"imageUrl": ...}`` reply."""
    try:
        parsed: Any = json.loads(text)
    except ValueError as e:
        logger.warning(f"Image response is not JSON: {e}")
        raise ImageResponseInvalidError() from e

    if not isinstance(parsed, dict):
        raise ImageResponseInvalidError()

    image_url = parsed.get("imageUrl")
    if not image_url or not isinstance(image_url, str):
        raise ImageResponseInvalidError()

    try:
        url = urlparse(image_url.strip())
    except ValueError as e:
        raise ImageUrlInvalidError() from e
    # A host is required, so forms without "//" such as "http:example.com" are rejected.
    if url.scheme not in ALLOWED_SCHEMES or not url.netloc:
        raise ImageUrlInvalidError()
    return image_url.strip()


def _item_at(items: Any, index: int) -> dict | None:
    if not isinstance(items, list) or not 0 <= index < len(items):
        return None
    item = items[index]
    return item if isinstance(item, dict) else None


class ImageEnrichmentService:
    """Single-attempt image lookup; a bad reply is reported, never retried."""

    def __init__(self, session: AsyncSession, router: AiRouter):
        self._session = session
        self._router = router

    async def _ask_url(self, system_prompt: str, user_prompt: str) -> tuple[str, str]:
        result = await self._router.ask(
            [
                ChatMessage(MessageRole.SYSTEM.value, system_prompt),
                ChatMessage(MessageRole.USER.value, user_prompt),
            ],
            ChatOptions(response_mime_type=JSON_MIME_TYPE),
        )
        return parse_image_url(result.text), result.model

    async def _load_document(self, plan_type: PlanType, plan_id: int, user_id: int) -> tuple[PlanRecordMixin, dict]:
        plan = await PlanRepository(self._session, plan_type).get_for_user(plan_id, user_id)
        if plan is None or not isinstance(plan.structured_plan, dict):
            raise NotFoundError("plan")
        # Work on a copy so assigning it back marks the JSON column dirty.
        return plan, copy.deepcopy(plan.structured_plan)

    async def _store(self, plan: PlanRecordMixin, document: dict) -> None:
        plan.structured_plan = document
        plan.plan_text = serialize_plan(document)
        await self._session.flush()

    async def add_exercise_image(
        self,
        user_id: int,
        plan_id: int,
        day_index: int,
        exercise_index: int,
    ) -> tuple[PlanRecordMixin, str]:
        plan, document = await self._load_document(PlanType.WORKOUT, plan_id, user_id)
        day = _item_at(document.get("days"), day_index)
        exercise = _item_at(day.get("exercises"), exercise_index) if day else None
        if exercise is None:
            raise NotFoundError("exercise")

        image_url, model = await self._ask_url(
            prompts.WORKOUT_IMAGE_SYSTEM_PROMPT,
            prompts.workout_image_prompt(day, exercise),
        )
        exercise["imageUrl"] = image_url
        await self._store(plan, document)
        logger.info("Image attached to workout plan %s day %d exercise %d", plan.id, day_index, exercise_index)
        return plan, model

    async def add_meal_image(
        self,
        user_id: int,
        plan_id: int,
        day_index: int,
        meal_index: int,
    ) -> tuple[PlanRecordMixin, str]:
        plan, document = await self._load_document(PlanType.DIET, plan_id, user_id)
        day = _item_at(document.get("days"), day_index)
        meal = _item_at(day.get("meals"), meal_index) if day else None
        if meal is None:
            raise NotFoundError("meal")

        image_url, model = await self._ask_url(
            prompts.MEAL_IMAGE_SYSTEM_PROMPT,
            prompts.meal_image_prompt(day, meal),
        )
        meal["imageUrl"] = image_url
        await self._store(plan, document)
        logger.info("Image attached to diet plan %s day %d meal %d", plan.id, day_index, meal_index)
        return plan, model
