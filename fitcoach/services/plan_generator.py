"""
Plan generation - turns a user profile into a stored workout or diet plan.

Responsible for:
- Building the prompt from the profile, an optional note and the user's language
- Asking the AI router for JSON output
- Validating workout plans (and diet plans when enabled) and retrying
  malformed output (bounded, no delay)
- Storing the result as the user's single active plan plus the prompt transcript
"""
import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.exceptions import (
    GenerationFailedError,
    NotFoundError,
    PlanValidationError,
    ProviderError,
)
from fitcoach.llm.base import JSON_MIME_TYPE, ChatMessage, ChatOptions
from fitcoach.llm.router import AiResult, AiRouter
from fitcoach.models.enums import MessageRole, PlanType
from fitcoach.models.message import Message
from fitcoach.models.plan import PlanRecordMixin
from fitcoach.models.user import UserProfile
from fitcoach.repositories.message_repository import MessageRepository
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.repositories.user_repository import UserRepository
from fitcoach.services import prompts
from fitcoach.services.plan_validation import (
    parse_plan_json,
    serialize_plan,
    validate_diet_plan,
    validate_workout_plan,
)

logger = logging.getLogger(__name__)

JSON_OPTIONS = ChatOptions(response_mime_type=JSON_MIME_TYPE)


@dataclass(frozen=True)
class GeneratedPlan:
    document: dict
    text: str
    result: AiResult
    attempts: int


class PlanGenerator:
    """
    Bounded retry loop around the router for one kind of plan.

    Each attempt goes back through the router, so a retry usually lands on a
    different model. Malformed JSON, schema violations and provider errors
    fail the attempt; configuration problems and an empty model registry
    are raised immediately since another attempt cannot fix them.
    """

    kind: str = "plan"

    def __init__(self, router: AiRouter, max_attempts: int = 3):
        self._router = router
        self.max_attempts = max(1, max_attempts)

    def validate(self, value: Any) -> dict:
        """Return the normalized document or raise ``PlanValidationError``."""
        raise NotImplementedError

    async def generate(self, messages: list[ChatMessage]) -> GeneratedPlan:
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._router.ask(messages, JSON_OPTIONS)
                document = self.validate(parse_plan_json(result.text))
            except (PlanValidationError, ProviderError) as e:
                last_error = e
                logger.warning(
                    "%s generation attempt %d/%d failed: %s",
                    self.kind.capitalize(),
                    attempt,
                    self.max_attempts,
                    e.message,
                )
                continue

            logger.info("%s plan generated by %s on attempt %d", self.kind.capitalize(), result.model, attempt)
            return GeneratedPlan(
                document=document,
                text=serialize_plan(document),
                result=result,
                attempts=attempt,
            )

        raise GenerationFailedError(self.kind, last_error, self.max_attempts)


class WorkoutPlanGenerator(PlanGenerator):
    kind = "workout"

    def validate(self, value: Any) -> dict:
        return validate_workout_plan(value)


class DietPlanGenerator(PlanGenerator):
    kind = "diet"

    def validate(self, value: Any) -> dict:
        return validate_diet_plan(value)


def parse_diet_document(text: str) -> dict | None:
    """The diet text as a JSON object, or None when it is not one."""
    try:
        parsed: Any = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class PlanGenerationService:
    """Generates plans for a user and persists them inside the caller's transaction."""

    def __init__(
        self,
        session: AsyncSession,
        router: AiRouter,
        settings: Settings | None = None,
    ):
        self._session = session
        self._router = router
        self.settings = settings or get_settings()
        self._users = UserRepository(session)
        self._messages = MessageRepository(session)

    async def _load_context(self, user_id: int) -> tuple[UserProfile, str]:
        profile = await self._users.get_profile(user_id)
        if profile is None:
            raise NotFoundError("profile")
        user_settings = await self._users.get_settings(user_id)
        language = prompts.normalize_language(user_settings.language if user_settings else None)
        return profile, prompts.system_prompt(language)

    async def _store_transcript(
        self,
        user_id: int,
        plan: PlanRecordMixin,
        system_prompt: str,
        user_prompt: str,
        reply: str,
        model: str,
    ) -> None:
        common = {"user_id": user_id, "plan_id": plan.id, "plan_type": plan.plan_type.value}
        await self._messages.create_many([
            Message(role=MessageRole.SYSTEM.value, content=system_prompt, **common),
            Message(role=MessageRole.USER.value, content=user_prompt, **common),
            Message(role=MessageRole.ASSISTANT.value, content=reply, model=model, **common),
        ])

    async def _run(self, generator: PlanGenerator, messages: list[ChatMessage]) -> GeneratedPlan:
        try:
            return await generator.generate(messages)
        except GenerationFailedError:
            # Usage recorded by the failed attempts is kept.
            await self._session.commit()
            raise

    async def generate_workout(self, user_id: int, note: str = "") -> PlanRecordMixin:
        profile, system_prompt = await self._load_context(user_id)
        user_prompt = prompts.workout_prompt(profile, note.strip())
        messages = [
            ChatMessage(MessageRole.SYSTEM.value, system_prompt),
            ChatMessage(MessageRole.USER.value, user_prompt),
        ]

        generated = await self._run(
            WorkoutPlanGenerator(self._router, self.settings.plan_generation_max_attempts),
            messages,
        )

        plan = await PlanRepository(self._session, PlanType.WORKOUT).save_active(
            user_id,
            {
                "plan_text": generated.text,
                "structured_plan": generated.document,
                "model": generated.result.model,
                "prompt_version": self.settings.prompt_version,
            },
            default_title="Workout plan",
            default_description=f"{profile.goal} · {profile.days_per_week} days/week",
        )
        await self._store_transcript(
            user_id, plan, system_prompt, user_prompt, generated.text, generated.result.model
        )
        return plan

    async def generate_diet(self, user_id: int, note: str = "") -> PlanRecordMixin:
        """Generate and store a diet plan.

        By default this is a single attempt and the reply is stored as
        returned, without schema checks. With ``validate_diet_plans`` on, the
        reply goes through the same validated retry loop as workout plans.
        """
        profile, system_prompt = await self._load_context(user_id)
        user_prompt = prompts.diet_prompt(profile, note.strip())
        messages = [
            ChatMessage(MessageRole.SYSTEM.value, system_prompt),
            ChatMessage(MessageRole.USER.value, user_prompt),
        ]

        if self.settings.validate_diet_plans:
            generated = await self._run(
                DietPlanGenerator(self._router, self.settings.plan_generation_max_attempts),
                messages,
            )
            text, document, model = generated.text, generated.document, generated.result.model
        else:
            try:
                result = await self._router.ask(messages, JSON_OPTIONS)
            except ProviderError as e:
                logger.warning("Diet generation failed: %s", e.message)
                raise GenerationFailedError("diet", e, 1) from e
            text, document, model = result.text, parse_diet_document(result.text), result.model

        plan = await PlanRepository(self._session, PlanType.DIET).save_active(
            user_id,
            {
                "plan_text": text,
                "structured_plan": document,
                "model": model,
                "prompt_version": self.settings.prompt_version,
            },
            default_title="Diet plan",
            default_description=f"{profile.diet_type} focus" if profile.diet_type else "Balanced nutrition",
        )
        await self._store_transcript(user_id, plan, system_prompt, user_prompt, text, model)
        return plan
