"""Tests for plan generation: retry loop, persistence and transcripts."""
import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from sqlalchemy import func, select

from fitcoach.core.exceptions import (
    ConfigurationError,
    GenerationFailedError,
    NoModelsAvailableError,
    NotFoundError,
    PlanValidationError,
    ProviderError,
    ProviderRateLimitError,
)
from fitcoach.llm.gemini_provider import GeminiProvider
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.llm.router import AiResult, AiRouter
from fitcoach.models.ai_model import AiModel
from fitcoach.models.enums import MessageRole, PlanType, ProviderType
from fitcoach.models.message import Message
from fitcoach.models.plan import DietPlanRecord, WorkoutPlanRecord
from fitcoach.repositories.ai_model_repository import AiModelRepository
from fitcoach.schemas.plan import DIET_PLAN_EXAMPLE
from fitcoach.services.plan_generator import (
    DietPlanGenerator,
    PlanGenerationService,
    WorkoutPlanGenerator,
    parse_diet_document,
)

from conftest import FakeProvider, create_models, create_user, workout_plan_json

MESSAGES = []


def _router(*replies):
    router = Mock(spec=AiRouter)
    router.ask = AsyncMock(
        side_effect=[
            r if isinstance(r, Exception) else AiResult(text=r, model=f"model-{i}", type="GEMINI")
            for i, r in enumerate(replies)
        ]
    )
    return router


class TestWorkoutPlanGenerator:
    @pytest.mark.asyncio
    async def test_valid_first_reply_needs_one_attempt(self):
        router = _router(workout_plan_json())
        generated = await WorkoutPlanGenerator(router, 3).generate(MESSAGES)

        assert generated.attempts == 1
        assert router.ask.await_count == 1
        assert generated.text == json.dumps(generated.document, indent=2, ensure_ascii=False)

    @pytest.mark.asyncio
    async def test_requests_json_output(self):
        router = _router(workout_plan_json())
        await WorkoutPlanGenerator(router, 3).generate(MESSAGES)

        options = router.ask.await_args.args[1]
        assert options.wants_json

    @pytest.mark.asyncio
    async def test_invalid_then_valid_succeeds_on_second_attempt(self):
        router = _router("not json", workout_plan_json())
        generated = await WorkoutPlanGenerator(router, 3).generate(MESSAGES)

        assert generated.attempts == 2
        assert generated.result.model == "model-1"

    @pytest.mark.asyncio
    async def test_exhaustion_wraps_last_error(self):
        broken = json.loads(workout_plan_json())
        del broken["days"][0]["exercises"][0]["sets"]
        router = _router("{", "[]", json.dumps(broken))

        with pytest.raises(GenerationFailedError) as exc_info:
            await WorkoutPlanGenerator(router, 3).generate(MESSAGES)

        error = exc_info.value
        assert error.attempts == 3
        assert isinstance(error.last_error, PlanValidationError)
        assert "days[0].exercises[0].sets must be a number" in error.last_error.message
        assert router.ask.await_count == 3

    @pytest.mark.asyncio
    async def test_provider_errors_are_retried(self):
        router = _router(ProviderError("Groq", "boom"), workout_plan_json())
        generated = await WorkoutPlanGenerator(router, 3).generate(MESSAGES)
        assert generated.attempts == 2

    @pytest.mark.asyncio
    async def test_rate_limit_kept_as_last_error(self):
        limit = ProviderRateLimitError("Gemini", "Rate limit reached. Please try again in 5s.")
        router = _router(limit, limit)

        with pytest.raises(GenerationFailedError) as exc_info:
            await WorkoutPlanGenerator(router, 2).generate(MESSAGES)
        assert exc_info.value.last_error is limit

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ConfigurationError("GEMINI_API_KEY is not set"), NoModelsAvailableError()],
    )
    async def test_unrecoverable_errors_are_not_retried(self, error):
        router = _router(error, workout_plan_json())

        with pytest.raises(type(error)):
            await WorkoutPlanGenerator(router, 3).generate(MESSAGES)
        assert router.ask.await_count == 1


class TestDietPlanGenerator:
    @pytest.mark.asyncio
    async def test_invalid_diet_is_retried(self):
        bad = json.dumps({**DIET_PLAN_EXAMPLE, "mealsPerDay": "3"})
        router = _router(bad, "Eat well.", json.dumps(DIET_PLAN_EXAMPLE))

        generated = await DietPlanGenerator(router, 3).generate(MESSAGES)

        assert generated.attempts == 3
        assert generated.document == DIET_PLAN_EXAMPLE
        assert generated.result.model == "model-2"

    @pytest.mark.asyncio
    async def test_exhaustion_is_a_diet_failure_with_path(self):
        plan = json.loads(json.dumps(DIET_PLAN_EXAMPLE))
        plan["days"][0]["meals"][0]["approxCalories"] = "lots"
        router = _router(json.dumps(plan), json.dumps(plan))

        with pytest.raises(GenerationFailedError) as exc_info:
            await DietPlanGenerator(router, 2).generate(MESSAGES)

        assert exc_info.value.kind == "diet"
        assert exc_info.value.last_error.message == "days[0].meals[0].approxCalories must be a number"


class TestParseDietDocument:
    def test_object_is_kept(self):
        assert parse_diet_document('{"dietType": "vegan"}') == {"dietType": "vegan"}

    def test_prose_is_not_a_document(self):
        assert parse_diet_document("Eat more vegetables.") is None

    def test_array_is_not_a_document(self):
        assert parse_diet_document("[1, 2]") is None


async def _count(database, model, *where):
    async with database.session() as s:
        return (await s.execute(select(func.count()).select_from(model).where(*where))).scalar_one()


class TestPlanGenerationService:
    @pytest.mark.asyncio
    async def test_fail_then_success_persists_one_active_plan(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a", "gemini-b")
        provider = FakeProvider(["not json", workout_plan_json()], settings=settings)

        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            plan = await PlanGenerationService(s, router, settings).generate_workout(user.id, "  knee friendly ")

        assert plan.is_active is True
        assert plan.title == "Workout plan"
        assert plan.description == "build strength · 3 days/week"
        assert plan.structured_plan["days"][1]["exercises"] == []
        assert plan.plan_text == json.dumps(plan.structured_plan, indent=2, ensure_ascii=False)
        assert plan.prompt_version == settings.prompt_version

        # Both attempts reached a model, so both were counted.
        async with database.session() as s:
            usage = (await s.execute(select(func.sum(AiModel.usage_count)))).scalar_one()
        assert usage == 2
        assert await _count(database, WorkoutPlanRecord, WorkoutPlanRecord.is_active.is_(True)) == 1

        prompt = provider.calls[0][0][1].content
        assert "Extra note: knee friendly" in prompt
        assert "Goal: build strength" in prompt

    @pytest.mark.asyncio
    async def test_transcript_is_stored_with_plan(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        provider = FakeProvider([workout_plan_json()], settings=settings)

        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            plan = await PlanGenerationService(s, router, settings).generate_workout(user.id)

        async with database.session() as s:
            messages = (
                await s.execute(select(Message).where(Message.plan_id == plan.id).order_by(Message.id))
            ).scalars().all()
        assert [m.role for m in messages] == [
            MessageRole.SYSTEM.value,
            MessageRole.USER.value,
            MessageRole.ASSISTANT.value,
        ]
        assert all(m.plan_type == PlanType.WORKOUT.value for m in messages)
        assert messages[2].model == "gemini-a"
        assert "Respond in English." in messages[0].content

    @pytest.mark.asyncio
    async def test_regeneration_updates_active_plan_in_place(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        provider = FakeProvider([workout_plan_json(), workout_plan_json(location="gym")], settings=settings)

        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            first = await PlanGenerationService(s, router, settings).generate_workout(user.id)
            first.title = "My own title"
        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            second = await PlanGenerationService(s, router, settings).generate_workout(user.id)

        assert second.id == first.id
        assert second.title == "My own title"
        assert second.structured_plan["location"] == "gym"

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_usage_and_stores_nothing(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        provider = FakeProvider(["{", "{", "{"], settings=settings)

        with pytest.raises(GenerationFailedError):
            async with database.session() as s:
                router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
                await PlanGenerationService(s, router, settings).generate_workout(user.id)

        assert await _count(database, WorkoutPlanRecord) == 0
        async with database.session() as s:
            model = await AiModelRepository(s).get_by_name("gemini-a")
        assert model.usage_count == 3

    @pytest.mark.asyncio
    async def test_missing_profile_raises_not_found(self, database, settings):
        user = await create_user(database, with_profile=False)

        async with database.session() as s:
            service = PlanGenerationService(s, _router(), settings)
            with pytest.raises(NotFoundError) as exc_info:
                await service.generate_workout(user.id)
        assert exc_info.value.code == "profile_not_found"

    @pytest.mark.asyncio
    async def test_diet_is_single_attempt_and_stored_as_returned(self, database, settings):
        user = await create_user(database)
        router = _router('{"dietType": "vegetarian", "days": []}')

        async with database.session() as s:
            plan = await PlanGenerationService(s, router, settings).generate_diet(user.id)

        assert router.ask.await_count == 1
        assert isinstance(plan, DietPlanRecord)
        assert plan.plan_text == '{"dietType": "vegetarian", "days": []}'
        assert plan.structured_plan == {"dietType": "vegetarian", "days": []}
        assert plan.description == "vegetarian focus"

    @pytest.mark.asyncio
    async def test_diet_prose_stored_without_document(self, database, settings):
        user = await create_user(database)
        router = _router("Eat balanced meals.")

        async with database.session() as s:
            plan = await PlanGenerationService(s, router, settings).generate_diet(user.id)

        assert plan.plan_text == "Eat balanced meals."
        assert plan.structured_plan is None

    @pytest.mark.asyncio
    async def test_diet_provider_error_is_generation_failure(self, database, settings):
        user = await create_user(database)
        router = _router(ProviderError("Mistral", "down"), '{"never": "used"}')

        with pytest.raises(GenerationFailedError) as exc_info:
            async with database.session() as s:
                await PlanGenerationService(s, router, settings).generate_diet(user.id)

        assert exc_info.value.kind == "diet"
        assert router.ask.await_count == 1

    @pytest.mark.asyncio
    async def test_validated_diet_retries_until_valid(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        provider = FakeProvider(['{"dietType": "vegetarian"}', json.dumps(DIET_PLAN_EXAMPLE)], settings=settings)
        strict = settings.model_copy(update={"validate_diet_plans": True})

        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            plan = await PlanGenerationService(s, router, strict).generate_diet(user.id)

        assert len(provider.calls) == 2
        assert plan.structured_plan == DIET_PLAN_EXAMPLE
        assert plan.plan_text == json.dumps(DIET_PLAN_EXAMPLE, indent=2, ensure_ascii=False)

    @pytest.mark.asyncio
    async def test_validated_diet_exhaustion_stores_nothing(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        provider = FakeProvider(["Eat well."] * 3, settings=settings)
        strict = settings.model_copy(update={"validate_diet_plans": True})

        with pytest.raises(GenerationFailedError) as exc_info:
            async with database.session() as s:
                router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
                await PlanGenerationService(s, router, strict).generate_diet(user.id)

        assert exc_info.value.kind == "diet"
        assert exc_info.value.attempts == 3
        assert await _count(database, DietPlanRecord) == 0

    @pytest.mark.asyncio
    async def test_malformed_provider_reply_counts_as_failed_attempt(self, database, settings):
        user = await create_user(database)
        await create_models(database, "gemini-a")
        replies = [
            httpx.Response(200, text="<html>upstream hiccup</html>"),
            httpx.Response(200, json={"candidates": [None]}),
            httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": workout_plan_json()}]}}]}),
        ]
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: replies.pop(0)))
        provider = GeminiProvider(settings=settings, client=client)

        async with database.session() as s:
            router = AiRouter(AiModelRepository(s), ProviderRegistry({ProviderType.GEMINI: provider}))
            plan = await PlanGenerationService(s, router, settings).generate_workout(user.id)

        assert replies == []
        assert plan.is_active is True
        assert len(plan.structured_plan["days"]) == 2
        await client.aclose()
