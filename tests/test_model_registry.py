"""Tests for model selection and usage accounting."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from fitcoach.core.exceptions import NoModelsAvailableError
from fitcoach.models.ai_model import AiModel
from fitcoach.repositories.ai_model_repository import AiModelRepository, ModelChoice


async def _add(session, name, usage=0, enabled=True, updated_at=None, type="GEMINI"):
    model = AiModel(
        name=name,
        type=type,
        enabled=enabled,
        usage_count=usage,
        updated_at=updated_at or datetime.utcnow(),
    )
    session.add(model)
    await session.flush()
    return model


class TestPickModel:
    @pytest.mark.asyncio
    async def test_empty_registry_raises(self, session):
        with pytest.raises(NoModelsAvailableError):
            await AiModelRepository(session).pick_model()

    @pytest.mark.asyncio
    async def test_all_disabled_raises(self, session):
        await _add(session, "a", enabled=False)
        with pytest.raises(NoModelsAvailableError):
            await AiModelRepository(session).pick_model()

    @pytest.mark.asyncio
    async def test_picks_least_used(self, session):
        await _add(session, "busy", usage=5)
        await _add(session, "idle", usage=1)
        choice = await AiModelRepository(session).pick_model()
        assert choice.name == "idle"

    @pytest.mark.asyncio
    async def test_disabled_model_never_picked(self, session):
        await _add(session, "off", usage=0, enabled=False)
        await _add(session, "on", usage=9)
        choice = await AiModelRepository(session).pick_model()
        assert choice.name == "on"

    @pytest.mark.asyncio
    async def test_unset_enabled_flag_counts_as_enabled(self, session):
        await _add(session, "legacy", enabled=None)
        choice = await AiModelRepository(session).pick_model()
        assert choice.name == "legacy"

    @pytest.mark.asyncio
    async def test_tie_broken_by_oldest_update_then_id(self, session):
        now = datetime.utcnow()
        await _add(session, "recent", usage=2, updated_at=now)
        await _add(session, "stale", usage=2, updated_at=now - timedelta(hours=1))
        choice = await AiModelRepository(session).pick_model()
        assert choice.name == "stale"

    @pytest.mark.asyncio
    async def test_tie_on_update_broken_by_id(self, session):
        same = datetime.utcnow()
        first = await _add(session, "first", updated_at=same)
        await _add(session, "second", updated_at=same)
        choice = await AiModelRepository(session).pick_model()
        assert choice.id == first.id

    @pytest.mark.asyncio
    async def test_choice_carries_type(self, session):
        await _add(session, "llama", type="GROQ")
        choice = await AiModelRepository(session).pick_model()
        assert choice == ModelChoice(id=choice.id, name="llama", type="GROQ")


class TestRecordUsage:
    @pytest.mark.asyncio
    async def test_increments_by_id(self, session):
        model = await _add(session, "a", usage=3)
        repo = AiModelRepository(session)

        await repo.record_usage(ModelChoice(id=model.id, name="a", type="GEMINI"))
        await session.refresh(model)

        assert model.usage_count == 4

    @pytest.mark.asyncio
    async def test_increment_bumps_updated_at(self, session):
        old = datetime.utcnow() - timedelta(days=1)
        model = await _add(session, "a", updated_at=old)

        await AiModelRepository(session).record_usage(ModelChoice(id=model.id, name="a", type="GEMINI"))
        await session.refresh(model)

        assert model.updated_at > old

    @pytest.mark.asyncio
    async def test_unknown_id_falls_back_to_name_and_type(self, session):
        model = await _add(session, "a", usage=1)

        await AiModelRepository(session).record_usage(ModelChoice(id=9999, name="a", type="GEMINI"))
        await session.refresh(model)

        assert model.usage_count == 2

    @pytest.mark.asyncio
    async def test_missing_record_is_inserted(self, session):
        repo = AiModelRepository(session)
        await repo.record_usage(ModelChoice(name="gemini-2.0-flash", type="GEMINI"))

        created = await repo.get_by_name("gemini-2.0-flash")
        assert created is not None
        assert created.usage_count == 1
        assert created.enabled is True

    @pytest.mark.asyncio
    async def test_usage_spreads_across_models(self, session):
        await _add(session, "a")
        await _add(session, "b")
        repo = AiModelRepository(session)

        picked = []
        for _ in range(4):
            choice = await repo.pick_model()
            picked.append(choice.name)
            await repo.record_usage(choice)
            session.expire_all()

        assert sorted(picked) == ["a", "a", "b", "b"]
        counts = (await session.execute(select(AiModel.usage_count))).scalars().all()
        assert sorted(counts) == [2, 2]
