"""
Shared fixtures.

Provides:
- Settings pointing at an in-memory SQLite database
- A Database with all tables created, and a session on it
- A scripted fake provider and an app/client wired to both
"""
import json

import httpx
import pytest
import pytest_asyncio

from fitcoach.config.settings import Settings
from fitcoach.db.database import Database
from fitcoach.llm.base import ChatMessage, ChatOptions, LLMProvider
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.main import create_app
from fitcoach.models.ai_model import AiModel
from fitcoach.models.enums import ProviderType, UserRole
from fitcoach.models.user import User, UserProfile
from fitcoach.security import create_access_token, get_password_hash

TEST_PASSWORD = "correct-horse"


class FakeProvider(LLMProvider):
    """Provider that replays scripted replies; an exception in the script is raised."""

    provider_type = ProviderType.GEMINI
    display_name = "Fake"
    api_key_env = "FAKE_API_KEY"

    def __init__(self, replies=None, settings: Settings | None = None):
        super().__init__(api_key="test-key", settings=settings)
        self.replies = list(replies or [])
        self.calls: list[tuple[list[ChatMessage], ChatOptions, str | None]] = []

    def _default_base_url(self) -> str:
        return "http://fake.invalid"

    def _settings_api_key(self) -> str | None:
        return "test-key"

    async def send(self, messages, options, model_name):
        self.calls.append((messages, options, model_name))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def workout_plan_document(**overrides) -> dict:
    plan = {
        "location": "home",
        "availableEquipment": ["dumbbells"],
        "generalNotes": "Talk to a professional before starting.",
        "days": [
            {
                "dayIndex": 1,
                "label": "Day 1 - Full Body",
                "focus": "Full body",
                "isRestDay": False,
                "notes": "Go easy.",
                "exercises": [
                    {
                        "name": "Goblet squat",
                        "equipment": "dumbbell",
                        "sets": 3,
                        "reps": "10-12",
                        "restSeconds": 60,
                        "order": 1,
                    },
                    {
                        "name": "Push-up",
                        "equipment": "bodyweight",
                        "sets": 3,
                        "reps": "8",
                        "restSeconds": 60,
                        "order": 2,
                        "tempo": "2-0-2",
                    },
                ],
            },
            {
                "dayIndex": 2,
                "label": "Day 2 - Rest",
                "focus": "Recovery",
                "isRestDay": True,
                "notes": "Walk if you like.",
            },
        ],
    }
    plan.update(overrides)
    return plan


def workout_plan_json(**overrides) -> str:
    return json.dumps(workout_plan_document(**overrides))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret",
        json_logs=False,
        gemini_api_key="test-gemini-key",
        plan_generation_max_attempts=3,
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url, settings=settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session_maker() as s:
        yield s


@pytest.fixture
def fake_provider(settings) -> FakeProvider:
    return FakeProvider(settings=settings)


@pytest.fixture
def app(settings, database, fake_provider):
    application = create_app(settings)
    # The ASGI test transport does not run the lifespan, wire state directly.
    application.state.database = database
    application.state.providers = ProviderRegistry({ProviderType.GEMINI: fake_provider})
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def create_user(
    database: Database,
    email: str = "user@example.com",
    role: UserRole = UserRole.USER,
    with_profile: bool = True,
) -> User:
    async with database.session() as s:
        user = User(email=email, password_hash=get_password_hash(TEST_PASSWORD), role=role.value)
        s.add(user)
        await s.flush()
        if with_profile:
            s.add(
                UserProfile(
                    user_id=user.id,
                    goal="build strength",
                    experience_level="beginner",
                    days_per_week=3,
                    preferred_location="home",
                    available_equipment=["dumbbells"],
                    allergies=[],
                    disliked_foods=[],
                    diet_type="vegetarian",
                )
            )
    return user


async def create_models(database: Database, *names: str) -> None:
    async with database.session() as s:
        for name in names:
            s.add(AiModel(name=name, type=ProviderType.GEMINI.value, enabled=True, usage_count=0))


def auth_headers(settings: Settings, user_id: int) -> dict:
    token = create_access_token(user_id, settings=settings)
    return {"Cookie": f"{settings.auth_cookie_name}={token}"}
