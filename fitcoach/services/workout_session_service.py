"""Workout session logging against a stored workout plan."""
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.core.exceptions import NotFoundError, ValidationError
from fitcoach.models.enums import PlanType
from fitcoach.models.workout_session import WorkoutSession
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.repositories.workout_session_repository import WorkoutSessionRepository
from fitcoach.schemas.workout_session import (
    WorkoutSessionCreate,
    WorkoutSessionUpdate,
    dump_exercises,
    duration_seconds,
)

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 200


def find_plan_day(document: dict | None, plan_day_index: int) -> dict | None:
    """Find a day by its ``dayIndex``, falling back to its position."""
    days = (document or {}).get("days") or []
    for day in days:
        if isinstance(day, dict) and day.get("dayIndex") == plan_day_index:
            return day
    position = max(plan_day_index - 1, 0)
    if position < len(days) and isinstance(days[position], dict):
        return days[position]
    return None


class WorkoutSessionService:
    def __init__(self, session: AsyncSession):
        self._plans = PlanRepository(session, PlanType.WORKOUT)
        self._sessions = WorkoutSessionRepository(session)

    async def start(self, user_id: int, data: WorkoutSessionCreate) -> WorkoutSession:
        plan = await self._plans.get_for_user(data.plan_id, user_id)
        if plan is None or not plan.structured_plan:
            raise NotFoundError("plan")

        day = find_plan_day(plan.structured_plan, data.plan_day_index)
        if day is None:
            raise ValidationError("Plan day not found.", code="plan_day_not_found")

        started_at = data.started_at or datetime.utcnow()
        exercises = dump_exercises(data.exercises)
        planned = day.get("exercises") or []
        for index, exercise in enumerate(exercises):
            if not exercise.get("name") and index < len(planned):
                exercise["name"] = planned[index].get("name")
            exercise.setdefault("order", index + 1)

        workout_session = WorkoutSession(
            user_id=user_id,
            plan_id=plan.id,
            plan_day_index=data.plan_day_index,
            plan_day_label=day.get("label") or f"Day {data.plan_day_index}",
            started_at=started_at,
            ended_at=data.ended_at,
            total_duration_seconds=(
                data.total_duration_seconds
                if data.total_duration_seconds is not None
                else duration_seconds(started_at, data.ended_at)
            ),
            status=data.status.value,
            perceived_intensity=data.perceived_intensity,
            energy_level=data.energy_level,
            pain_or_discomfort=(
                data.pain_or_discomfort.model_dump(by_alias=True, exclude_none=True)
                if data.pain_or_discomfort
                else None
            ),
            notes=data.notes,
            exercises=exercises,
        )
        await self._sessions.create(workout_session)
        logger.info("Workout session %s started for plan %s day %d", workout_session.id, plan.id, data.plan_day_index)
        return workout_session

    async def get(self, user_id: int, session_id: int) -> WorkoutSession:
        workout_session = await self._sessions.get_for_user(session_id, user_id)
        if workout_session is None:
            raise NotFoundError("session")
        return workout_session

    async def list(
        self,
        user_id: int,
        plan_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
    ) -> list[WorkoutSession]:
        filter: dict = {"user_id": user_id}
        if plan_id is not None:
            filter["plan_id"] = plan_id
        if start is not None:
            filter["start_date"] = start
        if end is not None:
            filter["end_date"] = end
        return await self._sessions.list(filter, limit=min(max(limit, 1), MAX_LIST_LIMIT))

    async def update(self, user_id: int, session_id: int, data: WorkoutSessionUpdate) -> WorkoutSession:
        """Apply an autosave patch; only fields present in the payload change."""
        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            raise ValidationError("No updates provided.", code="no_updates")

        workout_session = await self.get(user_id, session_id)

        updates: dict = {}
        for key in ("started_at", "ended_at", "total_duration_seconds", "perceived_intensity", "energy_level", "notes"):
            if key in fields:
                updates[key] = fields[key]
        if data.status is not None:
            updates["status"] = data.status.value
        if data.pain_or_discomfort is not None:
            updates["pain_or_discomfort"] = data.pain_or_discomfort.model_dump(by_alias=True, exclude_none=True)
        if data.exercises is not None:
            updates["exercises"] = dump_exercises(data.exercises)

        if "total_duration_seconds" not in updates and ("started_at" in updates or "ended_at" in updates):
            computed = duration_seconds(
                updates.get("started_at", workout_session.started_at),
                updates.get("ended_at", workout_session.ended_at),
            )
            if computed is not None:
                updates["total_duration_seconds"] = computed

        return await self._sessions.update(workout_session.id, updates)
