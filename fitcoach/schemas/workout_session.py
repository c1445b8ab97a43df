"""Workout session logging payloads.

Exercise logs are stored as JSON, so they are dumped with their wire
(camelCase) keys.
"""
from datetime import datetime

from pydantic import Field

from fitcoach.models.enums import ExerciseStatus, SessionStatus
from fitcoach.schemas.datetime import UtcDateTime
from fitcoach.schemas.plan import CamelModel


class SetLog(CamelModel):
    set_index: int = Field(ge=0)
    started_at: UtcDateTime = None
    ended_at: UtcDateTime = None
    target_reps: str | None = None
    weight_kg: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    completed: bool = False
    notes: str | None = None


class ExerciseLog(CamelModel):
    exercise_id: str | None = None
    name: str | None = None
    equipment: str | None = None
    order: int | None = None
    started_at: UtcDateTime = None
    ended_at: UtcDateTime = None
    status: ExerciseStatus = ExerciseStatus.PARTIAL
    total_sets_planned: int | None = Field(default=None, ge=0)
    total_sets_completed: int | None = Field(default=None, ge=0)
    sets: list[SetLog] = Field(default_factory=list)


class PainReport(CamelModel):
    had_pain: bool = False
    description: str | None = None


class WorkoutSessionBase(CamelModel):
    started_at: UtcDateTime = None
    ended_at: UtcDateTime = None
    total_duration_seconds: int | None = Field(default=None, ge=0)
    perceived_intensity: int | None = Field(default=None, ge=1, le=10)
    energy_level: int | None = Field(default=None, ge=1, le=5)
    pain_or_discomfort: PainReport | None = None
    notes: str | None = Field(default=None, max_length=4000)
    exercises: list[ExerciseLog] | None = None


class WorkoutSessionCreate(WorkoutSessionBase):
    plan_id: int
    plan_day_index: int = Field(ge=0)
    status: SessionStatus = SessionStatus.PARTIAL


class WorkoutSessionUpdate(WorkoutSessionBase):
    status: SessionStatus | None = None


def dump_exercises(exercises: list[ExerciseLog] | None) -> list[dict]:
    return [
        exercise.model_dump(by_alias=True, exclude_none=True, mode="json")
        for exercise in exercises or []
    ]


def duration_seconds(started_at: datetime | None, ended_at: datetime | None) -> int | None:
    if started_at is None or ended_at is None:
        return None
    return max(0, int((ended_at - started_at).total_seconds()))
