"""Workout session logging endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import get_current_user_id
from fitcoach.db.database import get_db
from fitcoach.schemas.datetime import parse_datetime
from fitcoach.schemas.workout_session import WorkoutSessionCreate, WorkoutSessionUpdate
from fitcoach.services.workout_session_service import MAX_LIST_LIMIT, WorkoutSessionService

router = APIRouter()


def _optional_datetime(value: str | None):
    try:
        return parse_datetime(value)
    except ValueError:
        return None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: WorkoutSessionCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workout_session = await WorkoutSessionService(db).start(user_id, payload)
    return {"session": workout_session.to_dict()}


@router.get("")
async def list_sessions(
    plan_id: int | None = Query(default=None, alias="planId"),
    start: str | None = Query(default=None, alias="from"),
    end: str | None = Query(default=None, alias="to"),
    limit: int = Query(default=50, ge=1, le=MAX_LIST_LIMIT),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    sessions = await WorkoutSessionService(db).list(
        user_id,
        plan_id=plan_id,
        start=_optional_datetime(start),
        end=_optional_datetime(end),
        limit=limit,
    )
    return {"sessions": [s.to_dict() for s in sessions]}


@router.get("/{session_id}")
async def get_session(
    session_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workout_session = await WorkoutSessionService(db).get(user_id, session_id)
    return {"session": workout_session.to_dict()}


@router.patch("/{session_id}")
async def update_session(
    session_id: int,
    payload: WorkoutSessionUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workout_session = await WorkoutSessionService(db).update(user_id, session_id, payload)
    return {"session": workout_session.to_dict()}
