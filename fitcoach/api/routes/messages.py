"""Chat assistant endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import get_ai_router, get_current_user_id
from fitcoach.db.database import get_db
from fitcoach.llm.router import AiRouter
from fitcoach.repositories.message_repository import MessageRepository
from fitcoach.schemas.message import MessageCreate, MessageRating
from fitcoach.services.chat import ChatService

router = APIRouter()

MAX_MESSAGES = 50


@router.get("")
async def list_messages(
    plan_id: int | None = Query(default=None, alias="planId"),
    limit: int = Query(default=MAX_MESSAGES, ge=1),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    messages = await MessageRepository(db).list_recent(user_id, plan_id, limit=min(limit, MAX_MESSAGES))
    return {"messages": [m.to_dict() for m in messages]}


@router.post("")
async def send_message(
    payload: MessageCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ai_router: AiRouter = Depends(get_ai_router),
):
    saved = await ChatService(db, ai_router).send(user_id, payload.content, payload.plan_id)
    return {"messages": [m.to_dict() for m in saved]}


@router.post("/rate")
async def rate_message(
    payload: MessageRating,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    message = await ChatService(db).rate(user_id, payload.plan_id, payload.plan_type, payload.rating)
    return {"message": message.to_dict()}
