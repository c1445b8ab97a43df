"""Admin management of the AI model registry."""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import require_admin
from fitcoach.core.exceptions import ConflictError, NotFoundError, ValidationError
from fitcoach.db.database import get_db
from fitcoach.models.ai_model import AiModel
from fitcoach.models.user import User
from fitcoach.repositories.ai_model_repository import AiModelRepository
from fitcoach.schemas.ai_model import AiModelCreate, AiModelUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ensure_name_free(models: AiModelRepository, name: str, exclude_id: int | None = None) -> None:
    existing = await models.get_by_name(name)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError("A model with this name already exists.", code="model_exists")


@router.get("")
async def list_models(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    models = await AiModelRepository(db).list()
    return {"models": [m.to_dict() for m in models]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_model(
    payload: AiModelCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    models = AiModelRepository(db)
    await _ensure_name_free(models, payload.name)
    model = await models.create(
        AiModel(name=payload.name, type=payload.type.value, enabled=payload.enabled, usage_count=0)
    )
    logger.info("AI model %s (%s) created by user %s", model.name, model.type, admin.id)
    return {"model": model.to_dict()}


@router.get("/{model_id}")
async def get_model(
    model_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    model = await AiModelRepository(db).get(model_id)
    if model is None:
        raise NotFoundError("model")
    return {"model": model.to_dict()}


@router.put("/{model_id}")
async def update_model(
    model_id: int,
    payload: AiModelUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    updates = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not updates:
        raise ValidationError("No updates provided.", code="no_updates")
    if "type" in updates:
        updates["type"] = updates["type"].value

    models = AiModelRepository(db)
    if "name" in updates:
        await _ensure_name_free(models, updates["name"], exclude_id=model_id)
    model = await models.update(model_id, updates)
    if model is None:
        raise NotFoundError("model")
    return {"model": model.to_dict()}


@router.delete("/{model_id}")
async def delete_model(
    model_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not await AiModelRepository(db).delete(model_id):
        raise NotFoundError("model")
    return {"ok": True}
