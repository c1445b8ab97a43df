"""Plan generation, image enrichment and active plan lookup."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.api.routes.dependencies import get_ai_router, get_app_settings, get_current_user_id
from fitcoach.config.settings import Settings
from fitcoach.db.database import get_db
from fitcoach.llm.router import AiRouter
from fitcoach.models.enums import PlanType
from fitcoach.repositories.plan_repository import PlanRepository
from fitcoach.schemas.plan import DietImageRequest, GeneratePlanRequest, WorkoutImageRequest
from fitcoach.services.image_enrichment import ImageEnrichmentService
from fitcoach.services.plan_generator import PlanGenerationService

router = APIRouter()


@router.post("/generate-workout")
async def generate_workout(
    payload: GeneratePlanRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ai_router: AiRouter = Depends(get_ai_router),
    settings: Settings = Depends(get_app_settings),
):
    plan = await PlanGenerationService(db, ai_router, settings).generate_workout(user_id, payload.note or "")
    return {"plan": plan.to_dict()}


@router.post("/generate-diet")
async def generate_diet(
    payload: GeneratePlanRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ai_router: AiRouter = Depends(get_ai_router),
    settings: Settings = Depends(get_app_settings),
):
    plan = await PlanGenerationService(db, ai_router, settings).generate_diet(user_id, payload.note or "")
    return {"plan": plan.to_dict()}


@router.post("/workout-image")
async def add_workout_image(
    payload: WorkoutImageRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ai_router: AiRouter = Depends(get_ai_router),
):
    plan, model = await ImageEnrichmentService(db, ai_router).add_exercise_image(
        user_id, payload.plan_id, payload.day_index, payload.exercise_index
    )
    return {"plan": plan.to_dict(), "model": model}


@router.post("/diet-image")
async def add_diet_image(
    payload: DietImageRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    ai_router: AiRouter = Depends(get_ai_router),
):
    plan, model = await ImageEnrichmentService(db, ai_router).add_meal_image(
        user_id, payload.plan_id, payload.day_index, payload.meal_index
    )
    return {"plan": plan.to_dict(), "model": model}


@router.get("/active")
async def get_active_plans(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workout = await PlanRepository(db, PlanType.WORKOUT).get_current(user_id)
    diet = await PlanRepository(db, PlanType.DIET).get_current(user_id)
    return {
        "workoutPlan": workout.to_dict() if workout else None,
        "dietPlan": diet.to_dict() if diet else None,
    }
