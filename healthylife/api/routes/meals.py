import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from healthylife.api.api_ai import get_orchestrator, read_image_upload
from healthylife.api.auth import required_user, user_id
from healthylife.api.routes.calories import get_calorie_repository
from healthylife.domain.Meal import Meal
from healthylife.infra.Calorie_Repository import CalorieRepository
from healthylife.infra.Meal_Repository import MealRepository
from healthylife.logic.coach.orchestrator import CoachOrchestrator
from healthylife.utilities.constants import DEFAULT_CALORIE_GOAL

router = APIRouter(prefix="/api/meals", tags=["Meals"])
logger = logging.getLogger(__name__)


def get_meal_repository() -> MealRepository:
    return MealRepository()


@router.get("")
@router.get("/")
def list_meals(user: dict = Depends(required_user), repo: MealRepository = Depends(get_meal_repository)):
    return [m.to_dict() for m in repo.list_for(user_id(user))]


@router.post("/upload", status_code=201)
async def upload_meal(image: Optional[UploadFile] = File(None), description: Optional[str] = Form(None),
                      user: dict = Depends(required_user),
                      repo: MealRepository = Depends(get_meal_repository),
                      calories: CalorieRepository = Depends(get_calorie_repository),
                      orchestrator: CoachOrchestrator = Depends(get_orchestrator)):
    """Estimate a meal from a photo and/or description, log it and add it to today's intake."""
    data, mimetype, filename = None, None, None
    if image is not None:
        data = await read_image_upload(image)
        mimetype, filename = image.content_type, image.filename
    estimate = await orchestrator.estimate_meal(data, mimetype, description=description, filename=filename)

    uid = user_id(user)
    meal = Meal.from_estimate(uid, estimate, description=description, image_name=filename)
    repo.add(meal)
    try:
        calories.add_intake(uid, date.today(), estimate.calories, user.get("calorieGoal") or DEFAULT_CALORIE_GOAL)
    except OSError:
        # Meal is already saved; only the daily total is missed.
        logger.exception("Could not add %s to today's intake", meal)
    return meal.to_dict()


@router.delete("/{meal_id}")
def delete_meal(meal_id: str, user: dict = Depends(required_user),
                repo: MealRepository = Depends(get_meal_repository)):
    if not repo.delete(user_id(user), meal_id):
        raise HTTPException(status_code=404, detail="Meal not found")
    return {"success": True}
