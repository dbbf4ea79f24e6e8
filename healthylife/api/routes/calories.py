import logging
from datetime import date as _date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from healthylife.api.auth import required_user, user_id
from healthylife.domain.CalorieDay import CalorieDay
from healthylife.infra.Calorie_Repository import CalorieRepository
from healthylife.logic.budget.smart_budget import compute_smart_budget, window_start

router = APIRouter(prefix="/api/calories", tags=["Calories"])
logger = logging.getLogger(__name__)


def get_calorie_repository() -> CalorieRepository:
    return CalorieRepository()


class CalorieDayIn(BaseModel):
    date: _date
    dailyGoal: float = Field(..., ge=0)
    dailyIntake: float = Field(..., ge=0)


@router.post("/history")
def log_day(payload: CalorieDayIn, user: dict = Depends(required_user),
            repo: CalorieRepository = Depends(get_calorie_repository)):
    record = CalorieDay(user_id(user), payload.date, payload.dailyGoal, payload.dailyIntake)
    repo.upsert(record)
    logger.info("Calorie history saved: %s", record)
    return record.to_dict()


@router.get("/smart-budget")
def smart_budget(user: dict = Depends(required_user), repo: CalorieRepository = Depends(get_calorie_repository)):
    history = repo.history_for(user_id(user), since=window_start())
    return compute_smart_budget(history)
