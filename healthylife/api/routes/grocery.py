from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from healthylife.api.api_ai import get_orchestrator
from healthylife.logic.coach.orchestrator import CoachOrchestrator
from healthylife.logic.grocery.static_plan import static_plan

router = APIRouter(prefix="/api/grocery", tags=["Grocery"])


@router.get("")
@router.get("/")
def get_grocery(diet: Optional[str] = Query(default=None), week: Optional[str] = Query(default=None)):
    """Static base grocery list for the diet; recipes come from /recommend."""
    return static_plan(diet, week)


@router.post("/recommend")
async def recommend(request: Request, orchestrator: CoachOrchestrator = Depends(get_orchestrator)):
    # Any body (missing, malformed, a list...) still gets recipes, never an error.
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    cart = payload.get("cart") if isinstance(payload.get("cart"), list) else []
    result = await orchestrator.recommend(payload.get("diet"), cart)
    return result.to_dict()
