"""Nutritionix natural-language nutrient lookup ("2 eggs and toast" -> kcal)."""
from typing import Any, Dict, Optional

import httpx

from healthylife.domain.Meal import MealEstimate
from healthylife.utilities.config import NUTRITIONIX_BASE_URL, PROVIDER_TIMEOUT_SECONDS


def _first_food(data: Any) -> Dict[str, Any]:
    foods = data.get("foods") if isinstance(data, dict) else None
    if isinstance(foods, list) and foods and isinstance(foods[0], dict):
        return foods[0]
    return {}


class NutritionixEstimator:
    name = "nutritionix"

    def __init__(self, app_id: str, api_key: str, *, base_url: str = NUTRITIONIX_BASE_URL,
                 timeout: float = PROVIDER_TIMEOUT_SECONDS, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._headers = {"x-app-id": app_id, "x-app-key": api_key, "Content-Type": "application/json"}
        self._url = f"{base_url.rstrip('/')}/natural/nutrients"
        self._timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"<NutritionixEstimator {self._url}>"

    async def estimate(self, query: str) -> MealEstimate:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(self._url, json={"query": query}, headers=self._headers)
            resp.raise_for_status()
            first = _first_food(resp.json())
        macros = {
            "protein": first.get("nf_protein"),
            "carbs": first.get("nf_total_carbohydrate"),
            "fat": first.get("nf_total_fat"),
        }
        return MealEstimate(
            name=str(first.get("food_name") or query),
            calories=float(int(float(first.get("nf_calories") or 0) + 0.5)),
            source=self.name,
            macros=macros,
            details=first,
        )


__all__ = ['NutritionixEstimator']
