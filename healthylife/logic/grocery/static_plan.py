"""Static grocery plan and the cart-scored recipe fallback."""
from datetime import date as _date
from typing import Dict, List, Any, Iterable

from healthylife.domain.RecipeSuggestion import RecipeSuggestion
from healthylife.utilities.constants import BASE_ITEMS, STATIC_RECIPES, DIET_VEG, DIET_NON_VEG, DATE_FORMAT


def normalize_diet(diet: Any) -> str:
    """Anything other than 'non-veg' is treated as 'veg'."""
    return DIET_NON_VEG if diet == DIET_NON_VEG else DIET_VEG


def static_recipes(diet: str) -> List[RecipeSuggestion]:
    return [RecipeSuggestion.from_dict(r) for r in STATIC_RECIPES[normalize_diet(diet)]]


def static_plan(diet: str, week: str = None) -> Dict[str, Any]:
    """Base grocery items for a diet. Recipes come from the recommend endpoint."""
    diet = normalize_diet(diet)
    return {
        "diet": diet,
        "week": week or _date.today().strftime(DATE_FORMAT),
        "items": [{"name": name} for name in BASE_ITEMS[diet]],
        "recipes": [],
        "meta": {"source": "static"},
    }


def _cart_names(cart: Iterable[Any]) -> set:
    names = set()
    for entry in cart or []:
        name = entry.get("name") if isinstance(entry, dict) else getattr(entry, "name", entry)
        names.add(str(name or "").lower())
    return names


def score_recipes(recipes: List[RecipeSuggestion], cart: Iterable[Any]) -> List[RecipeSuggestion]:
    """Order recipes by how many of their items are in the cart.

    Every recipe is kept; equal scores keep their original order.
    """
    have = _cart_names(cart)
    return sorted(recipes, key=lambda r: -r.score(have))


def scored_fallback(diet: str, cart: Iterable[Any]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in score_recipes(static_recipes(diet), cart)]


__all__ = ['normalize_diet', 'static_recipes', 'static_plan', 'score_recipes', 'scored_fallback']
