"""Reading a vision model's "is this food?" verdict."""
import re
from typing import Any, Dict

from healthylife.utilities.constants import DEFAULT_FOOD_CONFIDENCE, FOOD_CONFIDENCE, FOOD_LABEL_PATTERN

_FOOD_LABEL = re.compile(FOOD_LABEL_PATTERN)


def looks_like_food(verdict: Dict[str, Any], provider: str) -> bool:
    """True when the verdict says food outright, is confident enough, or names a dish.

    ``verdict`` is the parsed ``{"isFood", "confidence", "label"}`` object.
    """
    if verdict.get("isFood") is True:
        return True
    confidence = verdict.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        if confidence >= FOOD_CONFIDENCE.get(provider, DEFAULT_FOOD_CONFIDENCE):
            return True
    label = str(verdict.get("label") or "").lower()
    return bool(_FOOD_LABEL.search(label))


__all__ = ['looks_like_food']
