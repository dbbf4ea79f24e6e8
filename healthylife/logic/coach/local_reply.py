"""Deterministic coaching reply used when no remote provider answers.

Template selection depends only on keywords in the latest message; the diet
preference only changes the protein wording inside the chosen template.
"""
import re
from typing import List

from healthylife.domain.Reply import ChatMessage
from healthylife.utilities.constants import (
    CALORIE_BULLETS,
    RECIPE_BULLETS,
    GROCERY_BULLETS,
    GENERIC_BULLETS,
    PROTEIN_SOURCES,
    DIET_VEG,
    DIET_NON_VEG,
)

_TOPICS = (
    (re.compile(r"calorie|kcal|energy"), CALORIE_BULLETS),
    (re.compile(r"recipe|meal|cook|dish"), RECIPE_BULLETS),
    (re.compile(r"grocery|shopping|buy"), GROCERY_BULLETS),
)
_MAX_ECHO = 120


def preference_label(diet_preference: str) -> str:
    return "vegetarian" if diet_preference == DIET_VEG else "non-vegetarian"


def select_bullets(text: str) -> tuple:
    ask = (text or "").lower()
    for pattern, bullets in _TOPICS:
        if pattern.search(ask):
            return bullets
    return GENERIC_BULLETS


def build_local_reply(messages: List[ChatMessage], diet_preference: str) -> str:
    last = messages[-1].content if messages else ""
    diet = DIET_VEG if diet_preference == DIET_VEG else DIET_NON_VEG
    bullets = [
        b.format(pref_label=preference_label(diet), protein=PROTEIN_SOURCES[diet])
        for b in select_bullets(last)
    ]
    if last:
        echo = last[:_MAX_ECHO] + ("..." if len(last) > _MAX_ECHO else "")
        intro = f"Here's a quick, actionable guide for your request: \"{echo}\""
    else:
        intro = "Here's a quick, actionable guide:"
    return intro + "\n• " + "\n• ".join(bullets)


__all__ = ['build_local_reply', 'select_bullets', 'preference_label']
