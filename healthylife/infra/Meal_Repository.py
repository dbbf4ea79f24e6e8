import logging
from pathlib import Path
from threading import Lock
from typing import List, Optional

from healthylife.domain.Meal import Meal
from healthylife.infra.json_store import atomic_write_json, load_json
from healthylife.infra.paths import MEALS_FILE

logger = logging.getLogger(__name__)

_write_lock = Lock()


class MealRepository:
    """Logged meals in a JSON file: a list of meal dicts, oldest first."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or MEALS_FILE)

    def _load(self) -> list:
        rows = load_json(self.path, [])
        return rows if isinstance(rows, list) else []

    def add(self, meal: Meal) -> Meal:
        with _write_lock:
            rows = self._load()
            rows.append(meal.to_dict())
            atomic_write_json(self.path, rows)
        logger.info("Meal logged: %s", meal)
        return meal

    def list_for(self, user_id: str) -> List[Meal]:
        """A user's meals, newest first."""
        meals = [Meal.from_dict(r) for r in self._load() if isinstance(r, dict) and r.get("user_id") == user_id]
        meals.sort(key=lambda m: m.timestamp, reverse=True)
        return meals

    def delete(self, user_id: str, meal_id: str) -> bool:
        """Remove one of the user's meals; False when no such meal belongs to them."""
        with _write_lock:
            rows = self._load()
            kept = [r for r in rows if not (isinstance(r, dict) and r.get("id") == meal_id and r.get("user_id") == user_id)]
            if len(kept) == len(rows):
                return False
            atomic_write_json(self.path, kept)
        return True


__all__ = ['MealRepository']
