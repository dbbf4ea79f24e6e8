"""Logged meals and the nutrition estimate they are created from."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

MACRO_KEYS = ("protein", "carbs", "fat")


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _macros(raw: Any) -> Dict[str, float]:
    raw = raw if isinstance(raw, dict) else {}
    return {k: _number(raw.get(k)) for k in MACRO_KEYS}


class MealEstimate:
    """Name, calories and macros for one serving, plus the raw provider fields.

    ``details`` keeps whatever else the estimator returned (vitamins, fiber...)
    so it can be stored as the meal's ``meta``.
    """

    def __init__(self, name: str, calories: float, source: str,
                 macros: Optional[Dict[str, float]] = None, details: Optional[Dict[str, Any]] = None):
        self.name = name
        self.calories = calories
        self.source = source
        self.macros = _macros(macros)
        self.details = dict(details or {})

    def __str__(self) -> str:
        return f"{self.name} ~{self.calories:.0f} kcal ({self.source})"

    __repr__ = __str__

    @property
    def plausible(self) -> bool:
        return bool(self.name) and self.calories > 0

    @staticmethod
    def from_provider(parsed: Dict[str, Any], source: str, default_name: str = "meal") -> "MealEstimate":
        return MealEstimate(
            name=str(parsed.get("name") or default_name),
            calories=_number(parsed.get("calories")),
            source=source,
            macros=parsed.get("macros"),
            details=parsed,
        )

    @property
    def meta(self) -> Dict[str, Any]:
        meta = dict(self.details)
        meta["source"] = self.source
        return meta


class Meal:
    def __init__(self, user_id: str, name: str, calories: float, macros: Optional[Dict[str, float]] = None,
                 description: Optional[str] = None, image_name: Optional[str] = None,
                 meta: Optional[Dict[str, Any]] = None, timestamp: Optional[datetime] = None,
                 meal_id: Optional[str] = None):
        self.id = meal_id or uuid.uuid4().hex
        self.user_id = user_id
        self.name = name
        self.calories = calories
        self.macros = _macros(macros)
        self.description = description
        self.image_name = image_name
        self.meta = dict(meta or {})
        self.timestamp = timestamp or datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"{self.user_id} - {self.name} - {self.calories:.0f} kcal"

    __repr__ = __str__

    @staticmethod
    def from_estimate(user_id: str, estimate: MealEstimate, description: Optional[str] = None,
                      image_name: Optional[str] = None) -> "Meal":
        return Meal(user_id, estimate.name, estimate.calories, estimate.macros,
                    description=description, image_name=image_name, meta=estimate.meta)

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        try:
            stamp = datetime.fromisoformat(str(d.get("timestamp")))
        except ValueError:
            stamp = None
        return Meal(
            user_id=str(d.get("user_id") or ""),
            name=str(d.get("name") or "meal"),
            calories=_number(d.get("calories")),
            macros=d.get("macros"),
            description=d.get("description"),
            image_name=d.get("image_name"),
            meta=d.get("meta") if isinstance(d.get("meta"), dict) else {},
            timestamp=stamp,
            meal_id=d.get("id"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "calories": self.calories,
            "macros": dict(self.macros),
            "description": self.description,
            "image_name": self.image_name,
            "meta": dict(self.meta),
            "timestamp": self.timestamp.isoformat(),
        }
