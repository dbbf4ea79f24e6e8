"""Recipe suggestion entity and the recommendation result returned to callers."""
from typing import List, Optional, Dict, Any


class RecipeSuggestion:
    def __init__(self, name: str = "", items: Optional[List[str]] = None, instructions: str = ""):
        self.name = name
        self.items = items[:] if items else []
        self.instructions = instructions

    def __str__(self) -> str:
        return f"{self.name} - Items: {', '.join(self.items)}"

    __repr__ = __str__

    def score(self, have: set) -> int:
        """Count items present in ``have`` (a set of lower-cased names)."""
        return sum(1 for it in self.items if str(it).lower() in have)

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        items = d.get("items") or []
        if not isinstance(items, list):
            items = [items]
        return RecipeSuggestion(
            name=str(d.get("name") or ""),
            items=[str(it) for it in items],
            instructions=str(d.get("instructions") or ""),
        )

    def to_dict(self):
        return {"name": self.name, "items": list(self.items), "instructions": self.instructions}


class RecommendationResult:
    """Recipes for a diet plus where they came from.

    ``recipes`` holds plain dicts: provider output is passed through as parsed,
    static suggestions are serialized with ``RecipeSuggestion.to_dict``.
    """

    def __init__(self, diet: str, recipes: List[Dict[str, Any]], source: str,
                 model: Optional[str] = None, message: Optional[str] = None):
        self.diet = diet
        self.recipes = recipes
        self.source = source
        self.model = model
        self.message = message

    def __str__(self) -> str:
        return f"{self.source}: {len(self.recipes)} recipes ({self.diet})"

    __repr__ = __str__

    @property
    def meta(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {"source": self.source}
        if self.model:
            meta["model"] = self.model
        if self.message is not None:
            meta["message"] = self.message
        return meta

    def to_dict(self):
        return {"diet": self.diet, "recipes": self.recipes, "meta": self.meta}
