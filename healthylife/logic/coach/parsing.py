"""Best-effort extraction of a JSON object from model prose.

Models wrap their JSON in code fences, lead-in sentences and trailing commas;
``parse_json_object`` peels those off, and the typed helpers below check the
shape each caller needs.
"""
import re
import json
from json import JSONDecodeError
from typing import List, Any, Dict

from healthylife.logic.coach.errors import ParseFailure


# === Text Cleaning Helpers ===
def _strip_code_fences(text: str) -> str:
    """Remove ``` and ```json markers wherever they appear."""
    text = re.sub(r"```json", "```", text, flags=re.I)
    return text.replace("```", "").strip()


def _remove_trailing_commas(text: str) -> str:
    """Remove common trailing commas in JSON-like text to help json.loads succeed."""
    return re.sub(r",\s*(\}|\])", r"\1", text)


def _outer_object(text: str) -> str:
    """Slice from the first '{' to the last '}' (whole text if there is no such span)."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return text[start:end + 1]
    return text


def parse_json_object(raw: Any, provider: str = None) -> Dict[str, Any]:
    """Return the outermost JSON object found in ``raw`` or raise ParseFailure."""
    candidate = _outer_object(_strip_code_fences(str(raw or "")))
    try:
        parsed = json.loads(candidate)
    except JSONDecodeError:
        try:
            parsed = json.loads(_remove_trailing_commas(candidate))
        except JSONDecodeError as exc:
            raise ParseFailure(f"model output is not valid JSON: {exc}", provider) from exc
    if not isinstance(parsed, dict):
        raise ParseFailure("model output is not a JSON object", provider)
    return parsed


def parse_recipes(raw: Any, provider: str = None) -> List[Any]:
    """Return the ``recipes`` list found in ``raw``.

    Raises ParseFailure when no JSON object can be decoded or when it has no
    list-valued ``recipes`` field. The list itself is returned as parsed.
    """
    parsed = parse_json_object(raw, provider)
    if not isinstance(parsed.get("recipes"), list):
        raise ParseFailure("model output has no 'recipes' list", provider)
    return parsed["recipes"]


__all__ = ['parse_json_object', 'parse_recipes']
