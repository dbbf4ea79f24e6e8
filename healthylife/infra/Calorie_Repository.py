import logging
from datetime import date
from pathlib import Path
from threading import Lock
from typing import List, Optional

from healthylife.domain.CalorieDay import CalorieDay
from healthylife.infra.json_store import atomic_write_json, load_json
from healthylife.infra.paths import CALORIE_HISTORY_FILE
from healthylife.utilities.constants import DATE_FORMAT

logger = logging.getLogger(__name__)

# Serialises read-modify-write cycles; sync routes run in the threadpool.
_write_lock = Lock()


def _key(user_id: str, day: date) -> str:
    return f"{user_id}:{day.strftime(DATE_FORMAT)}"


class CalorieRepository:
    """Daily calorie records in a JSON file, one record per user and date."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or CALORIE_HISTORY_FILE)

    def _load(self) -> dict:
        store = load_json(self.path, {})
        return store if isinstance(store, dict) else {}

    def upsert(self, record: CalorieDay) -> CalorieDay:
        with _write_lock:
            store = self._load()
            store[_key(record.user_id, record.day)] = record.to_dict()
            atomic_write_json(self.path, store)
        return record

    def add_intake(self, user_id: str, day: date, calories: float, default_goal: float) -> CalorieDay:
        """Add ``calories`` to the user's intake for ``day``, creating the record if needed."""
        with _write_lock:
            store = self._load()
            key = _key(user_id, day)
            if key in store:
                record = CalorieDay.from_dict(store[key])
                record.daily_intake += calories
            else:
                record = CalorieDay(user_id, day, default_goal, calories)
            store[key] = record.to_dict()
            atomic_write_json(self.path, store)
        logger.debug("Calorie intake updated: %s", record)
        return record

    def history_for(self, user_id: str, since: Optional[date] = None) -> List[CalorieDay]:
        """Records for one user, oldest first, optionally from ``since`` on."""
        records = [CalorieDay.from_dict(v) for v in self._load().values() if v.get("user_id") == user_id]
        if since is not None:
            records = [r for r in records if r.day >= since]
        records.sort(key=lambda r: r.day)
        return records


__all__ = ['CalorieRepository']
