"""In-memory conversation summaries keyed by user id or caller IP."""
from typing import Dict, Optional


class ConversationMemory:
    def __init__(self):
        # No eviction: one short string per conversation key.
        self._summaries: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._summaries.get(key) or None

    def remember(self, key: str, summary: str) -> None:
        summary = (summary or "").strip()
        if summary:
            self._summaries[key] = summary

    def forget(self, key: str) -> None:
        self._summaries.pop(key, None)

    def __len__(self) -> int:
        return len(self._summaries)
