"""Chat entities: a conversation message and the normalized assistant reply."""
from typing import Dict, Any


class ChatMessage:
    def __init__(self, role: str = "user", content: str = ""):
        self.role = role if role in ("user", "assistant") else "user"
        self.content = content or ""

    def __str__(self) -> str:
        return f"{self.role}: {self.content}"

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChatMessage):
            return NotImplemented
        return self.role == other.role and self.content == other.content

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return ChatMessage(str(d.get("role") or "user"), str(d.get("content") or ""))

    def to_dict(self):
        return {"role": self.role, "content": self.content}


class NormalizedReply:
    """Uniform reply shape, whichever provider or fallback produced it.

    Only flags that were actually set end up in ``meta``, so callers can test
    ``meta.get("cooled")`` without caring about the other paths.
    """

    def __init__(self, content: str, source: str, *, rate_limited: bool = False, cooled: bool = False,
                 vision: bool = False, summarized: bool = False):
        self.role = "assistant"
        self.content = content
        self.source = source
        self.rate_limited = rate_limited
        self.cooled = cooled
        self.vision = vision
        self.summarized = summarized

    def __str__(self) -> str:
        return f"[{self.source}] {self.content[:60]}"

    __repr__ = __str__

    @property
    def meta(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {"source": self.source}
        for flag in ("rate_limited", "cooled", "vision", "summarized"):
            if getattr(self, flag):
                meta[flag] = True
        return meta

    def to_dict(self):
        return {"role": self.role, "content": self.content, "meta": self.meta}
