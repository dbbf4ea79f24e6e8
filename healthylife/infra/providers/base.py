"""Common async interface implemented by every AI provider client.

The orchestrator only ever calls these three coroutines, so providers are
interchangeable inside a fallback chain. Clients let transport errors escape
untouched; classification happens in ``healthylife.logic.coach.errors``.
"""
from typing import List, Optional

from healthylife.domain.Reply import ChatMessage


class Provider:
    name: str = "provider"
    model: str = ""
    # Model used for single-prompt completions (recipes); defaults to ``model``.
    complete_model: str = ""
    # Whether chat successes should be followed by a conversation summary call.
    summarizes: bool = False
    chat_temperature: float = 0.6

    async def chat(self, system: str, messages: List[ChatMessage], *,
                   temperature: Optional[float] = None, max_tokens: int = 280) -> str:
        raise NotImplementedError

    async def complete(self, prompt: str, *, temperature: float = 0.6, max_tokens: int = 600) -> str:
        raise NotImplementedError

    async def describe_image(self, prompt: str, image_bytes: bytes, mimetype: str) -> str:
        raise NotImplementedError(f"{self.name} has no vision support")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}:{self.model}>"
