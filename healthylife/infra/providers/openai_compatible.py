"""Providers speaking the OpenAI chat-completions API: OpenAI itself and Perplexity."""
import base64
from typing import List, Optional

from openai import AsyncOpenAI

from healthylife.domain.Reply import ChatMessage
from healthylife.infra.providers.base import Provider
from healthylife.utilities.config import (
    OPENAI_MODEL,
    OPENAI_VISION_MODEL,
    PERPLEXITY_BASE_URL,
    PERPLEXITY_MODEL,
    PERPLEXITY_RECOMMEND_MODEL,
    PROVIDER_TIMEOUT_SECONDS,
)


def _first_choice_text(response) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return (getattr(message, "content", None) or "").strip()


class OpenAICompatibleProvider(Provider):
    name = "openai"

    def __init__(self, api_key: str, model: str = OPENAI_MODEL, *, complete_model: Optional[str] = None,
                 vision_model: Optional[str] = OPENAI_VISION_MODEL, base_url: Optional[str] = None,
                 timeout: float = PROVIDER_TIMEOUT_SECONDS, client=None):
        self.model = model
        self.complete_model = complete_model or model
        self.vision_model = vision_model
        # Retries are the orchestrator's business (it falls through instead).
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    async def chat(self, system: str, messages: List[ChatMessage], *,
                   temperature: Optional[float] = None, max_tokens: int = 280) -> str:
        payload = [{"role": "system", "content": system}] + [m.to_dict() for m in messages]
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=payload,
            temperature=self.chat_temperature if temperature is None else temperature,
            max_tokens=max_tokens,
        )
        return _first_choice_text(response)

    async def complete(self, prompt: str, *, temperature: float = 0.6, max_tokens: int = 600) -> str:
        response = await self._client.chat.completions.create(
            model=self.complete_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return _first_choice_text(response)

    async def describe_image(self, prompt: str, image_bytes: bytes, mimetype: str) -> str:
        if not self.vision_model:
            raise NotImplementedError(f"{self.name} has no vision support")
        data_url = f"data:{mimetype};base64,{base64.b64encode(image_bytes).decode('ascii')}"
        response = await self._client.chat.completions.create(
            model=self.vision_model,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            }],
            temperature=0.2,
            max_tokens=400,
        )
        return _first_choice_text(response)


class PerplexityProvider(OpenAICompatibleProvider):
    """Search-augmented answers through Perplexity's OpenAI-compatible endpoint (text only)."""

    name = "perplexity"

    def __init__(self, api_key: str, model: str = PERPLEXITY_MODEL, *,
                 complete_model: str = PERPLEXITY_RECOMMEND_MODEL, base_url: str = PERPLEXITY_BASE_URL,
                 timeout: float = PROVIDER_TIMEOUT_SECONDS, client=None):
        super().__init__(api_key, model, complete_model=complete_model, vision_model=None,
                         base_url=base_url, timeout=timeout, client=client)
