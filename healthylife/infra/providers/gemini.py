"""Google Gemini client over the generateContent REST endpoint."""
import base64
from typing import Any, Dict, List, Optional

import httpx

from healthylife.domain.Reply import ChatMessage
from healthylife.infra.providers.base import Provider
from healthylife.utilities.config import (
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    GEMINI_VISION_MODEL,
    PROVIDER_TIMEOUT_SECONDS,
)


def _candidate_text(data: Any) -> str:
    """Join the text parts of the first candidate; '' when there is none."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    out = [p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    return "".join(out).strip()


def _to_content(message: ChatMessage) -> Dict[str, Any]:
    return {
        "role": "model" if message.role == "assistant" else "user",
        "parts": [{"text": message.content}],
    }


class GeminiProvider(Provider):
    name = "gemini"
    summarizes = True
    chat_temperature = 0.8

    def __init__(self, api_key: str, model: str = GEMINI_MODEL, *, vision_model: str = GEMINI_VISION_MODEL,
                 base_url: str = GEMINI_BASE_URL, timeout: float = PROVIDER_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.model = model
        self.complete_model = model
        self.vision_model = vision_model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _generate(self, model: str, body: Dict[str, Any]) -> str:
        url = f"{self._base_url}/models/{model}:generateContent"
        # Key travels in a header so it never shows up in logged URLs.
        headers = {"Content-Type": "application/json", "x-goog-api-key": self._api_key}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(url, json=body, headers=headers)
            resp.raise_for_status()
            return _candidate_text(resp.json())

    async def chat(self, system: str, messages: List[ChatMessage], *,
                   temperature: Optional[float] = None, max_tokens: int = 280) -> str:
        # The instruction goes in as the first user turn; contents are never empty.
        contents = [{"role": "user", "parts": [{"text": system}]}]
        contents.extend(_to_content(m) for m in messages)
        body = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.chat_temperature if temperature is None else temperature,
                "topP": 0.9,
                "maxOutputTokens": max_tokens,
            },
        }
        return await self._generate(self.model, body)

    async def complete(self, prompt: str, *, temperature: float = 0.6, max_tokens: int = 600) -> str:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        return await self._generate(self.complete_model, body)

    async def describe_image(self, prompt: str, image_bytes: bytes, mimetype: str) -> str:
        body = {
            "contents": [{
                "role": "user",
                "parts": [
                    {"text": prompt},
                    {"inline_data": {"mime_type": mimetype, "data": base64.b64encode(image_bytes).decode("ascii")}},
                ],
            }],
        }
        return await self._generate(self.vision_model, body)
