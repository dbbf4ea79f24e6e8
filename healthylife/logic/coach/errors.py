"""Failure taxonomy for provider calls.

Provider clients raise whatever their transport raises (openai, httpx,
asyncio timeouts); ``classify_error`` folds those into the classes below so
the orchestrator decides on cooldown and fallthrough in one place.
"""
import asyncio
from typing import Optional

import httpx
import openai


class ProviderError(Exception):
    """Base class for every classified provider failure."""

    def __init__(self, message: str = "", provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class RateLimited(ProviderError):
    """Provider signalled quota exhaustion or HTTP 429."""


class ProviderUnavailable(ProviderError):
    """Network, auth, timeout or any other failed provider call."""


class ParseFailure(ProviderError):
    """Provider answered, but not in the structured shape we asked for."""


class InvalidInput(ProviderError):
    """Request rejected before any provider call."""


def _looks_rate_limited(message: str) -> bool:
    low = message.lower()
    return "429" in low or "quota" in low


def classify_error(exc: BaseException, provider: Optional[str] = None) -> ProviderError:
    if isinstance(exc, ProviderError):
        if exc.provider is None:
            exc.provider = provider
        return exc
    if isinstance(exc, openai.RateLimitError):
        return RateLimited(str(exc), provider)
    if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 429:
        return RateLimited(str(exc), provider)
    if isinstance(exc, asyncio.TimeoutError):
        return ProviderUnavailable("provider call timed out", provider)
    message = str(exc) or exc.__class__.__name__
    if _looks_rate_limited(message):
        return RateLimited(message, provider)
    return ProviderUnavailable(message, provider)


__all__ = [
    'ProviderError', 'RateLimited', 'ProviderUnavailable', 'ParseFailure', 'InvalidInput', 'classify_error'
]
