"""Build provider clients from whichever credentials are configured."""
import logging
from typing import Dict, Optional, Tuple

from healthylife.infra.providers.base import Provider
from healthylife.infra.providers.gemini import GeminiProvider
from healthylife.infra.providers.nutritionix import NutritionixEstimator
from healthylife.infra.providers.openai_compatible import OpenAICompatibleProvider, PerplexityProvider
from healthylife.utilities.config import nutritionix_keys, provider_keys

logger = logging.getLogger(__name__)


def build_providers(keys: Optional[Dict[str, Optional[str]]] = None,
                    nutritionix: Optional[Tuple[str, str]] = None) -> Dict[str, Optional[object]]:
    """Return {'perplexity', 'gemini', 'openai', 'nutritionix'} -> client, or None when the key is absent.

    With ``keys`` omitted every credential, Nutritionix included, is read from the environment.
    """
    if keys is None:
        keys = provider_keys()
        nutritionix = nutritionix_keys()
    providers: Dict[str, Optional[Provider]] = {
        "perplexity": PerplexityProvider(keys["perplexity"]) if keys.get("perplexity") else None,
        "gemini": GeminiProvider(keys["google"]) if keys.get("google") else None,
        "openai": OpenAICompatibleProvider(keys["openai"]) if keys.get("openai") else None,
    }
    enabled = [name for name, p in providers.items() if p is not None]
    if enabled:
        logger.info("AI providers enabled: %s", ", ".join(enabled))
    else:
        logger.warning("No AI provider keys set; chat and recommendations use local fallbacks.")

    estimator = NutritionixEstimator(*nutritionix) if nutritionix else None
    if estimator is None:
        logger.info("Nutritionix not configured; text meal estimates are mocked.")
    return dict(providers, nutritionix=estimator)


__all__ = ['build_providers']
