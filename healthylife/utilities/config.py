"""Configuration management for the HealthyLife coaching API."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()
CORS_ORIGINS: Final[list[str]] = [
    o.strip() for o in os.getenv('CORS_ORIGIN', 'http://localhost:5173').split(',') if o.strip()
]

# Auth
JWT_SECRET: Final[str] = os.getenv('JWT_SECRET', 'dev-secret-change-me')
JWT_ALGORITHM: Final[str] = 'HS256'

# Provider models
PERPLEXITY_BASE_URL: Final[str] = os.getenv('PERPLEXITY_BASE_URL', 'https://api.perplexity.ai')
PERPLEXITY_MODEL: Final[str] = os.getenv('PERPLEXITY_MODEL', 'sonar-pro')
PERPLEXITY_RECOMMEND_MODEL: Final[str] = os.getenv('PERPLEXITY_RECOMMEND_MODEL', 'sonar')
GEMINI_BASE_URL: Final[str] = os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta')
GEMINI_MODEL: Final[str] = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash')
GEMINI_VISION_MODEL: Final[str] = os.getenv('GEMINI_VISION_MODEL', GEMINI_MODEL)
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
OPENAI_VISION_MODEL: Final[str] = os.getenv('OPENAI_VISION_MODEL', OPENAI_MODEL)
NUTRITIONIX_BASE_URL: Final[str] = os.getenv('NUTRITIONIX_BASE_URL', 'https://trackapi.nutritionix.com/v2')

# Meal logging
# When true, a photo no vision provider recognised as food is rejected.
STRICT_FOOD_VALIDATION: Final[bool] = os.getenv('STRICT_FOOD_VALIDATION', 'False').lower() == 'true'

# Orchestration
PROVIDER_TIMEOUT_SECONDS: Final[float] = float(os.getenv('PROVIDER_TIMEOUT_SECONDS', '20'))
COOLDOWN_SECONDS: Final[float] = float(os.getenv('COOLDOWN_SECONDS', '30'))

# Uploads
MAX_IMAGE_BYTES: Final[int] = int(os.getenv('MAX_IMAGE_BYTES', str(5 * 1024 * 1024)))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('HEALTHYLIFE_DATA_DIR', BASE_DIR / 'data'))


def provider_keys() -> dict[str, str | None]:
    """Return the provider credentials currently present in the environment."""
    return {
        'perplexity': os.environ.get('PERPLEXITY_API_KEY') or None,
        'google': os.environ.get('GOOGLE_API_KEY') or None,
        'openai': os.environ.get('OPENAI_API_KEY') or None,
    }


def nutritionix_keys() -> tuple[str, str] | None:
    """(app id, api key) when both Nutritionix credentials are set, else None."""
    app_id = os.environ.get('NUTRITIONIX_APP_ID')
    api_key = os.environ.get('NUTRITIONIX_API_KEY')
    if app_id and api_key:
        return app_id, api_key
    return None
