from fastapi import FastAPI, Request, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from healthylife.logic.coach.errors import InvalidInput, ProviderError
from healthylife.events.web_observers import start as start_event_observers, get_events as get_provider_events
from healthylife.utilities.config import CORS_ORIGINS, STRICT_FOOD_VALIDATION, nutritionix_keys, provider_keys

# Routers
from healthylife.api.api_ai import router as ai_router, current_orchestrator, get_orchestrator
from healthylife.api.routes import grocery, calories, meals

# Logging
logger = logging.getLogger("healthylife_app")

# Initialize FastAPI app
app = FastAPI(title="HealthyLife Coaching API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ai_router)
app.include_router(grocery.router)
app.include_router(calories.router)
app.include_router(meals.router)


@app.on_event("startup")
def _startup_event_observers():
    """Register event bus subscribers for provider telemetry when the app starts."""
    start_event_observers()
    logger.info("Provider event observers started")


@app.on_event("shutdown")
async def _flush_pending_summaries():
    orchestrator = current_orchestrator()
    if orchestrator is not None:
        await orchestrator.flush_summaries()


# -------------------- Error responders --------------------
@app.exception_handler(InvalidInput)
async def _invalid_input(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content={"message": str(exc)})


@app.exception_handler(ProviderError)
async def _provider_error(request: Request, exc: ProviderError):
    logger.error("Provider error on %s (%s): %s", request.url.path, exc.provider, exc)
    return JSONResponse(status_code=502, content={"message": str(exc), "provider": exc.provider})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# -------------------- Service endpoints --------------------
@app.get("/api/health")
def health():
    keys = provider_keys()
    return {
        "status": "ok",
        "providers": {name: bool(value) for name, value in keys.items()},
        "nutritionix": nutritionix_keys() is not None,
        "strictFoodValidation": STRICT_FOOD_VALIDATION,
        "orchestrator": get_orchestrator().describe(),
    }


@app.get("/api/provider-events")
def provider_events(since: Optional[int] = Query(default=None, ge=0),
                    provider: Optional[str] = Query(default=None)):
    """Recent rate-limit / failure / fallback events, newest last."""
    return get_provider_events(since, provider)
