import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel

from healthylife.api.auth import optional_user, conversation_key
from healthylife.domain.Reply import ChatMessage
from healthylife.infra.provider_registry import build_providers
from healthylife.logic.coach.errors import InvalidInput
from healthylife.logic.coach.orchestrator import CoachOrchestrator
from healthylife.utilities.config import MAX_IMAGE_BYTES
from healthylife.utilities.constants import ALLOWED_IMAGE_TYPES, DIET_VEG

logger = logging.getLogger(__name__)


# === Helper: Get Orchestrator ===
_orchestrator: Optional[CoachOrchestrator] = None


def get_orchestrator() -> CoachOrchestrator:
    """Process-wide orchestrator, built from the provider keys present at first use.

    Cooldowns and conversation summaries live on it, so they last until restart.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = CoachOrchestrator.from_providers(**build_providers())
    return _orchestrator


def reset_orchestrator() -> None:
    global _orchestrator
    _orchestrator = None


def current_orchestrator() -> Optional[CoachOrchestrator]:
    """The orchestrator if one has been built, without building it."""
    return _orchestrator


def resolve_diet(requested: Optional[str], user: Optional[dict]) -> str:
    """Body value first, then the token's dietPreference claim, then 'veg'."""
    if requested:
        return requested
    if user and user.get("dietPreference"):
        return str(user["dietPreference"])
    return DIET_VEG


async def read_image_upload(image: Optional[UploadFile]) -> bytes:
    """Bytes of an uploaded photo after the type and size checks."""
    if image is None:
        raise InvalidInput("image is required")
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInput("Only image uploads are allowed")
    data = await image.read()
    if len(data) > MAX_IMAGE_BYTES:
        raise InvalidInput(f"Image too large: {len(data)} bytes > {MAX_IMAGE_BYTES}")
    return data


# === Request models ===
class ChatMessageIn(BaseModel):
    role: str = "user"
    content: str = ""


class ChatRequest(BaseModel):
    messages: List[ChatMessageIn]
    diet: Optional[str] = None


# === FastAPI Endpoints ===
router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post("")
@router.post("/")
async def chat(payload: ChatRequest, request: Request, user: Optional[dict] = Depends(optional_user),
               orchestrator: CoachOrchestrator = Depends(get_orchestrator)):
    messages = [ChatMessage(m.role, m.content) for m in payload.messages]
    reply = await orchestrator.chat(
        messages,
        diet_preference=resolve_diet(payload.diet, user),
        conversation_key=conversation_key(request, user),
    )
    return reply.to_dict()


@router.post("/image")
async def chat_with_image(image: UploadFile = File(None), user: Optional[dict] = Depends(optional_user),
                          orchestrator: CoachOrchestrator = Depends(get_orchestrator)):
    data = await read_image_upload(image)
    logger.info("Image chat request user=%s type=%s bytes=%d", (user or {}).get("id"), image.content_type, len(data))
    reply = await orchestrator.describe_image(data, image.content_type)
    return reply.to_dict()
