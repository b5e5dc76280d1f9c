"""Chat HTTP router — registration dialogue, then coach chat."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.auth import verify_api_key
from app.registration.deps import get_registration_service
from app.registration.errors import InvalidInputError, LLMError
from app.registration.models import ChatReply, ChatRequest, ChatResponse
from app.registration.service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def post_chat(
    body: ChatRequest,
    _: str = Depends(verify_api_key),
    service: RegistrationService = Depends(get_registration_service),
) -> ChatResponse:
    try:
        result = await service.handle_message(body.user_id, body.message)
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except LLMError as exc:
        logger.error("Chat reply failed for user %s: %s", body.user_id, exc)
        raise HTTPException(status_code=502, detail="AI coach is unavailable, please try again")

    if result is None:
        raise HTTPException(status_code=404, detail="User not found")

    return ChatResponse(
        data=ChatReply(
            content=result.response,
            timestamp=datetime.now(timezone.utc).isoformat(),
            registration_complete=result.is_complete,
        )
    )
