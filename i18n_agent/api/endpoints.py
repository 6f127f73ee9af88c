"""API endpoints for the translation assistant."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from i18n_agent import __version__
from i18n_agent.models.conversation import ChatRequest, HealthResponse
from i18n_agent.services.conversation import ConversationService, get_conversation_service
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat", tags=["Chat"], response_class=StreamingResponse)
async def chat(
    request: ChatRequest,
    service: ConversationService = Depends(get_conversation_service),
) -> StreamingResponse:
    """Stream the assistant's reply to the latest user message as plain text.

    A reply that needs the user's approval before writing contains the
    confirmation sentinel; the client strips it and shows confirm/cancel.
    """
    try:
        history, user_input = service.prepare(request)
    except ValueError as e:
        logger.warning(f"Rejected chat request: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return StreamingResponse(
        service.stream_reply(history, user_input, confirmed=request.confirmed),
        media_type="text/plain",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
