"""Request and response models for the chat endpoint."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A prior turn as resent by the client."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request model for the chat endpoint.

    The server keeps no session; the client resends the whole conversation and
    the last message is the new user utterance.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
    confirmed: bool | None = Field(
        default=None,
        description="Explicit answer to a pending confirmation; inferred from the utterance when omitted",
    )


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
