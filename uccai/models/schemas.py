"""Wire schemas for the streaming chat endpoint."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from uccai.models.chat import Role


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class HistoryTurn(BaseModel):
    """One prior turn replayed to the provider.

    Attributes:
        role: ``user`` or ``model``.
        content: Turn text.
    """

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Request payload for the streaming chat endpoint.

    Attributes:
        message: User's question or prompt.
        history: Prior turns of the conversation, oldest first.
        model: Optional model override.
        system_instruction: Optional system instruction override.
    """

    message: str = Field(..., min_length=1)
    history: list[HistoryTurn] = Field(default_factory=list)
    model: str | None = None
    system_instruction: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text content of this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (generating, complete, error).
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None
