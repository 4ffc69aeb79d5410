"""Domain models for messages and saved chat sessions.

Both models are frozen: updates produce copies via ``model_copy`` and the
owner (transcript or registry) swaps the record by id.
"""

import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "model"]

TITLE_MAX_LENGTH = 30
TITLE_ELLIPSIS = "..."


def generate_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def derive_title(content: str) -> str:
    """Derive a session title from the first user message.

    Keeps the first 30 characters and marks truncation with an ellipsis.
    """
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return content


class Message(BaseModel):
    """A single chat message.

    Attributes:
        id: Opaque unique identifier.
        role: Speaker, either ``user`` or ``model``.
        content: Message text.
        created_at: Creation time as epoch seconds.
        streaming: True while the model is still producing this message.
        errored: True if generation failed and content is the error text.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    role: Role
    content: str = ""
    created_at: float = Field(default_factory=time.time)
    streaming: bool = False
    errored: bool = False

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def placeholder(cls) -> "Message":
        """Empty model message shown while fragments are arriving."""
        return cls(role="model", content="", streaming=True)


class ChatSession(BaseModel):
    """One saved conversation.

    Attributes:
        id: Opaque unique identifier.
        title: Truncated first user message.
        messages: Ordered messages of the conversation.
        created_at: Creation time as epoch seconds.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    title: str
    messages: list[Message] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.time)
