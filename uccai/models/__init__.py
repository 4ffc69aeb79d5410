"""Pydantic models for the chat domain and the streaming API.

Models:
    - Message: One message in a transcript or saved session
    - ChatSession: A saved conversation with its messages
    - HistoryTurn: Prior turn replayed to the provider
    - ChatRequest: Incoming streaming chat request payload
    - StreamChunk: One SSE payload of a streamed response
"""

from uccai.models.chat import ChatSession, Message, Role, derive_title, generate_id
from uccai.models.schemas import ChatRequest, HistoryTurn, StreamChunk, StreamStatus

__all__ = [
    "ChatRequest",
    "ChatSession",
    "HistoryTurn",
    "Message",
    "Role",
    "StreamChunk",
    "StreamStatus",
    "derive_title",
    "generate_id",
]
