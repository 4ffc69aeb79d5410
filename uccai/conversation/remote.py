"""Remote chat contexts backed by the streaming chat endpoint.

A ``ChatContext`` is the conversation the provider is tracking: model,
system instruction and prior turns. It is an explicit value owned by the
transcript it was opened for, never a module-level global.
"""

import logging
from collections.abc import AsyncIterator, Iterable

import httpx
from pydantic import ValidationError

from uccai.conversation.errors import TransportOrProviderError
from uccai.models.chat import Message
from uccai.models.schemas import ChatRequest, HistoryTurn, StreamChunk

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


def to_history(messages: Iterable[Message]) -> list[HistoryTurn]:
    """Convert saved messages to provider turns, skipping errored ones."""
    return [
        HistoryTurn(role=message.role, content=message.content)
        for message in messages
        if not message.errored
    ]


def _parse_chunk(line: str) -> StreamChunk:
    try:
        return StreamChunk.model_validate_json(line.removeprefix("data: ").strip())
    except ValidationError as e:
        raise TransportOrProviderError(f"Malformed stream chunk: {e}") from e


class ChatContext:
    """A stateful conversation opened against the chat API.

    Attributes:
        model: Model identifier used for generation.
        system_instruction: Optional system instruction override.
        history: Turns the provider sees before each new message.
        session_id: Saved session this context belongs to, once one exists.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        system_instruction: str | None = None,
        history: list[HistoryTurn] | None = None,
        session_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self.system_instruction = system_instruction
        self.history: list[HistoryTurn] = list(history or [])
        self.session_id = session_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def submit(self, text: str) -> AsyncIterator[str]:
        """Stream the model's reply to a user turn.

        Fragments are yielded in arrival order. The turn is added to
        ``history`` only once the stream completes.

        Args:
            text: The user's message.

        Yields:
            Response text fragments.

        Raises:
            TransportOrProviderError: On HTTP, connection, or provider failure.
                Fragments already yielded are not retracted.
        """
        request = ChatRequest(
            message=text,
            history=self.history,
            model=self.model,
            system_instruction=self.system_instruction,
        )
        parts: list[str] = []
        completed = False

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                async with client.stream(
                    "POST",
                    f"{self._base_url}/chat/stream",
                    json=request.model_dump(mode="json"),
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue
                        chunk = _parse_chunk(line)
                        if chunk.error:
                            raise TransportOrProviderError(chunk.error)
                        if chunk.done:
                            completed = True
                            break
                        if chunk.content:
                            parts.append(chunk.content)
                            yield chunk.content
            except httpx.HTTPStatusError as e:
                raise TransportOrProviderError(f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransportOrProviderError(f"Connection failed: {e}") from e

        if not completed:
            raise TransportOrProviderError("Stream ended before completion")

        self.history.append(HistoryTurn(role="user", content=request.message))
        self.history.append(HistoryTurn(role="model", content="".join(parts)))


class RemoteChat:
    """Opens chat contexts against the streaming chat API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the handle.

        Args:
            base_url: Root URL of the chat API.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, e.g. for in-process apps.
        """
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def open(
        self,
        model: str,
        system_instruction: str | None = None,
        history: Iterable[Message] | None = None,
        session_id: str | None = None,
    ) -> ChatContext:
        """Open a new conversation context.

        Args:
            model: Model identifier.
            system_instruction: Optional system instruction override.
            history: Prior messages; errored messages are left out.
            session_id: Saved session the context belongs to, if any.

        Returns:
            A fresh ChatContext.
        """
        turns = to_history(history or ())
        logger.debug(
            f"Opening chat context for session {session_id} "
            f"with {len(turns)} prior turns"
        )
        return ChatContext(
            self._base_url,
            model,
            system_instruction=system_instruction,
            history=turns,
            session_id=session_id,
            timeout=self._timeout,
            transport=self._transport,
        )
