"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - storage_backend: Plain dict standing in for browser storage
    - store / registry: Chat store and registry over that backend
    - remote: Scripted remote chat handle
    - controller: ChatController wired to the scripted remote
    - agent_service: Scripted agent service for the API
    - async_client: HTTPX client for API testing
"""

import asyncio
from collections import deque
from collections.abc import AsyncGenerator, Generator, Sequence
from dataclasses import dataclass, field

import pytest
from httpx import ASGITransport, AsyncClient

from uccai.agent.chat_agent import get_agent_service
from uccai.api import app
from uccai.conversation.controller import ChatController
from uccai.conversation.errors import TransportOrProviderError
from uccai.conversation.registry import SessionRegistry
from uccai.conversation.remote import to_history
from uccai.conversation.store import ChatStore
from uccai.models.schemas import HistoryTurn

TEST_MODEL = "test-model"


@dataclass
class ScriptedReply:
    """One scripted model reply.

    Attributes:
        fragments: Fragments yielded in order.
        fail: Raise TransportOrProviderError after the fragments.
        pause_after: Wait on ``gate`` after this many fragments.
        gate: Event released by the test to continue the stream.
        paused: Set once the stream is waiting on the gate.
    """

    fragments: list[str]
    fail: bool = False
    pause_after: int | None = None
    gate: asyncio.Event = field(default_factory=asyncio.Event)
    paused: asyncio.Event = field(default_factory=asyncio.Event)


class FakeContext:
    """Remote context that replays scripted replies."""

    def __init__(
        self,
        remote: "FakeRemote",
        model: str,
        system_instruction: str | None,
        history: list[HistoryTurn],
        session_id: str | None,
    ) -> None:
        self.remote = remote
        self.model = model
        self.system_instruction = system_instruction
        self.history = history
        self.session_id = session_id
        self.submitted: list[str] = []

    async def submit(self, text: str) -> AsyncGenerator[str]:
        self.submitted.append(text)
        self.remote.submissions.append(text)
        reply = self.remote.replies.popleft()
        for i, fragment in enumerate(reply.fragments):
            if reply.pause_after == i:
                reply.paused.set()
                await reply.gate.wait()
            await asyncio.sleep(0)
            yield fragment
        if reply.pause_after == len(reply.fragments):
            reply.paused.set()
            await reply.gate.wait()
        if reply.fail:
            raise TransportOrProviderError("provider exploded")


class FakeRemote:
    """Remote chat handle recording every opened context."""

    def __init__(self) -> None:
        self.replies: deque[ScriptedReply] = deque()
        self.opened: list[FakeContext] = []
        self.submissions: list[str] = []

    def queue(
        self,
        *fragments: str,
        fail: bool = False,
        pause_after: int | None = None,
    ) -> ScriptedReply:
        reply = ScriptedReply(list(fragments), fail=fail, pause_after=pause_after)
        self.replies.append(reply)
        return reply

    def open(
        self,
        model: str,
        system_instruction: str | None = None,
        history=None,
        session_id: str | None = None,
    ) -> FakeContext:
        context = FakeContext(
            self, model, system_instruction, to_history(history or ()), session_id
        )
        self.opened.append(context)
        return context


class FakeAgentService:
    """Agent service streaming scripted fragments."""

    def __init__(self) -> None:
        self.fragments: list[str] = ["Hi", " there"]
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def stream_response(
        self,
        message: str,
        history: Sequence[HistoryTurn] = (),
        model: str | None = None,
        system_instruction: str | None = None,
    ) -> AsyncGenerator[str]:
        self.calls.append(
            {
                "message": message,
                "history": list(history),
                "model": model,
                "system_instruction": system_instruction,
            }
        )
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


@pytest.fixture
def storage_backend() -> dict:
    """Return an empty dict used as browser storage."""
    return {}


@pytest.fixture
def store(storage_backend: dict) -> ChatStore:
    return ChatStore(storage_backend)


@pytest.fixture
def registry(store: ChatStore) -> SessionRegistry:
    return SessionRegistry.from_store(store)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def controller(registry: SessionRegistry, remote: FakeRemote) -> ChatController:
    """Create a started controller over the scripted remote.

    Returns:
        ChatController with its initial context opened.
    """
    chat = ChatController(registry, remote, model=TEST_MODEL)
    chat.start()
    return chat


@pytest.fixture
def agent_service() -> Generator[FakeAgentService]:
    """Override the API's agent service with a scripted fake.

    Yields:
        The fake service installed on the app.
    """
    service = FakeAgentService()
    app.dependency_overrides[get_agent_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_agent_service, None)


@pytest.fixture
async def async_client(agent_service: FakeAgentService) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
