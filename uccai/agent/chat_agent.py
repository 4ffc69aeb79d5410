"""agno agent service with streaming support.

Core module for talking to the model provider.

Architecture Decisions:

1. **Stateless Agent** - The browser owns conversation state. Each request
   carries its prior turns, so the agent has no storage and session_id is
   never used. Loading a saved chat is just a different history.

2. **Singleton Pattern** - The service and its default agent are reused across
   requests. A request that overrides the model or system instruction gets its
   own agent, which is dropped when the request ends.

3. **Service Wrapper** - Decouples our API from agno's interface. If agno's API
   changes, we only fix one place.

4. **Errors Propagate** - Provider failures are raised, never rendered as
   response text, so the client can mark the turn as errored.
"""

import logging
from collections.abc import AsyncGenerator, Sequence

from agno.agent import Agent
from agno.models.message import Message as AgnoMessage
from agno.models.openai import OpenAIChat
from agno.run.agent import RunContentEvent, RunErrorEvent

from uccai.agent.config import AgentConfig, get_agent_config
from uccai.models.schemas import HistoryTurn

logger = logging.getLogger(__name__)

# The provider calls the model side of the conversation "assistant"
_ROLE_MAP = {"user": "user", "model": "assistant"}


class ProviderError(Exception):
    """Raised when the provider reports a failure mid-run."""


def to_agno_messages(history: Sequence[HistoryTurn], message: str) -> list[AgnoMessage]:
    """Build the provider message list for one turn.

    Args:
        history: Prior turns, oldest first.
        message: The new user message.

    Returns:
        agno messages ending with the new user message.
    """
    messages = [
        AgnoMessage(role=_ROLE_MAP[turn.role], content=turn.content) for turn in history
    ]
    messages.append(AgnoMessage(role="user", content=message))
    return messages


class AgentService:
    """Service for managing agno chat agents.

    Wraps agno's Agent with:
    - OpenAI-compatible model configuration
    - A shared agent for the configured model and instruction
    - Clean streaming interface for SSE endpoints
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the agent service.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._agent = self._create_agent(
            self._config.model_name,
            self._config.system_instruction,
        )

    @property
    def config(self) -> AgentConfig:
        return self._config

    def _create_agent(self, model_name: str, system_instruction: str) -> Agent:
        """Create an agno agent instance.

        Returns:
            Agent with an OpenAI-compatible model and the given system message.
        """
        model = OpenAIChat(
            id=model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

        return Agent(
            model=model,
            system_message=system_instruction,
        )

    def _agent_for(self, model: str | None, system_instruction: str | None) -> Agent:
        """Return the shared agent, or a per-request one for overridden settings."""
        model_name = model or self._config.model_name
        instruction = system_instruction or self._config.system_instruction
        if model_name == self._config.model_name and instruction == self._config.system_instruction:
            return self._agent

        logger.debug(f"Creating per-request agent for model {model_name}")
        return self._create_agent(model_name, instruction)

    async def stream_response(
        self,
        message: str,
        history: Sequence[HistoryTurn] = (),
        model: str | None = None,
        system_instruction: str | None = None,
    ) -> AsyncGenerator[str]:
        """Stream response chunks for a message.

        Yields response tokens as they arrive.

        Args:
            message: The user's message.
            history: Prior turns of the conversation.
            model: Optional model override.
            system_instruction: Optional system instruction override.

        Yields:
            Response text chunks as they arrive.

        Raises:
            ProviderError: If the provider reports an error event.
        """
        agent = self._agent_for(model, system_instruction)
        response_stream = agent.arun(
            to_agno_messages(history, message),
            stream=True,
        )

        async for chunk in response_stream:
            if isinstance(chunk, RunErrorEvent):
                raise ProviderError(chunk.content or "Provider returned an error")
            if isinstance(chunk, RunContentEvent) and isinstance(chunk.content, str) and chunk.content:
                yield chunk.content


# Module-level singleton instance
_agent_service: AgentService | None = None


def get_agent_service() -> AgentService:
    """Get or create the global agent service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The AgentService instance.
    """
    global _agent_service
    if _agent_service is None:
        _agent_service = AgentService()
    return _agent_service
