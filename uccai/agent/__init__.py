"""agno agent logic for LLM orchestration.

Handles streaming generation against an OpenAI-compatible provider.

Responsibilities:
    - Agent initialization with OpenAI-compatible models
    - Replaying client-supplied history as provider messages
    - Streaming token generation coordination

Holds no conversation state; the browser owns it.
"""

from uccai.agent.chat_agent import AgentService, ProviderError, get_agent_service
from uccai.agent.config import AgentConfig, get_agent_config

__all__ = [
    "AgentConfig",
    "AgentService",
    "ProviderError",
    "get_agent_config",
    "get_agent_service",
]
