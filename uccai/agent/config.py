"""Agent configuration with environment variable loading.

Pydantic-based configuration for the agno chat agent.
Supports OpenAI and OpenAI-compatible APIs (including Gemini's) via custom base URL.
"""

import os
from datetime import date

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from uccai.conversation.config import DEFAULT_MODEL

# Load environment variables from .env file
load_dotenv()

SYSTEM_INSTRUCTION_TEMPLATE = """You are UCCAI, a helpful, intelligent, and precise AI assistant.
You are an expert in coding, general knowledge, and academic subjects.
Current Date: {today}.

ACADEMIC & SCHOLARLY DEFINITIONS:
When the user asks for a definition, explanation, or nature of a subject/concept (e.g., "What is Economics?", "Define Law"):
1. You MUST provide definitions from renowned scholars, authorities, or seminal works in that field.
   - Example: If asked "What is Economics?", you should cite Lionel Robbins ("Economics is the science which studies human behaviour as a relationship between ends and scarce means which have alternative uses") or Alfred Marshall.
2. Explicitly name the scholar, philosopher, or source.
3. Provide the formal definition first, then follow up with a simplified explanation if necessary.
4. Ensure your responses reflect current world updates and dates where applicable."""


def default_system_instruction(today: date | None = None) -> str:
    """Build the built-in system instruction stamped with the current date."""
    today = today or date.today()
    return SYSTEM_INSTRUCTION_TEMPLATE.format(
        today=f"{today:%A}, {today:%B} {today.day}, {today.year}"
    )


class AgentConfig(BaseModel):
    """Configuration for the agno chat agent.

    Supports OpenAI and any OpenAI-compatible API via LLM_BASE_URL.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        model_name: Default model identifier.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        system_instruction: Default system instruction for new conversations.
    """

    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", DEFAULT_MODEL),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=8192,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    system_instruction: str = Field(
        default_factory=lambda: os.getenv("LLM_SYSTEM_INSTRUCTION") or default_system_instruction(),
        description="Default system instruction",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or OPENAI_API_KEY in .env"
            )
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
