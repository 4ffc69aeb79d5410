"""Client-side configuration for the browser UI."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from uccai.config import get_server_config
from uccai.conversation.store import DEFAULT_STORAGE_KEY

load_dotenv()

DEFAULT_MODEL = "gemini-3-flash-preview"


class ClientConfig(BaseModel):
    """Configuration for the chat UI.

    Attributes:
        api_base_url: Root URL of the streaming chat API.
        model_name: Model requested for every conversation.
        system_instruction: Optional override; the API default is used when None.
        storage_key: Key under which the session list is stored.
        request_timeout: Timeout in seconds for one streamed response.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL") or get_server_config().api_url,
        description="Chat API base URL, defaulting to the local API server",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", DEFAULT_MODEL),
        description="Model to use",
    )
    system_instruction: str | None = Field(
        default=None,
        description="System instruction override",
    )
    storage_key: str = Field(
        default_factory=lambda: os.getenv("CHAT_STORAGE_KEY", DEFAULT_STORAGE_KEY),
        description="Browser storage key for saved chats",
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Timeout in seconds for one streamed response",
    )


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
