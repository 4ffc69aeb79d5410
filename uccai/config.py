"""Process-level server configuration.

One source for where the API and the UI listen. The API base URL the UI
talks to is derived from the same host and port the API is served on.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()

# Bind-all addresses are not reachable as a URL host
_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class ServerConfig(BaseModel):
    """Configuration for running the API and the chat UI.

    Attributes:
        run_mode: ``integrated`` (UI mounted on the API server) or ``separate``.
        host: Interface both servers bind to.
        port: API port; also serves the UI in integrated mode.
        ui_port: UI port in separate mode.
        log_level: Root log level name.
        storage_secret: Secret signing NiceGUI's per-browser storage.
        cors_origins: Origins allowed to call the API from a browser.
    """

    model_config = ConfigDict(validate_default=True)

    run_mode: str = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated").lower(),
        description="integrated or separate",
    )
    host: str = Field(
        default_factory=lambda: os.getenv("HOST", "0.0.0.0"),
        description="Bind address",
    )
    port: int = Field(
        default_factory=lambda: os.getenv("PORT", "8000"),
        ge=1,
        le=65535,
        description="API port",
    )
    ui_port: int = Field(
        default_factory=lambda: os.getenv("UI_PORT", "8080"),
        ge=1,
        le=65535,
        description="UI port in separate mode",
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper(),
        description="Log level name",
    )
    storage_secret: str = Field(
        default_factory=lambda: os.getenv("NICEGUI_STORAGE_SECRET", "uccai-secret"),
        description="NiceGUI storage secret",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")),
        description="Allowed CORS origins",
    )

    @field_validator("run_mode")
    @classmethod
    def validate_run_mode(cls, v: str) -> str:
        """Accept only the supported run modes."""
        v = v.strip().lower()
        if v not in ("integrated", "separate"):
            raise ValueError(f"RUN_MODE must be 'integrated' or 'separate', got {v!r}")
        return v

    @property
    def public_host(self) -> str:
        """Host name to put in URLs pointing at this machine."""
        return "localhost" if self.host in _WILDCARD_HOSTS else self.host

    @property
    def api_url(self) -> str:
        return f"http://{self.public_host}:{self.port}"

    @property
    def ui_url(self) -> str:
        if self.run_mode == "separate":
            return f"http://{self.public_host}:{self.ui_port}/"
        return f"{self.api_url}/"


def get_server_config() -> ServerConfig:
    """Create server configuration from environment."""
    return ServerConfig()
