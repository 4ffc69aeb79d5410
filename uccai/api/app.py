"""FastAPI application factory.

The API holds no conversation state; the lifespan only reports what the
process is serving.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uccai import __version__
from uccai.api.chat import router as chat_router
from uccai.config import ServerConfig, get_server_config

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig | None = None) -> FastAPI:
    """Build the UCCAI API.

    Args:
        config: Server settings. Loads from environment if not provided.

    Returns:
        FastAPI application with the chat router, CORS and a health check.
    """
    config = config or get_server_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        logger.info(f"UCCAI API v{__version__} listening on {config.api_url}")
        yield
        logger.info("UCCAI API stopped")

    application = FastAPI(
        title="UCCAI API",
        description=(
            "Streaming chat API for the UCCAI browser client. Replays the "
            "conversation history supplied by the client and streams the "
            "model's reply as Server-Sent Events."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Browsers reject credentialed responses with a wildcard origin
    wildcard = "*" in config.cors_origins
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "uccai"}

    return application


app = create_app()
