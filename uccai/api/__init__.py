"""FastAPI endpoints for the UCCAI chat client.

Endpoints:
    - GET /health: Service health status
    - POST /chat/stream: Streamed model reply for one turn (SSE)
"""

from uccai.api.app import app, create_app

__all__ = ["app", "create_app"]
