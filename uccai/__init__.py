"""UCCAI - browser chat client for a hosted large-language-model API.

Combines NiceGUI for the browser UI, FastAPI for HTTP streaming, agno for
provider access, and Pydantic for data validation.

Components:
    - conversation: saved sessions, remote contexts, stream reconciliation
    - api: HTTP endpoints and streaming responses
    - agent: LLM orchestration against the provider
    - ui: Web interface for chat interactions
    - models: Domain models and request/response schemas
"""

__version__ = "1.3.0"
