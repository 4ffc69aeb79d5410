"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - models/: Pydantic validation and title derivation
    - conversation/: Store, registry, remote contexts and stream reconciliation
    - agent/: Agent configuration and streaming

Uses fakes for the remote chat handle and mocks for agno. Leverages
pytest-check for multiple assertions per test.
"""
