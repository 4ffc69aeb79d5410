"""Test package for UCCAI.

Structure:
    - unit/: Individual function and class tests
    - integration/: Streaming API and end-to-end chat turns

Uses a scripted agent service instead of a live provider. Leverages pytest
with pytest-asyncio for async tests and pytest-check for soft assertions.
"""
