"""Integration tests for end-to-end workflows.

Validates the streaming API and full chat turns through real HTTP handling.

Coverage:
    - Streaming endpoint protocol and validation
    - Controller → RemoteChat → API → agent service round trips

Only the agent service is replaced by a scripted fake.
"""
