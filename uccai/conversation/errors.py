"""Error taxonomy for the chat core."""


class ChatError(Exception):
    """Base class for chat core errors."""


class StorageReadError(ChatError):
    """Raised when saved history cannot be read or decoded."""


class StorageWriteError(ChatError):
    """Raised when the storage backend rejects a write."""


class SessionNotInitialized(ChatError):
    """Raised when a turn is submitted before any remote context was opened."""


class TransportOrProviderError(ChatError):
    """Raised when the streaming call fails in transport or at the provider."""
