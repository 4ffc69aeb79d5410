"""Persistent store for the saved session list.

The whole registry is written as a single JSON array under one key of a
key-value backend. In the browser UI the backend is NiceGUI's per-browser
``app.storage.user``; any ``MutableMapping`` works.
"""

import logging
from collections.abc import Iterable, MutableMapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from uccai.conversation.errors import StorageReadError, StorageWriteError
from uccai.models.chat import ChatSession

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "uccai_chats"
THEME_KEY = "theme"

_sessions_adapter = TypeAdapter(list[ChatSession])


def decode_sessions(raw: Any) -> list[ChatSession]:
    """Decode a stored JSON blob into sessions.

    Args:
        raw: The stored value.

    Returns:
        Decoded sessions in stored order.

    Raises:
        StorageReadError: If the value is not text, not JSON, or has the wrong shape.
    """
    if not isinstance(raw, str | bytes):
        raise StorageReadError(f"Expected serialized text, got {type(raw).__name__}")

    try:
        return _sessions_adapter.validate_json(raw)
    except ValidationError as e:
        raise StorageReadError(f"Malformed chat history: {e}") from e


def encode_sessions(sessions: Iterable[ChatSession]) -> str:
    """Encode sessions as one JSON array."""
    return _sessions_adapter.dump_json(list(sessions)).decode()


class ChatStore:
    """Reads and writes the full session list as one opaque blob.

    Read failures fall back to an empty history and write failures are
    logged; neither surfaces to the caller.
    """

    def __init__(
        self,
        backend: MutableMapping[str, Any],
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._backend = backend
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[ChatSession]:
        """Load saved sessions, or an empty list if absent or malformed."""
        raw = self._backend.get(self._key)
        if raw is None:
            return []

        try:
            return decode_sessions(raw)
        except StorageReadError as e:
            logger.warning(f"Failed to load chats, starting with empty history: {e}")
            return []

    def save(self, sessions: Iterable[ChatSession]) -> None:
        """Write the full session list, logging instead of raising on failure."""
        try:
            self._write(encode_sessions(sessions))
        except StorageWriteError as e:
            logger.error(f"Failed to save chats: {e}")

    def clear(self) -> None:
        """Remove the saved session list."""
        try:
            self._backend.pop(self._key, None)
        except Exception as e:
            logger.error(f"Failed to clear chats: {e}")

    def get_theme(self, default: str = "dark") -> str:
        theme = self._backend.get(THEME_KEY)
        return theme if theme in ("dark", "light") else default

    def set_theme(self, theme: str) -> None:
        try:
            self._backend[THEME_KEY] = theme
        except Exception as e:
            logger.error(f"Failed to save theme: {e}")

    def _write(self, payload: str) -> None:
        try:
            self._backend[self._key] = payload
        except Exception as e:
            raise StorageWriteError(str(e)) from e
