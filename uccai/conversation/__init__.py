"""Chat core: saved sessions, remote contexts and stream reconciliation.

Responsibilities:
    - Persisting the full session list as one blob in browser storage
    - Keeping the ordered registry of sessions consistent
    - Opening remote conversation contexts with the right prior history
    - Merging streamed fragments into the transcript and saved session

Has no UI code. The NiceGUI page only calls ChatController actions.
"""

from uccai.conversation.config import ClientConfig, get_client_config
from uccai.conversation.controller import ERROR_TEXT, ChatController, Transcript
from uccai.conversation.errors import (
    ChatError,
    SessionNotInitialized,
    StorageReadError,
    StorageWriteError,
    TransportOrProviderError,
)
from uccai.conversation.registry import SessionRegistry
from uccai.conversation.remote import ChatContext, RemoteChat, to_history
from uccai.conversation.store import ChatStore, decode_sessions, encode_sessions

__all__ = [
    "ERROR_TEXT",
    "ChatContext",
    "ChatController",
    "ChatError",
    "ChatStore",
    "ClientConfig",
    "RemoteChat",
    "SessionNotInitialized",
    "SessionRegistry",
    "StorageReadError",
    "StorageWriteError",
    "Transcript",
    "TransportOrProviderError",
    "decode_sessions",
    "encode_sessions",
    "get_client_config",
    "to_history",
]
