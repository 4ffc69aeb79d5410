"""In-memory registry of saved chat sessions.

Sessions are kept most-recent-first on creation; updates never re-sort.
Every mutation snapshots the whole registry to the store.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence

from uccai.conversation.store import ChatStore
from uccai.models.chat import ChatSession, Message, derive_title, generate_id

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Ordered collection of chat sessions with unique ids."""

    def __init__(
        self,
        sessions: Iterable[ChatSession] = (),
        store: ChatStore | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            sessions: Initial sessions in display order. Duplicate ids are
                      dropped, keeping the first occurrence.
            store: Optional store that receives a snapshot after each mutation.
        """
        self._store = store
        self._sessions: list[ChatSession] = []
        seen: set[str] = set()
        for session in sessions:
            if session.id in seen:
                logger.warning(f"Dropping duplicate session id from history: {session.id}")
                continue
            seen.add(session.id)
            self._sessions.append(session)

    @classmethod
    def from_store(cls, store: ChatStore) -> "SessionRegistry":
        """Load the registry once from its persistent store."""
        return cls(store.load(), store=store)

    @property
    def sessions(self) -> tuple[ChatSession, ...]:
        return tuple(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ChatSession]:
        return iter(tuple(self._sessions))

    def __contains__(self, session_id: object) -> bool:
        return self._index_of(session_id) is not None

    def create_session(
        self,
        first_message: str,
        messages: Sequence[Message] = (),
    ) -> ChatSession:
        """Create a session from the first user turn and insert it at the front.

        Args:
            first_message: Content of the first user message, used for the title.
            messages: Initial message list for the session.

        Returns:
            The new session.
        """
        session_id = generate_id()
        while session_id in self:
            session_id = generate_id()

        session = ChatSession(
            id=session_id,
            title=derive_title(first_message),
            messages=list(messages),
        )
        self._sessions.insert(0, session)
        logger.info(f"Created chat session {session.id}: {session.title!r}")
        self._commit()
        return session

    def update_messages(self, session_id: str, messages: Sequence[Message]) -> None:
        """Replace the message list of a session."""
        index = self._index_of(session_id)
        if index is None:
            logger.warning(f"Cannot update messages, unknown session: {session_id}")
            return

        session = self._sessions[index]
        self._sessions[index] = session.model_copy(update={"messages": list(messages)})
        self._commit()

    def append_message(self, session_id: str, message: Message) -> bool:
        """Append a message to the session's current message list.

        Reads the list as held by the registry at call time.

        Returns:
            False if the session no longer exists.
        """
        index = self._index_of(session_id)
        if index is None:
            logger.warning(f"Cannot append message, unknown session: {session_id}")
            return False

        session = self._sessions[index]
        self._sessions[index] = session.model_copy(
            update={"messages": [*session.messages, message]}
        )
        self._commit()
        return True

    def select_session(self, session_id: str) -> ChatSession | None:
        index = self._index_of(session_id)
        return None if index is None else self._sessions[index]

    def delete_session(self, session_id: str) -> bool:
        """Remove a session by id.

        Returns:
            True if a session was removed.
        """
        index = self._index_of(session_id)
        if index is None:
            return False

        del self._sessions[index]
        logger.info(f"Deleted chat session {session_id}")
        self._commit()
        return True

    def clear_all(self) -> None:
        self._sessions.clear()
        logger.info("Cleared all chat sessions")
        if self._store is not None:
            self._store.clear()

    def _index_of(self, session_id: object) -> int | None:
        for i, session in enumerate(self._sessions):
            if session.id == session_id:
                return i
        return None

    def _commit(self) -> None:
        if self._store is not None:
            self._store.save(self._sessions)
