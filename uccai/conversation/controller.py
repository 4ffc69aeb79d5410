"""Chat controller: session lifecycle and stream reconciliation.

Each user turn moves through ``idle -> sent -> streaming -> completed | errored``.
The user turn is recorded in the registry before any network call; the
model turn is persisted only once its stream completes.

Navigation swaps in a new ``Transcript``. A turn still streaming keeps writing
into the transcript and context it started with, which are no longer
displayed; there is no cancellation.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from uccai.conversation.errors import SessionNotInitialized, TransportOrProviderError
from uccai.conversation.registry import SessionRegistry
from uccai.conversation.remote import ChatContext, RemoteChat
from uccai.models.chat import ChatSession, Message

logger = logging.getLogger(__name__)

ERROR_TEXT = "Sorry, I encountered an error. Please try again."

# Called with the changed message for in-place streaming updates,
# or None when the transcript structure or the saved sessions changed.
Listener = Callable[[Message | None], None]


@dataclass
class Transcript:
    """The working message list and everything tied to it.

    Attributes:
        messages: Messages in display order.
        session_id: Saved session this transcript belongs to, if any.
        context: Remote conversation opened for this transcript.
        busy: True while a turn is in flight.
    """

    messages: list[Message] = field(default_factory=list)
    session_id: str | None = None
    context: ChatContext | None = None
    busy: bool = False

    def replace(self, message: Message) -> None:
        """Swap the message with the same id in place."""
        for i, existing in enumerate(self.messages):
            if existing.id == message.id:
                self.messages[i] = message
                return
        logger.warning(f"Message {message.id} is not in the transcript")


class ChatController:
    """Drives the chat UI actions against the registry and remote contexts."""

    def __init__(
        self,
        registry: SessionRegistry,
        remote: RemoteChat,
        model: str,
        system_instruction: str | None = None,
        listener: Listener | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            registry: Saved sessions.
            remote: Handle used to open remote chat contexts.
            model: Model identifier for every context.
            system_instruction: Optional system instruction override.
            listener: Optional callback notified on current transcript changes.
        """
        self._registry = registry
        self._remote = remote
        self._model = model
        self._system_instruction = system_instruction
        self._listener = listener
        self._transcript = Transcript()

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def messages(self) -> list[Message]:
        return list(self._transcript.messages)

    @property
    def current_session_id(self) -> str | None:
        return self._transcript.session_id

    @property
    def busy(self) -> bool:
        return self._transcript.busy

    @property
    def sessions(self) -> tuple[ChatSession, ...]:
        return self._registry.sessions

    def set_listener(self, listener: Listener | None) -> None:
        self._listener = listener

    def start(self) -> None:
        """Open the initial remote context with empty history."""
        self._transcript = Transcript(context=self._open())
        self._notify(self._transcript)

    async def send_message(self, text: str) -> Message | None:
        """Send a user turn and stream the reply into the transcript.

        Args:
            text: Raw user input.

        Returns:
            The finalized model message (errored on failure), or None if the
            input was empty or a turn is already in flight.

        Raises:
            SessionNotInitialized: If no remote context has been opened.
        """
        content = text.strip()
        if not content:
            return None

        transcript = self._transcript
        if transcript.busy:
            logger.debug("Ignoring message while a response is streaming")
            return None

        context = transcript.context
        if context is None:
            raise SessionNotInitialized("Chat session not initialized")

        transcript.busy = True
        try:
            transcript.messages.append(Message.user(content))
            session_id = self._record_user_turn(transcript, content)
            self._notify(transcript)

            placeholder = Message.placeholder()
            transcript.messages.append(placeholder)
            self._notify(transcript)

            return await self._stream_reply(transcript, context, session_id, content, placeholder)
        finally:
            transcript.busy = False
            self._notify(transcript)

    def start_new_chat(self) -> None:
        """Switch to a fresh, unsaved conversation."""
        self._transcript = Transcript(context=self._open())
        self._notify(self._transcript)

    def load_chat(self, session_id: str) -> bool:
        """Make a saved session current.

        The remote context is re-opened with the session's non-errored
        messages before the transcript becomes current.

        Returns:
            False if no session has the given id.
        """
        session = self._registry.select_session(session_id)
        if session is None:
            logger.warning(f"Cannot load unknown session: {session_id}")
            return False

        context = self._open(history=session.messages, session_id=session.id)
        self._transcript = Transcript(
            messages=list(session.messages),
            session_id=session.id,
            context=context,
        )
        self._notify(self._transcript)
        return True

    def delete_chat(self, session_id: str) -> None:
        """Delete a saved session, starting a new chat if it was current."""
        self._registry.delete_session(session_id)
        if self._transcript.session_id == session_id:
            self.start_new_chat()
        else:
            self._notify(self._transcript)

    def clear_all_history(self) -> None:
        self._registry.clear_all()
        self.start_new_chat()

    def _record_user_turn(self, transcript: Transcript, content: str) -> str:
        snapshot = list(transcript.messages)
        if transcript.session_id is None:
            session = self._registry.create_session(content, snapshot)
            transcript.session_id = session.id
            if transcript.context is not None:
                transcript.context.session_id = session.id
        else:
            self._registry.update_messages(transcript.session_id, snapshot)
        return transcript.session_id

    async def _stream_reply(
        self,
        transcript: Transcript,
        context: ChatContext,
        session_id: str,
        content: str,
        placeholder: Message,
    ) -> Message:
        accumulated = ""
        try:
            async for fragment in context.submit(content):
                accumulated += fragment
                updated = placeholder.model_copy(update={"content": accumulated})
                transcript.replace(updated)
                self._notify(transcript, updated)
        except TransportOrProviderError as e:
            logger.error(f"Chat error in session {session_id}: {e}")
            failed = placeholder.model_copy(
                update={"content": ERROR_TEXT, "streaming": False, "errored": True}
            )
            transcript.replace(failed)
            return failed

        final = Message(id=placeholder.id, role="model", content=accumulated)
        transcript.replace(final)
        if self._registry.append_message(session_id, final) and transcript is not self._transcript:
            self._notify_sessions()
        return final

    def _open(
        self,
        history: list[Message] | None = None,
        session_id: str | None = None,
    ) -> ChatContext:
        return self._remote.open(
            self._model,
            system_instruction=self._system_instruction,
            history=history,
            session_id=session_id,
        )

    def _notify(self, transcript: Transcript, message: Message | None = None) -> None:
        if self._listener is not None and transcript is self._transcript:
            self._listener(message)

    def _notify_sessions(self) -> None:
        """Report a registry change made by a transcript that is not displayed."""
        if self._listener is not None:
            self._listener(None)
