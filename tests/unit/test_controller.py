"""Unit tests for ChatController stream reconciliation and session lifecycle."""

import asyncio

import pytest
import pytest_check as check

from tests.conftest import TEST_MODEL, FakeRemote
from uccai.conversation.controller import ERROR_TEXT, ChatController
from uccai.conversation.errors import SessionNotInitialized
from uccai.conversation.registry import SessionRegistry
from uccai.conversation.store import ChatStore
from uccai.models.chat import ChatSession, Message


def _contents(messages: list[Message]) -> list[tuple[str, str]]:
    return [(m.role, m.content) for m in messages]


class TestSendMessage:
    """Tests for the happy path of a turn."""

    async def test_first_message_creates_session(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Sending "Hello" into an empty registry creates and completes a session."""
        remote.queue("Hi", " there")

        final = await controller.send_message("Hello")

        session = registry.sessions[0]
        check.equal(len(registry), 1)
        check.equal(session.title, "Hello")
        check.equal(final.content, "Hi there")
        check.is_false(final.streaming)
        check.is_false(final.errored)
        check.equal(_contents(session.messages), [("user", "Hello"), ("model", "Hi there")])
        check.equal(_contents(controller.messages), [("user", "Hello"), ("model", "Hi there")])
        check.equal(controller.current_session_id, session.id)
        check.is_false(controller.busy)

    async def test_fragments_concatenate_exactly_once(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Displayed and persisted content equal the in-order concatenation."""
        fragments = ["a", "b", "", "cd", "e\n", "a"]
        remote.queue(*fragments)

        await controller.send_message("go")

        expected = "".join(fragments)
        check.equal(controller.messages[-1].content, expected)
        check.equal(registry.sessions[0].messages[-1].content, expected)

    async def test_placeholder_grows_with_each_fragment(
        self,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Listener sees the running accumulator in arrival order."""
        seen: list[str] = []

        def listener(message: Message | None) -> None:
            if message is not None:
                check.is_true(message.streaming)
                seen.append(message.content)

        controller = ChatController(registry, remote, model=TEST_MODEL, listener=listener)
        controller.start()
        remote.queue("The", " quick", " fox")

        await controller.send_message("go")

        assert seen == ["The", "The quick", "The quick fox"]

    async def test_user_turn_recorded_before_remote_call(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """The session already holds the user turn while the reply streams."""
        reply = remote.queue("Hi", pause_after=0)

        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()

        session = registry.sessions[0]
        check.equal(_contents(session.messages), [("user", "Hello")])
        check.equal(_contents(controller.messages), [("user", "Hello"), ("model", "")])
        check.is_true(controller.messages[-1].streaming)

        reply.gate.set()
        await task

    async def test_content_is_stripped(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        remote.queue("ok")

        await controller.send_message("  Hello  \n")

        check.equal(registry.sessions[0].messages[0].content, "Hello")
        check.equal(remote.submissions, ["Hello"])

    async def test_follow_up_updates_existing_session(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Second turn reuses the current session and appends both turns."""
        remote.queue("Hi")
        remote.queue("Fine")

        await controller.send_message("Hello")
        await controller.send_message("How are you?")

        check.equal(len(registry), 1)
        check.equal(
            _contents(registry.sessions[0].messages),
            [("user", "Hello"), ("model", "Hi"), ("user", "How are you?"), ("model", "Fine")],
        )

    async def test_context_is_tagged_with_new_session(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        remote.queue("Hi")

        await controller.send_message("Hello")

        assert controller.transcript.context.session_id == registry.sessions[0].id


class TestEmptyInput:
    """Tests for blank input."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    async def test_blank_input_is_noop(
        self,
        text: str,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Blank input records nothing, creates nothing, calls nothing."""
        result = await controller.send_message(text)

        check.is_none(result)
        check.equal(controller.messages, [])
        check.equal(len(registry), 0)
        check.equal(remote.submissions, [])


class TestStreamErrors:
    """Tests for failed generations."""

    async def test_error_before_any_fragment(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """A failed reply shows one error message and persists only the user turn."""
        remote.queue(fail=True)

        result = await controller.send_message("Hello")

        check.is_true(result.errored)
        check.is_false(result.streaming)
        check.equal(result.content, ERROR_TEXT)
        check.equal(len(controller.messages), 2)
        check.equal(controller.messages[-1], result)
        check.equal(_contents(registry.sessions[0].messages), [("user", "Hello")])
        check.is_false(controller.busy)

    async def test_partial_reply_is_discarded(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Fragments received before a failure are not shown or saved."""
        remote.queue("partial", " text", fail=True)

        await controller.send_message("Hello")

        check.equal(controller.messages[-1].content, ERROR_TEXT)
        check.equal(_contents(registry.sessions[0].messages), [("user", "Hello")])

    async def test_error_does_not_poison_next_turn(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """After a failure the user can resend and the turn completes normally."""
        remote.queue(fail=True)
        remote.queue("Hi")

        await controller.send_message("Hello")
        final = await controller.send_message("Hello")

        check.equal(final.content, "Hi")
        check.equal(
            _contents(registry.sessions[0].messages),
            [("user", "Hello"), ("model", ERROR_TEXT), ("user", "Hello"), ("model", "Hi")],
        )
        check.equal(
            [m.errored for m in registry.sessions[0].messages],
            [False, True, False, False],
        )

    async def test_reloaded_chat_skips_saved_error(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """A saved error reply stays visible but is never replayed to the model."""
        remote.queue(fail=True)
        remote.queue("Hi")
        await controller.send_message("Hello")
        await controller.send_message("Hello")
        session_id = controller.current_session_id

        controller.start_new_chat()
        check.is_true(controller.load_chat(session_id))

        check.equal(len(controller.messages), 4)
        check.is_true(controller.messages[1].errored)
        check.equal(
            [(t.role, t.content) for t in remote.opened[-1].history],
            [("user", "Hello"), ("user", "Hello"), ("model", "Hi")],
        )

    async def test_submit_before_start_raises(
        self,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Sending without an opened context is a programmer error."""
        controller = ChatController(registry, remote, model=TEST_MODEL)

        with pytest.raises(SessionNotInitialized):
            await controller.send_message("Hello")

        check.equal(controller.messages, [])
        check.equal(len(registry), 0)


class TestBusyFlag:
    """Tests for the single in-flight turn rule."""

    async def test_rejects_send_while_streaming(
        self,
        controller: ChatController,
        remote: FakeRemote,
    ) -> None:
        """A second send during streaming is a no-op."""
        reply = remote.queue("Hi", " there", pause_after=1)

        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()

        check.is_true(controller.busy)
        check.is_none(await controller.send_message("Again"))
        check.equal(remote.submissions, ["Hello"])

        reply.gate.set()
        await task

        check.is_false(controller.busy)
        check.equal(len(controller.messages), 2)


class TestNavigation:
    """Tests for new/load/delete/clear."""

    async def test_start_opens_empty_context(self, controller: ChatController, remote: FakeRemote) -> None:
        context = remote.opened[0]

        check.equal(context.model, TEST_MODEL)
        check.equal(context.history, [])
        check.is_none(controller.current_session_id)

    async def test_new_chat_resets_transcript(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """New chat leaves the previous session untouched and opens a fresh context."""
        remote.queue("Hi")
        await controller.send_message("Hello")
        before = registry.sessions[0]

        controller.start_new_chat()

        check.equal(controller.messages, [])
        check.is_none(controller.current_session_id)
        check.equal(registry.sessions[0], before)
        check.equal(remote.opened[-1].history, [])

    async def test_new_chat_then_send_creates_second_session(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        remote.queue("Hi")
        remote.queue("Yo")
        await controller.send_message("Hello")
        first = registry.sessions[0]

        controller.start_new_chat()
        await controller.send_message("Second")

        check.equal(len(registry), 2)
        check.equal(registry.sessions[0].title, "Second")
        check.equal(registry.sessions[1], first)

    async def test_load_chat_replays_non_errored_history(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Loading re-opens the context with exactly the non-errored messages."""
        messages = [
            Message.user("one"),
            Message(role="model", content="reply one"),
            Message(role="model", content=ERROR_TEXT, errored=True),
            Message.user("two"),
        ]
        session = registry.create_session("one", messages)

        check.is_true(controller.load_chat(session.id))

        context = remote.opened[-1]
        check.equal(
            [(t.role, t.content) for t in context.history],
            [("user", "one"), ("model", "reply one"), ("user", "two")],
        )
        check.equal(context.session_id, session.id)
        check.equal(controller.current_session_id, session.id)
        check.equal(controller.messages, messages)

    async def test_send_after_load_uses_loaded_context(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """A send right after loading goes to the freshly opened context."""
        session = registry.create_session(
            "one", [Message.user("one"), Message(role="model", content="1")]
        )
        remote.queue("2")

        controller.load_chat(session.id)
        await controller.send_message("two")

        check.equal(remote.opened[-1].submitted, ["two"])
        check.equal(remote.opened[0].submitted, [])
        check.equal(
            _contents(registry.select_session(session.id).messages),
            [("user", "one"), ("model", "1"), ("user", "two"), ("model", "2")],
        )

    async def test_load_unknown_chat(self, controller: ChatController, remote: FakeRemote) -> None:
        opened = len(remote.opened)

        check.is_false(controller.load_chat("missing"))
        check.equal(len(remote.opened), opened)

    async def test_delete_current_chat_resets(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Deleting the current session empties the transcript and clears the id."""
        remote.queue("Hi")
        await controller.send_message("Hello")

        controller.delete_chat(controller.current_session_id)

        check.equal(controller.messages, [])
        check.is_none(controller.current_session_id)
        check.equal(len(registry), 0)

    async def test_delete_other_chat_keeps_transcript(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        other = registry.create_session("other")
        remote.queue("Hi")
        await controller.send_message("Hello")
        current = controller.current_session_id

        controller.delete_chat(other.id)

        check.equal(controller.current_session_id, current)
        check.equal(len(controller.messages), 2)
        check.is_not_in(other.id, registry)

    async def test_clear_all_history(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        store: ChatStore,
        remote: FakeRemote,
    ) -> None:
        remote.queue("Hi")
        await controller.send_message("Hello")

        controller.clear_all_history()

        check.equal(len(registry), 0)
        check.equal(store.load(), [])
        check.equal(controller.messages, [])
        check.is_none(controller.current_session_id)


class TestAbandonedStream:
    """Tests for navigation while a reply is still streaming."""

    async def test_stale_stream_finishes_into_its_own_session(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """A stream left behind completes into its own session, not the new chat."""
        reply = remote.queue("late", " reply", pause_after=1)
        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()
        original = controller.current_session_id

        controller.start_new_chat()
        check.is_false(controller.busy)

        reply.gate.set()
        await task

        check.equal(controller.messages, [])
        check.equal(
            _contents(registry.select_session(original).messages),
            [("user", "Hello"), ("model", "late reply")],
        )

    async def test_stale_stream_after_delete_is_dropped(
        self,
        controller: ChatController,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """Completing into a deleted session does not resurrect it."""
        reply = remote.queue("late", pause_after=0)
        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()

        controller.delete_chat(controller.current_session_id)
        reply.gate.set()
        await task

        check.equal(len(registry), 0)
        check.equal(controller.messages, [])

    async def test_stale_stream_only_reports_saved_session_change(
        self,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        """The new view sees no fragments, only one refresh once the reply is saved."""
        events: list[Message | None] = []
        controller = ChatController(registry, remote, model=TEST_MODEL, listener=events.append)
        controller.start()
        reply = remote.queue("late", " reply", pause_after=0)
        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()

        controller.start_new_chat()
        events.clear()
        reply.gate.set()
        await task

        check.equal(events, [None])
        check.equal(registry.sessions[0].messages[-1].content, "late reply")

    async def test_stale_stream_into_deleted_session_is_silent(
        self,
        registry: SessionRegistry,
        remote: FakeRemote,
    ) -> None:
        events: list[Message | None] = []
        controller = ChatController(registry, remote, model=TEST_MODEL, listener=events.append)
        controller.start()
        reply = remote.queue("late", pause_after=0)
        task = asyncio.create_task(controller.send_message("Hello"))
        await reply.paused.wait()

        controller.delete_chat(controller.current_session_id)
        events.clear()
        reply.gate.set()
        await task

        assert events == []


class TestLoadFromStorage:
    """Tests for controllers built over existing history."""

    async def test_sessions_reflect_saved_history(self, store: ChatStore, remote: FakeRemote) -> None:
        saved = ChatSession(title="saved", messages=[Message.user("saved")])
        store.save([saved])

        controller = ChatController(SessionRegistry.from_store(store), remote, model=TEST_MODEL)

        assert controller.sessions == (saved,)
