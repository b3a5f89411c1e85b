"""Unit tests for the chat session manager."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from prochat.chat import Chat, ChatSessionManager, Message
from prochat.config import DEFAULT_CHAT_TITLE
from prochat.errors import ChatNotFoundError, NoActiveChatError


class TestCreateAndSwitch:
    """Tests for creating and switching chats."""

    def test_starts_empty(self):
        """Test that a fresh manager has no chats and no active chat."""
        manager = ChatSessionManager()

        assert manager.chats == ()
        assert manager.active_id is None
        assert manager.messages == ()

    def test_create_chat_inserts_at_front_and_activates(self):
        """Test that new chats go to the front and become active."""
        manager = ChatSessionManager()
        first = manager.create_chat()
        second = manager.create_chat()

        assert [c.id for c in manager.chats] == [second, first]
        assert manager.active_id == second
        assert manager.active_chat.title == DEFAULT_CHAT_TITLE

    def test_create_chat_clears_pending_input(self):
        """Test that creating a chat empties the input buffer."""
        manager = ChatSessionManager()
        manager.pending_input = "half typed"

        manager.create_chat()

        assert manager.pending_input == ""

    def test_chat_ids_are_unique(self):
        """Test that ids never repeat within the collection."""
        manager = ChatSessionManager()
        ids = {manager.create_chat() for _ in range(50)}

        assert len(ids) == 50

    def test_switch_to_existing_chat(self):
        """Test that switching changes the displayed log."""
        manager = ChatSessionManager()
        first = manager.create_chat()
        manager.append_message("user", "in first")
        manager.create_chat()

        assert manager.switch_to(first) is True
        assert manager.active_id == first
        assert [m.content for m in manager.messages] == ["in first"]

    def test_switch_to_missing_chat_reports_not_found(self):
        """Test that an unknown id leaves the active chat unchanged."""
        manager = ChatSessionManager()
        active = manager.create_chat()

        assert manager.switch_to("missing") is False
        assert manager.active_id == active


class TestDeleteChat:
    """Tests for deleting chats."""

    def test_delete_only_chat_clears_active(self):
        """Test that deleting the last chat leaves nothing active."""
        manager = ChatSessionManager()
        chat_id = manager.create_chat()
        manager.append_message("user", "hello")

        manager.delete_chat(chat_id)

        assert manager.active_id is None
        assert manager.messages == ()
        assert manager.chats == ()

    def test_delete_active_chat_activates_new_front(self):
        """Test that the new front of the collection becomes active."""
        manager = ChatSessionManager()
        oldest = manager.create_chat()
        middle = manager.create_chat()
        newest = manager.create_chat()
        manager.switch_to(middle)

        manager.delete_chat(middle)

        assert manager.active_id == newest
        assert [c.id for c in manager.chats] == [newest, oldest]

    def test_delete_non_active_chat_keeps_active(self):
        """Test that removing another chat leaves the active log alone."""
        manager = ChatSessionManager()
        other = manager.create_chat()
        active = manager.create_chat()
        manager.append_message("user", "keep me")

        manager.delete_chat(other)

        assert manager.active_id == active
        assert [m.content for m in manager.messages] == ["keep me"]

    def test_delete_missing_chat_does_not_raise(self):
        """Test that an unknown id is a silent no-op."""
        manager = ChatSessionManager()
        manager.create_chat()

        assert manager.delete_chat("missing") is False
        assert len(manager) == 1

    @given(st.integers(min_value=2, max_value=8), st.data())
    def test_deleting_non_active_never_changes_active(self, count: int, data):
        """Property test: deleting any non-active chat preserves active id and log."""
        manager = ChatSessionManager()
        ids = [manager.create_chat() for _ in range(count)]
        active = data.draw(st.sampled_from(ids))
        manager.switch_to(active)
        manager.append_message("user", "marker")
        victim = data.draw(st.sampled_from([i for i in ids if i != active]))

        manager.delete_chat(victim)

        assert manager.active_id == active
        assert [m.content for m in manager.messages] == ["marker"]


class TestMessages:
    """Tests for appending turns and titles."""

    def test_append_without_active_chat_raises(self):
        """Test that appending with no active chat is a precondition violation."""
        manager = ChatSessionManager()

        with pytest.raises(NoActiveChatError):
            manager.append_message("user", "hello")

    def test_append_to_unknown_chat_raises(self):
        """Test that an explicit unknown id is reported."""
        manager = ChatSessionManager()
        manager.create_chat()

        with pytest.raises(ChatNotFoundError):
            manager.append_message("user", "hello", chat_id="missing")

    def test_append_refreshes_updated_at(self):
        """Test that updated_at never goes backwards after an append."""
        manager = ChatSessionManager()
        manager.create_chat()
        before = manager.active_chat.updated_at

        manager.append_message("user", "hello")

        assert manager.active_chat.updated_at >= before

    def test_append_by_id_targets_that_chat(self):
        """Test that appending by id ignores which chat is active."""
        manager = ChatSessionManager()
        background = manager.create_chat()
        manager.create_chat()

        manager.append_message("assistant", "late reply", chat_id=background)

        assert manager.messages == ()
        assert [m.content for m in manager.get_chat(background).messages] == ["late reply"]

    def test_messages_are_immutable(self):
        """Test that committed turns cannot be edited."""
        message = Message(role="user", content="fixed")

        with pytest.raises(ValueError):
            message.content = "changed"

    def test_snapshots_do_not_leak_state(self):
        """Test that editing a returned chat does not touch the collection."""
        manager = ChatSessionManager()
        manager.create_chat()

        snapshot = manager.active_chat
        snapshot.title = "edited"
        snapshot.messages.append(Message(role="user", content="sneaky"))

        assert manager.active_chat.title == DEFAULT_CHAT_TITLE
        assert manager.messages == ()

    def test_derive_title_truncates_long_text(self):
        """Test that titles keep 50 characters plus an ellipsis."""
        manager = ChatSessionManager()
        chat_id = manager.create_chat()

        manager.derive_title_if_unset(chat_id, "x" * 80)

        assert manager.active_chat.title == "x" * 50 + "..."

    def test_derive_title_keeps_short_text(self):
        """Test that short text becomes the title unchanged."""
        manager = ChatSessionManager()
        chat_id = manager.create_chat()

        manager.derive_title_if_unset(chat_id, "Hello")

        assert manager.active_chat.title == "Hello"

    @given(st.text(min_size=1).filter(lambda t: t != DEFAULT_CHAT_TITLE), st.text())
    def test_derive_title_is_idempotent(self, first: str, second: str):
        """Property test: only the first derivation sets the title."""
        manager = ChatSessionManager()
        chat_id = manager.create_chat()

        assert manager.derive_title_if_unset(chat_id, first) is True
        title = manager.active_chat.title
        assert manager.derive_title_if_unset(chat_id, second) is False

        assert manager.active_chat.title == title

    def test_clear_active_chat_resets_log_and_title(self):
        """Test that clearing empties the log and restores the default title."""
        manager = ChatSessionManager()
        chat_id = manager.create_chat()
        manager.append_message("user", "hello")
        manager.derive_title_if_unset(chat_id, "hello")

        assert manager.clear_active_chat() is True

        assert manager.messages == ()
        assert manager.active_chat.title == DEFAULT_CHAT_TITLE

    def test_clear_without_active_chat_is_noop(self):
        """Test that clearing with nothing active does nothing."""
        manager = ChatSessionManager()

        assert manager.clear_active_chat() is False


class TestChangeNotification:
    """Tests for change listeners and bulk load."""

    def test_listeners_run_after_each_mutation(self):
        """Test that every mutating call notifies listeners."""
        manager = ChatSessionManager()
        seen = []
        manager.on_change(lambda m: seen.append(len(m)))

        chat_id = manager.create_chat()
        manager.append_message("user", "hi")
        manager.derive_title_if_unset(chat_id, "hi")
        manager.delete_chat(chat_id)

        assert seen == [1, 1, 1, 0]

    def test_failed_operations_do_not_notify(self):
        """Test that no-op calls stay silent."""
        manager = ChatSessionManager()
        seen = []
        manager.on_change(lambda m: seen.append(True))

        manager.switch_to("missing")
        manager.delete_chat("missing")
        manager.clear_active_chat()

        assert seen == []

    def test_replace_all_activates_first_chat(self):
        """Test that a loaded collection activates its most recent chat."""
        recent = Chat(title="recent", messages=[Message(role="user", content="hi")])
        older = Chat(title="older")

        manager = ChatSessionManager([recent, older])

        assert manager.active_id == recent.id
        assert [m.content for m in manager.messages] == ["hi"]
