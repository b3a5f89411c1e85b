"""Chat collection ownership.

The manager is the only writer of the chat collection and the active-chat
pointer. Reads hand out copies so callers can never edit a chat behind its
back. Every mutation holds one re-entrant lock, so hosts that drive the
manager from several threads never observe a half-applied change.
"""

import threading
from collections.abc import Callable, Iterable

from ..config import DEFAULT_CHAT_TITLE
from ..errors import ChatNotFoundError, NoActiveChatError
from .models import Chat, Message, Role, derive_title

ChangeListener = Callable[["ChatSessionManager"], None]


class ChatSessionManager:
    """Owns the chat collection, the active chat and its message log.

    Chats are kept most-recently-created first. At most one chat is
    active, and the active id always names a chat in the collection.
    """

    def __init__(self, chats: Iterable[Chat] | None = None):
        self._lock = threading.RLock()
        self._chats: list[Chat] = []
        self._active_id: str | None = None
        self._listeners: list[ChangeListener] = []
        self.pending_input = ""
        if chats is not None:
            self.replace_all(chats, notify=False)

    # ---- change notification -------------------------------------------

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callback run after every mutation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- reads ---------------------------------------------------------

    @property
    def chats(self) -> tuple[Chat, ...]:
        """Snapshot of the collection, front first."""
        with self._lock:
            return tuple(chat.model_copy(deep=True) for chat in self._chats)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active_chat(self) -> Chat | None:
        with self._lock:
            chat = self._find(self._active_id)
            return chat.model_copy(deep=True) if chat else None

    @property
    def messages(self) -> tuple[Message, ...]:
        """The active chat's log; empty when no chat is active."""
        with self._lock:
            chat = self._find(self._active_id)
            return tuple(chat.messages) if chat else ()

    def get_chat(self, chat_id: str) -> Chat | None:
        with self._lock:
            chat = self._find(chat_id)
            return chat.model_copy(deep=True) if chat else None

    def has_chat(self, chat_id: str) -> bool:
        with self._lock:
            return self._find(chat_id) is not None

    def __len__(self) -> int:
        return len(self._chats)

    def _find(self, chat_id: str | None) -> Chat | None:
        if chat_id is None:
            return None
        for chat in self._chats:
            if chat.id == chat_id:
                return chat
        return None

    # ---- mutations -----------------------------------------------------

    def create_chat(self) -> str:
        """Insert an empty chat at the front and make it active.

        Returns:
            The new chat's id
        """
        with self._lock:
            chat = Chat()
            while self._find(chat.id) is not None:
                chat = Chat()
            self._chats.insert(0, chat)
            self._active_id = chat.id
            self.pending_input = ""
        self._notify()
        return chat.id

    def switch_to(self, chat_id: str) -> bool:
        """Make ``chat_id`` active.

        Returns:
            False (and changes nothing) if the chat does not exist
        """
        with self._lock:
            if self._find(chat_id) is None:
                return False
            self._active_id = chat_id
        self._notify()
        return True

    def delete_chat(self, chat_id: str) -> bool:
        """Remove a chat. Deleting an unknown id is a no-op.

        If the active chat is removed, the new front of the collection
        becomes active, or nothing does when the collection is empty.
        """
        with self._lock:
            chat = self._find(chat_id)
            if chat is None:
                return False
            self._chats.remove(chat)
            if self._active_id == chat_id:
                self._active_id = self._chats[0].id if self._chats else None
        self._notify()
        return True

    def append_message(self, role: Role, content: str, chat_id: str | None = None) -> Message:
        """Append a turn to a chat's log.

        Args:
            role: Speaker role
            content: Turn text
            chat_id: Target chat; defaults to the active chat

        Raises:
            NoActiveChatError: No chat id given and no chat is active
            ChatNotFoundError: The given chat id is not in the collection
        """
        message = Message(role=role, content=content)
        with self._lock:
            if chat_id is None:
                chat = self._find(self._active_id)
                if chat is None:
                    raise NoActiveChatError()
            else:
                chat = self._find(chat_id)
                if chat is None:
                    raise ChatNotFoundError(chat_id)
            chat.add_message(message)
        self._notify()
        return message

    def derive_title_if_unset(self, chat_id: str, text: str) -> bool:
        """Title a chat from ``text`` if it still has the default title.

        Returns:
            True if the title was set by this call
        """
        with self._lock:
            chat = self._find(chat_id)
            if chat is None or not chat.has_default_title:
                return False
            chat.title = derive_title(text)
        self._notify()
        return True

    def clear_active_chat(self) -> bool:
        """Empty the active chat's log and reset its title."""
        with self._lock:
            chat = self._find(self._active_id)
            if chat is None:
                return False
            chat.messages.clear()
            chat.title = DEFAULT_CHAT_TITLE
            chat.touch()
        self._notify()
        return True

    def replace_all(self, chats: Iterable[Chat], notify: bool = True) -> None:
        """Swap in a whole collection; its first chat becomes active."""
        with self._lock:
            self._chats = [chat.model_copy(deep=True) for chat in chats]
            self._active_id = self._chats[0].id if self._chats else None
        if notify:
            self._notify()
