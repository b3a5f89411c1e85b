"""The owned session object.

Holds the chat manager, the request controller, the voice bridge, the
saved preferences and the store, and keeps the store in step with the
chat collection while persistence is enabled.
"""

import asyncio
from collections.abc import Callable
from typing import Any

from .chat.controller import RequestController, SendResult
from .chat.manager import ChatSessionManager
from .chat.models import Chat, Preferences, Status
from .config import STATUS_SETTINGS_SAVED_TEXT
from .llm import LLMProvider, create_llm_provider
from .store.chats import ChatStore
from .voice import NullVoiceBridge, VoiceBridge

LLMFactory = Callable[[Preferences], LLMProvider]


def _default_llm_factory(prefs: Preferences) -> LLMProvider:
    return create_llm_provider("openrouter", api_key=prefs.api_key, model=prefs.model)


class ChatSession:
    """One user's running chat client.

    Preferences are read once by ``load()`` and change only through
    ``save_preferences()``. Every chat change is mirrored to the store
    while persistence is on; writes are queued in mutation order.

    Example:
        session = await ChatSession.open(ChatStore(create_key_value_store("sqlite")))
        await session.send("Hello")
        await session.close()
    """

    def __init__(
        self,
        store: ChatStore,
        llm_factory: LLMFactory | None = None,
        voice: VoiceBridge | None = None,
        defaults: Preferences | None = None,
    ):
        self._store = store
        self._llm_factory = llm_factory or _default_llm_factory
        self._llm: LLMProvider | None = None
        self._llm_key: str | None = None
        self._defaults = defaults or Preferences()
        self._preferences = self._defaults
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()
        self._dirty = False
        self._debug_callback: Any = None

        self.voice = voice or NullVoiceBridge()
        self.manager = ChatSessionManager()
        self.controller = RequestController(
            self.manager,
            llm=self.get_llm,
            preferences=lambda: self._preferences,
            voice=self.voice,
        )
        self.manager.on_change(self._on_chats_changed)

    @classmethod
    async def open(
        cls,
        store: ChatStore,
        llm_factory: LLMFactory | None = None,
        voice: VoiceBridge | None = None,
        defaults: Preferences | None = None,
    ) -> "ChatSession":
        """Connect the store and load preferences and chats."""
        session = cls(store, llm_factory=llm_factory, voice=voice, defaults=defaults)
        await store.connect()
        await session.load()
        return session

    async def load(self) -> None:
        """Read preferences and chats from the store.

        The most recent stored chat becomes active.
        """
        self._preferences = await self._store.load_preferences(self._defaults)
        if not self._preferences.persistence_enabled and await self._store.has_chats():
            # Left behind when persistence was turned off mid-save
            await self._store.clear_chats()
            self._debug("warning", "Stored chat history found with persistence off; removed")
        chats = await self._store.load_chats()
        self.manager.replace_all(chats, notify=False)
        self._debug(
            "info",
            f"Session loaded: {len(chats)} chat(s), persistence "
            f"{'on' if self._preferences.persistence_enabled else 'off'}",
        )

    # ---- accessors -----------------------------------------------------

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    @property
    def store(self) -> ChatStore:
        return self._store

    @property
    def status(self) -> Status:
        return self.controller.status

    def get_llm(self) -> LLMProvider:
        """Provider for the saved API key, rebuilt when the key changes."""
        if self._llm is None or self._llm_key != self._preferences.api_key:
            previous = self._llm
            self._llm = self._llm_factory(self._preferences)
            self._llm_key = self._preferences.api_key
            if previous is not None:
                self._schedule(previous.close())
        return self._llm

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback and propagate it to components.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback
        self.controller.set_debug_callback(callback)
        self._store.set_debug_callback(callback)

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    # ---- operations ----------------------------------------------------

    async def send(self, text: str) -> SendResult:
        """Send a user turn through the request controller."""
        return await self.controller.send(text)

    def new_chat(self) -> Chat:
        """Create a chat, make it active, and return it."""
        chat_id = self.manager.create_chat()
        return self.manager.get_chat(chat_id)

    def clear_chat(self) -> None:
        """Empty the active chat and reset Status."""
        self.manager.clear_active_chat()
        self.controller.set_status(Status.ready())

    async def save_preferences(self, prefs: Preferences) -> None:
        """Replace the saved preferences.

        Turning persistence off deletes the stored chat history; turning
        it on writes the current collection in one go.
        """
        previous = self._preferences
        self._preferences = prefs
        await self._store.save_preferences(prefs)

        if previous.persistence_enabled != prefs.persistence_enabled:
            await self.flush()
            if prefs.persistence_enabled:
                await self._store.save_chats(self.manager.chats)
                self._debug("info", "Persistence enabled; chat history written")
            else:
                await self._store.clear_chats()
                self._debug("info", "Persistence disabled; chat history removed")

        self.controller.set_status(Status.ready(STATUS_SETTINGS_SAVED_TEXT))

    # ---- persistence mirroring -----------------------------------------

    def _on_chats_changed(self, manager: ChatSessionManager) -> None:
        if not self._preferences.persistence_enabled:
            return
        snapshot = manager.chats
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop to write on; flush() picks this up later
            self._dirty = True
            return
        self._schedule(self._write_chats(snapshot))

    async def _write_chats(self, chats: tuple[Chat, ...]) -> None:
        async with self._write_lock:
            if not self._preferences.persistence_enabled:
                return
            try:
                await self._store.save_chats(chats)
            except Exception as e:
                self._dirty = True
                self._debug("error", f"Could not save chat history: {e!r}")

    def _schedule(self, coro: Any) -> None:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            coro.close()
            return
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def flush(self) -> None:
        """Wait until every queued store write has landed."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))
        if self._dirty:
            self._dirty = False
            if self._preferences.persistence_enabled:
                async with self._write_lock:
                    await self._store.save_chats(self.manager.chats)

    async def close(self) -> None:
        """Flush writes and release the provider and store."""
        try:
            await self.flush()
        except Exception as e:
            self._debug("error", f"Chat history not saved on close: {e!r}")
        finally:
            self.voice.stop()
            try:
                if self._llm is not None:
                    await self._llm.close()
                    self._llm = None
            finally:
                await self._store.disconnect()
