"""Chat history and preference mirroring.

Maps the chat collection and preferences onto the fixed storage keys.
Holds no state of its own: it serializes whatever it is handed and
deserializes whatever is stored.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..chat.models import Chat, Preferences
from ..config import (
    KEY_API_KEY,
    KEY_CHAT_HISTORY,
    KEY_CONTEXT_ENABLED,
    KEY_MODEL,
    KEY_PERSISTENCE_ENABLED,
)
from .base import KeyValueStore

_CHAT_LIST = TypeAdapter(list[Chat])


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ChatStore:
    """Reads and writes chats and preferences through a KeyValueStore.

    Writes are always whole-collection; there is no incremental update
    and no schema versioning.
    """

    def __init__(self, backend: KeyValueStore):
        self._backend = backend
        self._debug_callback: Any = None

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback (level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Store", message)

    async def connect(self) -> None:
        await self._backend.connect()

    async def disconnect(self) -> None:
        await self._backend.disconnect()

    # ---- chats ---------------------------------------------------------

    async def load_chats(self) -> list[Chat]:
        """Stored chats, most recent first; empty if none are stored.

        An unreadable stored value is reported and treated as empty.
        """
        raw = await self._backend.get(KEY_CHAT_HISTORY)
        if raw is None:
            return []
        try:
            chats = _CHAT_LIST.validate_json(raw)
        except ValidationError as e:
            self._debug("error", f"Stored chat history is unreadable: {e.error_count()} error(s)")
            return []
        self._debug("info", f"Loaded {len(chats)} chat(s)")
        return chats

    async def save_chats(self, chats: list[Chat] | tuple[Chat, ...]) -> None:
        """Write the full collection."""
        raw = _CHAT_LIST.dump_json(list(chats), by_alias=True).decode("utf-8")
        await self._backend.set(KEY_CHAT_HISTORY, raw)
        self._debug("debug", f"Saved {len(chats)} chat(s)")

    async def clear_chats(self) -> None:
        """Remove the stored collection."""
        await self._backend.delete(KEY_CHAT_HISTORY)
        self._debug("info", "Stored chat history removed")

    async def has_chats(self) -> bool:
        return await self._backend.get(KEY_CHAT_HISTORY) is not None

    # ---- preferences ---------------------------------------------------

    async def load_preferences(self, defaults: Preferences | None = None) -> Preferences:
        """Stored preferences, with ``defaults`` filling unset keys.

        Flags follow the stored text: context is on unless stored as
        "false"; persistence is off unless stored as "true".
        """
        defaults = defaults or Preferences()
        api_key = await self._backend.get(KEY_API_KEY)
        model = await self._backend.get(KEY_MODEL)
        context = await self._backend.get(KEY_CONTEXT_ENABLED)
        persistence = await self._backend.get(KEY_PERSISTENCE_ENABLED)

        return Preferences(
            api_key=api_key if api_key else defaults.api_key,
            model=model if model else defaults.model,
            context_enabled=defaults.context_enabled if context is None else context != "false",
            persistence_enabled=(
                defaults.persistence_enabled if persistence is None else persistence == "true"
            ),
        )

    async def save_preferences(self, prefs: Preferences) -> None:
        """Write every preference key."""
        await self._backend.set(KEY_API_KEY, prefs.api_key)
        await self._backend.set(KEY_MODEL, prefs.model)
        await self._backend.set(KEY_CONTEXT_ENABLED, _flag(prefs.context_enabled))
        await self._backend.set(KEY_PERSISTENCE_ENABLED, _flag(prefs.persistence_enabled))
        self._debug("info", "Preferences saved")
