"""Request lifecycle for one outbound turn.

State machine: IDLE -> SENDING -> {SUCCEEDED, FAILED} -> IDLE.

The target chat is resolved once, before the first await, and every
later write goes to that chat by id. A reply that arrives after the user
switched chats still lands in the chat it belongs to.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from ..config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GENERIC_FAILURE_TEXT,
    MISSING_CREDENTIAL_TEXT,
)
from ..errors import MissingCredentialError, RequestFailedError
from ..llm.base import LLMProvider
from ..voice.base import VoiceBridge
from .context import build_request_turns
from .manager import ChatSessionManager
from .models import Preferences, Status

StatusListener = Callable[[Status], None]


class RequestState(str, Enum):
    """Phase of the request lifecycle."""

    IDLE = "idle"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SendResult(str, Enum):
    """Outcome of a send request."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_BUSY = "rejected_busy"
    REJECTED_NO_CREDENTIAL = "rejected_no_credential"


class RequestController:
    """Drives a send from user turn to committed reply.

    Only one send is in flight at a time; a second send while one is
    outstanding is refused rather than queued.
    """

    def __init__(
        self,
        manager: ChatSessionManager,
        llm: Callable[[], LLMProvider],
        preferences: Callable[[], Preferences],
        voice: VoiceBridge | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        """Initialize the controller.

        Args:
            manager: Owner of the chat collection
            llm: Returns the provider to use for the next request
            preferences: Returns the currently saved preferences
            voice: Bridge used to speak replies when speak_replies is on
            temperature: Sampling temperature sent with every request
            max_tokens: Output length limit sent with every request
        """
        self._manager = manager
        self._llm = llm
        self._preferences = preferences
        self._voice = voice
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._state = RequestState.IDLE
        self._status = Status.ready()
        self._status_listeners: list[StatusListener] = []
        self._credential_listeners: list[Callable[[], None]] = []
        self._debug_callback: Any = None
        self.speak_replies = False

    # ---- observation ---------------------------------------------------

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is RequestState.SENDING

    @property
    def status(self) -> Status:
        return self._status

    def on_status(self, listener: StatusListener) -> None:
        """Register a callback run whenever Status changes."""
        self._status_listeners.append(listener)

    def on_credentials_required(self, listener: Callable[[], None]) -> None:
        """Register a callback run when a send is refused for lack of a key."""
        self._credential_listeners.append(listener)

    def set_status(self, status: Status) -> None:
        self._status = status
        for listener in list(self._status_listeners):
            listener(status)

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
                      component: Source component name
                      message: Log message
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    # ---- sending -------------------------------------------------------

    def require_credential(self) -> Preferences:
        """Return the saved preferences, or raise if no API key is set."""
        prefs = self._preferences()
        if not prefs.has_credential:
            raise MissingCredentialError()
        return prefs

    async def send(self, text: str) -> SendResult:
        """Send one user turn and commit the reply.

        Creates a chat first if none is active. Failures become an
        assistant turn plus an error Status; they are never raised.

        Args:
            text: The user's message

        Returns:
            What happened to the request
        """
        message = text.strip()
        if not message:
            return SendResult.REJECTED_EMPTY
        if self.is_busy:
            self._debug("warning", "Request", "Send refused: a request is already in flight")
            return SendResult.REJECTED_BUSY

        try:
            prefs = self.require_credential()
        except MissingCredentialError:
            self._debug("warning", "Request", "Send refused: no API key configured")
            self.set_status(Status.error(MISSING_CREDENTIAL_TEXT))
            for listener in list(self._credential_listeners):
                listener()
            return SendResult.REJECTED_NO_CREDENTIAL

        self._state = RequestState.SENDING
        try:
            return await self._send(message, prefs)
        finally:
            self._state = RequestState.IDLE

    async def _send(self, message: str, prefs: Preferences) -> SendResult:
        chat_id = self._manager.active_id
        if chat_id is None:
            chat_id = self._manager.create_chat()
            self._debug("info", "Request", f"Created chat {chat_id} for first message")

        chat = self._manager.get_chat(chat_id)
        is_first_message = chat is not None and not chat.messages

        self._manager.pending_input = ""
        self._manager.append_message("user", message, chat_id=chat_id)
        if is_first_message:
            self._manager.derive_title_if_unset(chat_id, message)
        self.set_status(Status.loading())

        log = self._manager.get_chat(chat_id).messages
        turns = build_request_turns(log, prefs.context_enabled)
        self._debug(
            "debug",
            "Request",
            f"POST {len(turns)} turn(s) to {prefs.model} (context {'on' if prefs.context_enabled else 'off'})",
        )

        try:
            response = await self._llm().chat_completion(
                turns,
                model=prefs.model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except RequestFailedError as e:
            return self._fail(chat_id, e.reason)
        except Exception as e:
            self._debug("error", "Request", f"Unexpected provider error: {e!r}")
            return self._fail(chat_id, str(e) or GENERIC_FAILURE_TEXT)

        self._state = RequestState.SUCCEEDED
        self._commit(chat_id, response.content)
        self.set_status(Status.ready())
        self._debug("info", "Request", f"Reply received ({len(response.content)} chars)")
        self._speak(response.content)
        return SendResult.SUCCEEDED

    def _fail(self, chat_id: str, reason: str) -> SendResult:
        self._state = RequestState.FAILED
        self._debug("error", "Request", f"Request failed: {reason}")
        self._commit(chat_id, f"Error: {reason}")
        self.set_status(Status.error(f"Error: {reason}"))
        return SendResult.FAILED

    def _commit(self, chat_id: str, content: str) -> None:
        if not self._manager.has_chat(chat_id):
            self._debug("warning", "Request", f"Chat {chat_id} was deleted; reply dropped")
            return
        self._manager.append_message("assistant", content, chat_id=chat_id)

    def _speak(self, text: str) -> None:
        if not self.speak_replies or self._voice is None:
            return
        if not self._voice.capabilities.can_speak:
            return
        try:
            self._voice.speak(text)
        except Exception as e:
            self._debug("warning", "Voice", f"Could not speak reply: {e}")
