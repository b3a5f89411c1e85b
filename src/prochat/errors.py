"""Error taxonomy for chat sessions.

Every failure here is terminal for the turn that raised it; nothing
is retried automatically.
"""

from .config import GENERIC_FAILURE_TEXT, MALFORMED_RESPONSE_TEXT, MISSING_CREDENTIAL_TEXT


class ChatError(Exception):
    """Base class for chat session errors."""


class MissingCredentialError(ChatError):
    """No API key is configured."""

    def __init__(self, message: str = MISSING_CREDENTIAL_TEXT):
        super().__init__(message)


class NoActiveChatError(ChatError):
    """A message was appended while no chat was active."""

    def __init__(self, message: str = "No active chat"):
        super().__init__(message)


class ChatNotFoundError(ChatError):
    """An operation named a chat that is not in the collection."""

    def __init__(self, chat_id: str):
        super().__init__(f"Chat not found: {chat_id}")
        self.chat_id = chat_id


class RequestFailedError(ChatError):
    """The remote endpoint could not produce a reply.

    Covers transport failures and non-success HTTP statuses. ``reason``
    is the human-readable text shown in the conversation.
    """

    def __init__(self, reason: str = GENERIC_FAILURE_TEXT, status_code: int | None = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class MalformedResponseError(RequestFailedError):
    """Success status but the body did not carry a reply."""

    def __init__(self, reason: str = MALFORMED_RESPONSE_TEXT, status_code: int | None = None):
        super().__init__(reason, status_code)


class VoiceUnavailableError(ChatError):
    """The voice bridge lacks the requested capability."""

    def __init__(self, capability: str):
        super().__init__(f"Voice {capability} is not available")
        self.capability = capability
