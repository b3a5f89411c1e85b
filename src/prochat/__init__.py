"""
Prochat: a multi-chat terminal client for OpenRouter chat completions.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import (
    Chat,
    ChatSessionManager,
    Message,
    Preferences,
    RequestController,
    SendResult,
    Status,
    build_request_turns,
)
from .errors import (
    ChatError,
    ChatNotFoundError,
    MalformedResponseError,
    MissingCredentialError,
    NoActiveChatError,
    RequestFailedError,
    VoiceUnavailableError,
)
from .session import ChatSession
from .store import ChatStore, create_key_value_store

__all__ = [
    "Chat",
    "ChatError",
    "ChatNotFoundError",
    "ChatSession",
    "ChatSessionManager",
    "ChatStore",
    "MalformedResponseError",
    "Message",
    "MissingCredentialError",
    "NoActiveChatError",
    "Preferences",
    "RequestController",
    "RequestFailedError",
    "SendResult",
    "Status",
    "VoiceUnavailableError",
    "build_request_turns",
    "create_key_value_store",
]
