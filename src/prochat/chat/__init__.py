"""Chat state and request lifecycle.

Module structure (each module hides a design decision):
- models.py: Chat, Message, Preferences and Status shapes
- context.py: which turns are sent to the model
- manager.py: ownership of the chat collection and active chat
- controller.py: the send state machine and failure handling
"""

from .context import SYSTEM_TURN, build_request_turns
from .controller import RequestController, RequestState, SendResult
from .manager import ChatSessionManager
from .models import Chat, Message, Preferences, Status, derive_title

__all__ = [
    "SYSTEM_TURN",
    "Chat",
    "ChatSessionManager",
    "Message",
    "Preferences",
    "RequestController",
    "RequestState",
    "SendResult",
    "Status",
    "build_request_turns",
    "derive_title",
]
