"""Outbound turn assembly.

Decides which part of a chat's log is sent to the model on each turn.
Pure: reads the log, never touches chat state.
"""

from collections.abc import Sequence

from ..config import SYSTEM_PROMPT
from ..llm.models import ChatMessage
from .models import Message

SYSTEM_TURN = ChatMessage(role="system", content=SYSTEM_PROMPT)


def build_request_turns(
    message_log: Sequence[Message],
    context_enabled: bool,
) -> list[ChatMessage]:
    """Build the ordered turn list for a completion request.

    Args:
        message_log: The chat's turns in conversational order
        context_enabled: Send the whole log (True) or only its last turn

    Returns:
        The system turn followed by the selected log turns, each carrying
        only role and content
    """
    turns = [SYSTEM_TURN]
    if context_enabled:
        selected = list(message_log)
    else:
        selected = list(message_log[-1:])
    turns.extend(ChatMessage(role=msg.role, content=msg.content) for msg in selected)
    return turns
