"""Data models for chats, preferences and request status.

These models define the in-memory shape of a chat collection and the
JSON layout it is mirrored to, independent of the storage backend used.
"""

import time
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    DEFAULT_CHAT_TITLE,
    DEFAULT_MODEL,
    STATUS_LOADING_TEXT,
    STATUS_READY_TEXT,
    TITLE_ELLIPSIS,
    TITLE_MAX_LENGTH,
)

Role = Literal["system", "user", "assistant"]


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def derive_title(text: str) -> str:
    """First TITLE_MAX_LENGTH characters of ``text``, ellipsized if cut."""
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return text


class Message(BaseModel):
    """One role-tagged turn in a chat. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the speaker")
    content: str = Field(description="Text of the turn")


class Chat(BaseModel):
    """One persisted conversation.

    Timestamps are epoch milliseconds and serialize as ``createdAt`` /
    ``updatedAt`` so the stored JSON keeps the client's historical layout.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str = Field(default=DEFAULT_CHAT_TITLE)
    messages: list[Message] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    updated_at: int = Field(default_factory=now_ms, alias="updatedAt")

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_CHAT_TITLE

    def add_message(self, message: Message) -> None:
        """Append a turn and refresh ``updated_at``."""
        self.messages.append(message)
        self.touch()

    def touch(self) -> None:
        # Never move backwards, even if the clock does
        self.updated_at = max(now_ms(), self.updated_at)


class Preferences(BaseModel):
    """User preferences. Replaced as a whole, never edited in place."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default="", description="Bearer credential for the endpoint")
    model: str = Field(default=DEFAULT_MODEL, description="Model identifier")
    context_enabled: bool = Field(default=True, description="Send full chat history")
    persistence_enabled: bool = Field(default=False, description="Mirror chats to storage")

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def model_short_name(self) -> str:
        """Model identifier without its vendor prefix, upper-cased."""
        return self.model.split("/")[-1].upper()


class Status(BaseModel):
    """Request lifecycle phase shown to the user. Never persisted."""

    model_config = ConfigDict(frozen=True)

    state: Literal["ready", "loading", "error"]
    text: str

    @classmethod
    def ready(cls, text: str = STATUS_READY_TEXT) -> "Status":
        return cls(state="ready", text=text)

    @classmethod
    def loading(cls, text: str = STATUS_LOADING_TEXT) -> "Status":
        return cls(state="loading", text=text)

    @classmethod
    def error(cls, text: str) -> "Status":
        return cls(state="error", text=text)
