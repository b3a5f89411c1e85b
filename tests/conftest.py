"""Pytest configuration and shared fixtures."""
import asyncio
from typing import Any

import pytest

from prochat.chat.models import Preferences
from prochat.config import KEY_API_KEY, KEY_PERSISTENCE_ENABLED
from prochat.errors import RequestFailedError
from prochat.llm.base import LLMProvider
from prochat.llm.models import ChatMessage, LLMResponse
from prochat.session import ChatSession
from prochat.store import ChatStore, InMemoryKeyValueStore
from prochat.voice.base import VoiceBridge, VoiceCapabilities


class FakeLLM(LLMProvider):
    """Scripted provider that records every request.

    Each entry in ``replies`` is either reply text or an exception to raise.
    When ``gate`` is set, requests wait on it before answering.
    """

    def __init__(self, replies: list[Any] | None = None, gate: asyncio.Event | None = None):
        self.replies = list(replies or ["ok"])
        self.gate = gate
        self.calls: list[dict[str, Any]] = []
        self.started = asyncio.Event()
        self.closed = False

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append({
            "messages": list(messages),
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return LLMResponse(content=reply, model=model or "fake")

    async def close(self) -> None:
        self.closed = True


class RecordingVoice(VoiceBridge):
    """Voice bridge that records what it was asked to say."""

    def __init__(self, transcript: str = "hello from voice", can_speak: bool = True):
        self.transcript = transcript
        self.spoken: list[str] = []
        self.stopped = False
        self._can_speak = can_speak

    @property
    def capabilities(self) -> VoiceCapabilities:
        return VoiceCapabilities(can_listen=True, can_speak=self._can_speak)

    async def listen(self) -> str:
        return self.transcript

    def stop(self) -> None:
        self.stopped = True

    def speak(self, text: str) -> None:
        self.spoken.append(text)

    @property
    def backend_type(self) -> str:
        return "recording"


async def open_session(
    llm: LLMProvider | None = None,
    values: dict[str, str] | None = None,
    voice: VoiceBridge | None = None,
    defaults: Preferences | None = None,
) -> tuple[ChatSession, InMemoryKeyValueStore]:
    """Open a session over an in-memory store seeded with ``values``."""
    kv = InMemoryKeyValueStore(values)
    provider = llm or FakeLLM()
    session = await ChatSession.open(
        ChatStore(kv),
        llm_factory=lambda prefs: provider,
        voice=voice,
        defaults=defaults,
    )
    return session, kv


@pytest.fixture
def fake_llm():
    """Return a provider that always answers 'ok'."""
    return FakeLLM()


@pytest.fixture
def credentials():
    """Stored values for a configured key with persistence on."""
    return {KEY_API_KEY: "sk-or-v1-test", KEY_PERSISTENCE_ENABLED: "true"}


@pytest.fixture
def http_401():
    """Failure the provider raises for a rejected key."""
    return RequestFailedError("invalid key", status_code=401)
