"""Abstract base class for voice input/output bridges.

The abstraction hides:
- Which speech engine (if any) is installed
- Microphone and audio device access
- Threading needed by blocking speech libraries

Callers check ``capabilities`` instead of probing for engine attributes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class VoiceCapabilities:
    """What a bridge can do on this host."""

    can_listen: bool = False
    can_speak: bool = False

    @property
    def any(self) -> bool:
        return self.can_listen or self.can_speak


class VoiceBridge(ABC):
    """Speech in, speech out, as plain text."""

    @property
    @abstractmethod
    def capabilities(self) -> VoiceCapabilities:
        """Capabilities available on this host."""

    @abstractmethod
    async def listen(self) -> str:
        """Capture one utterance and return its transcript.

        Raises:
            VoiceUnavailableError: The bridge cannot listen
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop any listening or speaking in progress."""

    @abstractmethod
    def speak(self, text: str) -> None:
        """Say ``text`` aloud. Returns without waiting for playback.

        Raises:
            VoiceUnavailableError: The bridge cannot speak
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
