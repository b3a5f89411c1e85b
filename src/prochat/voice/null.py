"""Voice bridge for hosts without speech support."""

from ..errors import VoiceUnavailableError
from .base import VoiceBridge, VoiceCapabilities


class NullVoiceBridge(VoiceBridge):
    """Reports no capabilities; every voice request is refused."""

    @property
    def capabilities(self) -> VoiceCapabilities:
        return VoiceCapabilities()

    async def listen(self) -> str:
        raise VoiceUnavailableError("input")

    def stop(self) -> None:
        """Nothing to stop."""
        pass

    def speak(self, text: str) -> None:
        raise VoiceUnavailableError("output")

    @property
    def backend_type(self) -> str:
        return "none"
