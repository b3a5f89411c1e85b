"""Factory for creating voice bridges."""

from typing import Any

from .base import VoiceBridge


def create_voice_bridge(
    backend: str = "none",
    **kwargs: Any
) -> VoiceBridge:
    """Create a voice bridge.

    Args:
        backend: Backend type ("none" or "speech_recognition")
        **kwargs: Backend-specific configuration

    Returns:
        VoiceBridge instance

    Raises:
        ValueError: If backend type is not supported
        ImportError: If the backend's speech library is not installed
    """
    if backend == "none":
        from .null import NullVoiceBridge
        return NullVoiceBridge()

    elif backend == "speech_recognition":
        from .speech import SpeechRecognitionBridge
        return SpeechRecognitionBridge(**kwargs)

    raise ValueError(
        f"Unsupported voice backend: {backend}. "
        f"Supported backends: none, speech_recognition"
    )
