"""Voice input/output bridge.

Adapts host speech capabilities to plain text in and out.
"""

from .base import VoiceBridge, VoiceCapabilities
from .factory import create_voice_bridge
from .null import NullVoiceBridge

__all__ = [
    "NullVoiceBridge",
    "VoiceBridge",
    "VoiceCapabilities",
    "create_voice_bridge",
]
