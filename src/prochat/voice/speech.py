"""Microphone transcription via SpeechRecognition, speech via pyttsx3.

Both libraries block, so each capture runs in a worker thread and each
utterance is spoken from a daemon thread. Speech is only offered when
pyttsx3 is installed.
"""

import asyncio
import threading

try:
    import speech_recognition as sr
    SPEECH_RECOGNITION_AVAILABLE = True
except ImportError:
    SPEECH_RECOGNITION_AVAILABLE = False
    sr = None

try:
    import pyttsx3
    PYTTSX3_AVAILABLE = True
except ImportError:
    PYTTSX3_AVAILABLE = False
    pyttsx3 = None

from ..errors import VoiceUnavailableError
from .base import VoiceBridge, VoiceCapabilities


class SpeechRecognitionBridge(VoiceBridge):
    """Listens on the default microphone and speaks replies aloud."""

    def __init__(
        self,
        timeout: float = 10.0,
        phrase_time_limit: float = 30.0,
        ambient_duration: float = 0.3,
        language: str = "en-US",
    ):
        if not SPEECH_RECOGNITION_AVAILABLE:
            raise ImportError(
                "Voice input requires SpeechRecognition. "
                "Install with: pip install 'prochat[voice]'"
            )

        self._timeout = timeout
        self._phrase_time_limit = phrase_time_limit
        self._ambient_duration = ambient_duration
        self._language = language
        self._recognizer = sr.Recognizer()
        self._stopped = threading.Event()
        self._speech_lock = threading.Lock()
        self._engine = None
        self._speaker: threading.Thread | None = None
        self._capabilities: VoiceCapabilities | None = None

    @property
    def capabilities(self) -> VoiceCapabilities:
        if self._capabilities is None:
            self._capabilities = VoiceCapabilities(
                can_listen=self._has_microphone(),
                can_speak=PYTTSX3_AVAILABLE,
            )
        return self._capabilities

    @staticmethod
    def _has_microphone() -> bool:
        # Microphone support needs PyAudio, which SpeechRecognition
        # reports through AttributeError when it is missing
        try:
            return bool(sr.Microphone.list_microphone_names())
        except (AttributeError, OSError):
            return False

    async def listen(self) -> str:
        """Capture one phrase; returns "" if nothing intelligible was heard."""
        if not self.capabilities.can_listen:
            raise VoiceUnavailableError("input")
        self._stopped.clear()
        transcript = await asyncio.to_thread(self._capture)
        if self._stopped.is_set():
            return ""
        return transcript

    def _capture(self) -> str:
        with sr.Microphone() as source:
            self._recognizer.adjust_for_ambient_noise(source, duration=self._ambient_duration)
            try:
                audio = self._recognizer.listen(
                    source,
                    timeout=self._timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
            except sr.WaitTimeoutError:
                return ""
        if self._stopped.is_set():
            return ""
        try:
            return self._recognizer.recognize_google(audio, language=self._language)
        except sr.UnknownValueError:
            return ""

    def stop(self) -> None:
        """Discard any capture in progress and cut off speech."""
        self._stopped.set()
        engine = self._engine
        if engine is not None:
            engine.stop()

    def speak(self, text: str) -> None:
        """Start speaking ``text`` in the background."""
        if not PYTTSX3_AVAILABLE:
            raise VoiceUnavailableError("output")
        self._speaker = threading.Thread(target=self._say, args=(text,), daemon=True)
        self._speaker.start()

    def _say(self, text: str) -> None:
        # One utterance at a time; the engine is not shared across threads
        with self._speech_lock:
            engine = pyttsx3.init()
            self._engine = engine
            try:
                engine.say(text)
                engine.runAndWait()
            finally:
                self._engine = None

    @property
    def backend_type(self) -> str:
        return "speech_recognition"
