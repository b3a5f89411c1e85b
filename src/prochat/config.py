"""Configuration constants.

Centralizes magic numbers, storage keys and endpoint settings so the
rest of the package never hardcodes them.
"""

import os
from pathlib import Path


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Remote endpoint
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
APP_TITLE = "Pro-Chat"
APP_REFERER = "https://github.com/prochat/prochat"

# Generation parameters sent with every request
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

DEFAULT_MODEL = "x-ai/grok-4"

# (identifier, display name) pairs offered in the settings screen
AVAILABLE_MODELS: list[tuple[str, str]] = [
    ("x-ai/grok-4", "Grok 4"),
    ("google/gemini-2.5-pro", "Gemini 2.5 Pro"),
    ("anthropic/claude-sonnet-4.5", "Claude Sonnet 4.5"),
    ("anthropic/claude-opus-4.1", "Claude Opus 4.1"),
    ("moonshot/kimi-k2-thinking", "Kimi K2 Thinking"),
    ("minimax/minimax-m2", "MiniMax M2"),
    ("x-ai/grok-4-fast", "Grok 4 Fast"),
    ("deepseek/deepseek-r1", "DeepSeek R1"),
    ("deepseek/deepseek-v3", "DeepSeek V3"),
    ("qwen/qwen-3", "Qwen 3"),
    ("qwen/qwen-3-max", "Qwen 3 Max"),
    ("qwen/qwen-3-vl", "Qwen 3 VL"),
]

SYSTEM_PROMPT = (
    "You are a helpful AI assistant. "
    "Provide clear, concise responses suitable for technical users."
)

# Chat titles
DEFAULT_CHAT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 50
TITLE_ELLIPSIS = "..."

# Durable storage keys
KEY_CHAT_HISTORY = "pro_chat_history"
KEY_API_KEY = "openrouter_api_key"
KEY_MODEL = "openrouter_model"
KEY_CONTEXT_ENABLED = "context_enabled"
KEY_PERSISTENCE_ENABLED = "memory_enabled"

# Status texts
STATUS_READY_TEXT = "Ready"
STATUS_LOADING_TEXT = "Thinking..."
STATUS_LISTENING_TEXT = "Listening..."
STATUS_SETTINGS_SAVED_TEXT = "Settings saved!"
MISSING_CREDENTIAL_TEXT = "Please set your API key in settings"
GENERIC_FAILURE_TEXT = "API request failed"
MALFORMED_RESPONSE_TEXT = "Malformed response from API"

# Store locations
DEFAULT_STORE_BACKEND = "sqlite"
DEFAULT_DB_PATH = Path.home() / ".prochat" / "store.db"

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"


def env_api_key() -> str:
    """API key from the environment, used only when none is stored."""
    return os.getenv("OPENROUTER_API_KEY", "")


def env_model() -> str:
    """Default model from the environment, used only when none is stored."""
    return os.getenv("PROCHAT_MODEL", DEFAULT_MODEL)


def env_db_path() -> Path:
    """SQLite store location (PROCHAT_DB_PATH overrides the default)."""
    value = os.getenv("PROCHAT_DB_PATH")
    return Path(value).expanduser() if value else DEFAULT_DB_PATH


def env_store_backend() -> str:
    """Store backend name ("sqlite" or "memory")."""
    return os.getenv("PROCHAT_STORE", DEFAULT_STORE_BACKEND).lower()
