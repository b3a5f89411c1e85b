"""Factory functions for CLI.

Centralizes creation of the store, voice bridge and session from
environment variables. Hides configuration details from command
implementations.
"""

from pathlib import Path

from rich.console import Console

from ..chat.models import Preferences
from ..config import env_api_key, env_db_path, env_model, env_store_backend
from ..session import ChatSession
from ..store import ChatStore, create_key_value_store
from ..voice import VoiceBridge, create_voice_bridge

# Default console for output
_console = Console()


def get_store(backend: str | None = None, db_path: Path | None = None) -> ChatStore:
    """Create the chat store from options or environment variables.

    Args:
        backend: "sqlite" or "memory" (default: PROCHAT_STORE, else sqlite)
        db_path: SQLite file (default: PROCHAT_DB_PATH, else ~/.prochat/store.db)

    Environment variables:
        PROCHAT_STORE: Store backend
        PROCHAT_DB_PATH: SQLite database path
    """
    backend = (backend or env_store_backend()).lower()
    if backend == "sqlite":
        kv = create_key_value_store("sqlite", path=db_path or env_db_path())
    else:
        kv = create_key_value_store(backend)
    return ChatStore(kv)


def get_defaults() -> Preferences:
    """Preferences used for keys the store does not have yet.

    Environment variables:
        OPENROUTER_API_KEY: API key
        PROCHAT_MODEL: Model identifier (default: x-ai/grok-4)
    """
    return Preferences(api_key=env_api_key(), model=env_model())


def get_voice(backend: str, console: Console | None = None) -> VoiceBridge:
    """Create the voice bridge, falling back to none if it cannot load.

    Args:
        backend: "none" or "speech_recognition"
        console: Optional Rich console for output
    """
    con = console or _console
    try:
        return create_voice_bridge(backend)
    except ImportError as e:
        con.print(f"[yellow]Warning: {e}; voice disabled[/yellow]")
        return create_voice_bridge("none")


async def open_session(
    backend: str | None = None,
    db_path: Path | None = None,
    voice: VoiceBridge | None = None,
) -> ChatSession:
    """Connect the store and load a session from it."""
    return await ChatSession.open(
        get_store(backend, db_path),
        voice=voice,
        defaults=get_defaults(),
    )
