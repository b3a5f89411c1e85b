"""Durable storage for chats and preferences.

Mirrors the chat collection and user preferences to a key-value medium.
"""

from .base import KeyValueStore
from .chats import ChatStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore

__all__ = [
    "ChatStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "create_key_value_store",
]
