"""Abstract base class for key-value storage backends.

This module defines the interface for the durable medium that chats and
preferences are mirrored to. The abstraction hides:
- Storage format (dict, SQLite table, etc.)
- Persistence mechanism (file, in-memory)
- Connection management

Values are plain text; callers handle serialization.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract text key-value store.

    Provides a unified interface for reading and writing string values
    across different storage backends.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Removing a missing key is not an error."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
