from __future__ import annotations

from abc import ABC, abstractmethod


class KVStore(ABC):
    """Abstract key/value backend used by the chat store."""

    async def open(self) -> None:
        """Prepare the backend for use."""
        return None

    async def close(self) -> None:
        """Release backend resources."""
        return None

    @abstractmethod
    async def list(self, prefix: str) -> dict[str, str]:
        """
        List entries whose key starts with a prefix.

        Args:
            prefix: Key prefix, e.g. ``telegram/chats``

        Returns:
            Mapping of key to stored value
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> str:
        """
        Fetch one value.

        Raises:
            KeyNotFoundError: The key does not exist
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Create or overwrite a value."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete one value.

        Raises:
            KeyNotFoundError: The key does not exist
        """
        pass
