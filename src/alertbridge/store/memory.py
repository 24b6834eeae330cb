"""In-process KV backend."""
from __future__ import annotations

from alertbridge.store.base import KVStore
from alertbridge.utils.exceptions import KeyNotFoundError
from alertbridge.utils.locks import ReadWriteLock


class MemoryKVStore(KVStore):
    """Dictionary backed store, lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = ReadWriteLock()

    async def list(self, prefix: str) -> dict[str, str]:
        async with self._lock.read():
            return {k: v for k, v in self._data.items() if k.startswith(prefix)}

    async def get(self, key: str) -> str:
        async with self._lock.read():
            try:
                return self._data[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    async def put(self, key: str, value: str) -> None:
        async with self._lock.write():
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock.write():
            if key not in self._data:
                raise KeyNotFoundError(key)
            del self._data[key]
