from __future__ import annotations

from alertbridge.config import Settings, StoreBackend
from alertbridge.store.base import KVStore
from alertbridge.store.chats import ChatStore
from alertbridge.store.file import FileKVStore
from alertbridge.store.memory import MemoryKVStore
from alertbridge.store.sql import SQLKVStore


def build_kv_store(settings: Settings) -> KVStore:
    """Pick the KV backend configured in settings."""
    if settings.store == StoreBackend.MEMORY:
        return MemoryKVStore()
    if settings.store == StoreBackend.FILE:
        return FileKVStore(settings.store_file_path)
    return SQLKVStore(settings.database_url)


__all__ = [
    "KVStore",
    "ChatStore",
    "MemoryKVStore",
    "FileKVStore",
    "SQLKVStore",
    "build_kv_store",
]
