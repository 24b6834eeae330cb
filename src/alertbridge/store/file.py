"""JSON file KV backend."""
from __future__ import annotations

import asyncio
import contextlib
import json
import os
import tempfile
from pathlib import Path

import structlog

from alertbridge.store.base import KVStore
from alertbridge.utils.exceptions import KeyNotFoundError, StorageError
from alertbridge.utils.locks import ReadWriteLock

logger = structlog.get_logger(__name__)


class FileKVStore(KVStore):
    """
    Store every entry in a single JSON document.

    Each write rewrites the document to a temporary file next to it and
    renames it into place, so a crash never leaves a half-written file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = ReadWriteLock()

    async def open(self) -> None:
        async with self._lock.write():
            if not self.path.exists():
                await asyncio.to_thread(self._write, {})
                logger.info("file_store_created", path=str(self.path))

    async def list(self, prefix: str) -> dict[str, str]:
        async with self._lock.read():
            data = await asyncio.to_thread(self._read)
        return {k: v for k, v in data.items() if k.startswith(prefix)}

    async def get(self, key: str) -> str:
        async with self._lock.read():
            data = await asyncio.to_thread(self._read)
        if key not in data:
            raise KeyNotFoundError(key)
        return data[key]

    async def put(self, key: str, value: str) -> None:
        async with self._lock.write():
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)

    async def delete(self, key: str) -> None:
        async with self._lock.write():
            data = await asyncio.to_thread(self._read)
            if key not in data:
                raise KeyNotFoundError(key)
            del data[key]
            await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError("read", str(exc)) from exc

        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError("read", f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError("read", f"{self.path} does not hold an object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError as exc:
            raise StorageError("write", str(exc)) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            _discard(tmp_path)
            raise StorageError("write", str(exc)) from exc
        except BaseException:
            _discard(tmp_path)
            raise


def _discard(path: str) -> None:
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)
