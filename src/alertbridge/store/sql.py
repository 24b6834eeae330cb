"""SQLAlchemy KV backend (SQLite via aiosqlite, PostgreSQL via asyncpg)."""
from __future__ import annotations

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from alertbridge.database import build_engine, build_session_factory, close_db, init_db
from alertbridge.models.kv_entry import KVEntry
from alertbridge.store.base import KVStore
from alertbridge.utils.exceptions import KeyNotFoundError, StorageError

logger = structlog.get_logger(__name__)


class SQLKVStore(KVStore):
    """Persist entries in the ``kv_entries`` table."""

    def __init__(self, database_url: str | None = None, engine: AsyncEngine | None = None):
        if engine is None:
            if database_url is None:
                raise ValueError("database_url or engine is required")
            engine = build_engine(database_url)
        self.engine = engine
        self.session_factory = build_session_factory(engine)

    async def open(self) -> None:
        try:
            await init_db(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError("open", str(exc)) from exc
        logger.info("sql_store_ready", dialect=self.engine.dialect.name)

    async def close(self) -> None:
        await close_db(self.engine)

    async def list(self, prefix: str) -> dict[str, str]:
        stmt = select(KVEntry).where(KVEntry.key.startswith(prefix, autoescape=True))
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return {entry.key: entry.value for entry in result.scalars()}
        except SQLAlchemyError as exc:
            raise StorageError("list", str(exc)) from exc

    async def get(self, key: str) -> str:
        try:
            async with self.session_factory() as session:
                entry = await session.get(KVEntry, key)
        except SQLAlchemyError as exc:
            raise StorageError("get", str(exc)) from exc
        if entry is None:
            raise KeyNotFoundError(key)
        return entry.value

    async def put(self, key: str, value: str) -> None:
        try:
            async with self.session_factory() as session:
                entry = await session.get(KVEntry, key)
                if entry is None:
                    session.add(KVEntry(key=key, value=value))
                else:
                    entry.value = value
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("put", str(exc)) from exc

    async def delete(self, key: str) -> None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(delete(KVEntry).where(KVEntry.key == key))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("delete", str(exc)) from exc
        if result.rowcount == 0:
            raise KeyNotFoundError(key)
