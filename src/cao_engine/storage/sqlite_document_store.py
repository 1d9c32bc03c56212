"""SQLite-backed key/value store for whole JSON documents."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import aiosqlite

from cao_engine.storage.migrations import initialize_document_db


class SQLiteDocumentStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    async def initialize(self) -> None:
        await initialize_document_db(self._db_path)

    async def get(self, key: str) -> Any | None:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT value FROM documents WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
                return json.loads(row[0]) if row else None

    async def put(self, key: str, value: Any) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO documents (key, value, updated_at) VALUES (?, ?, ?)",
                (key, json.dumps(value), datetime.now(timezone.utc).isoformat()),
            )
            await db.commit()

    async def put_many(self, documents: dict[str, Any]) -> None:
        """Write several documents in one transaction."""
        now = datetime.now(timezone.utc).isoformat()
        async with aiosqlite.connect(self._db_path) as db:
            await db.executemany(
                "INSERT OR REPLACE INTO documents (key, value, updated_at) VALUES (?, ?, ?)",
                [(k, json.dumps(v), now) for k, v in documents.items()],
            )
            await db.commit()

    async def delete(self, key: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DELETE FROM documents WHERE key = ?", (key,))
            await db.commit()

    async def keys(self) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT key FROM documents ORDER BY key") as cursor:
                return [row[0] for row in await cursor.fetchall()]
