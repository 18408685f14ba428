from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping
from uuid import UUID

import aiosqlite

from .config import DB_PATH
from .models import Category, Task, User
from .session import HouseSession

logger = logging.getLogger(__name__)

USERS_KEY = "hh_users"
CATEGORIES_KEY = "hh_chore_categories"
LAST_RESET_KEY = "hh_last_reset_date"
SESSION_KEY = "hh_house_session"

ALL_KEYS = (USERS_KEY, CATEGORIES_KEY, LAST_RESET_KEY, SESSION_KEY)

_DECODE_ERRORS = (json.JSONDecodeError, KeyError, ValueError, TypeError)


class Storage:
    """Key-value blob store on a single SQLite table."""

    def __init__(self, path: Path | str = DB_PATH) -> None:
        self.path = path
        self._db: aiosqlite.Connection | None = None

    async def get_db(self) -> aiosqlite.Connection:
        if self._db is None:
            self._db = await aiosqlite.connect(self.path)
            self._db.row_factory = aiosqlite.Row
            await self._db.execute("PRAGMA journal_mode=WAL")
        return self._db

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def init_db(self) -> None:
        db = await self.get_db()
        await db.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        await db.commit()

    # ── Raw blobs ─────────────────────────────────────────

    async def save(self, key: str, value: str) -> None:
        db = await self.get_db()
        await db.execute(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value),
        )
        await db.commit()

    async def load(self, key: str, default: str | None = None) -> str | None:
        db = await self.get_db()
        rows = await db.execute_fetchall(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        )
        if rows:
            return rows[0]["value"]
        return default

    async def delete(self, key: str) -> None:
        db = await self.get_db()
        await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await db.commit()

    async def clear_all(self) -> None:
        db = await self.get_db()
        await db.executemany(
            "DELETE FROM kv_store WHERE key = ?", [(k,) for k in ALL_KEYS]
        )
        await db.commit()

    async def _load_decoded(self, key: str, parse: Callable[[Any], Any], default: Any) -> Any:
        """Decode a JSON blob; anything unreadable counts as missing."""
        raw = await self.load(key)
        if raw is None:
            return default
        try:
            return parse(json.loads(raw))
        except _DECODE_ERRORS as e:
            logger.warning("Discarding unreadable %s blob: %s", key, e)
            return default

    # ── Users ─────────────────────────────────────────────

    async def save_users(self, users: Iterable[User]) -> None:
        await self.save(USERS_KEY, json.dumps([u.to_dict() for u in users]))

    async def load_users(self) -> list[User]:
        return await self._load_decoded(
            USERS_KEY, lambda data: [User.from_dict(d) for d in data], []
        )

    # ── Categories ────────────────────────────────────────

    async def save_categories(
        self, categories: Iterable[Category], tasks: Mapping[UUID, Task]
    ) -> None:
        await self.save(
            CATEGORIES_KEY, json.dumps([c.to_dict(tasks) for c in categories])
        )

    async def load_categories(self) -> list[tuple[Category, list[Task]]]:
        return await self._load_decoded(
            CATEGORIES_KEY, lambda data: [Category.from_dict(d) for d in data], []
        )

    # ── Daily reset ───────────────────────────────────────

    async def save_last_reset_date(self, day: date) -> None:
        await self.save(LAST_RESET_KEY, json.dumps(day.isoformat()))

    async def load_last_reset_date(self) -> date | None:
        return await self._load_decoded(LAST_RESET_KEY, date.fromisoformat, None)

    # ── House session ─────────────────────────────────────

    async def save_session(self, session: HouseSession) -> None:
        await self.save(SESSION_KEY, json.dumps(session.to_dict()))

    async def load_session(self) -> HouseSession:
        return await self._load_decoded(SESSION_KEY, HouseSession.from_dict, None) or HouseSession()
