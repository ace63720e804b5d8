"""Small key/value table for world-wide state: the clock and the start place."""

from __future__ import annotations

import logging

from store.database import Database
from store.schema import Schema

logger = logging.getLogger(__name__)

KEY_TIME = "time"
KEY_START_PLACE = "start_place"


async def initialize_world_schema(schema: Schema) -> None:
    if await schema.get_version() < 1:
        await schema.db.execute(
            "CREATE TABLE IF NOT EXISTS world_state(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        await schema.db.execute(
            "INSERT OR IGNORE INTO world_state (key, value) VALUES (?, '0')", (KEY_TIME,),
        )
        await schema.set_version(1)


class WorldState:
    """Persisted world clock and starting place."""

    def __init__(self, db: Database):
        self.db = db

    async def get(self, key: str) -> str | None:
        row = await self.db.fetchone("SELECT value FROM world_state WHERE key = ?", (key,))
        return row["value"] if row is not None else None

    async def set(self, key: str, value: str) -> None:
        await self.db.execute(
            "INSERT OR REPLACE INTO world_state (key, value) VALUES (?, ?)", (key, value),
        )

    async def get_time(self) -> int:
        return int(await self.get(KEY_TIME) or 0)

    async def advance_time(self, span: int) -> int:
        """Move the clock forward by ``span``; returns the new time."""
        async with self.db.transaction():
            now = await self.get_time() + span
            await self.set(KEY_TIME, str(now))
        logger.debug("World time advanced by %d to %d", span, now)
        return now

    async def get_start_place(self) -> str | None:
        return await self.get(KEY_START_PLACE)

    async def set_start_place(self, entity_id: str) -> None:
        await self.set(KEY_START_PLACE, entity_id)
