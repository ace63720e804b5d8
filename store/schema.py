"""Schema version registry and subsystem manager.

Each subsystem owns a slice of the schema and a single initializer that
migrates it from whatever version is recorded in ``system_schema`` up to the
newest version it knows about.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from pydantic import BaseModel

from core.errors import SchemaMigrationError
from store.database import Database

logger = logging.getLogger(__name__)

SCHEMA_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS system_schema("
    "system_id TEXT PRIMARY KEY, version_number INTEGER NOT NULL)"
)


class SchemaRegistry:
    """Reads and writes per-subsystem schema versions."""

    def __init__(self, db: Database):
        self.db = db

    async def ensure_table(self) -> None:
        await self.db.execute(SCHEMA_TABLE_SQL)

    async def get_version(self, subsystem_id: str) -> int:
        row = await self.db.fetchone(
            "SELECT version_number FROM system_schema WHERE system_id = ?",
            (subsystem_id,),
        )
        return row["version_number"] if row is not None else 0

    async def set_version(self, subsystem_id: str, version: int) -> None:
        await self.db.execute(
            "INSERT OR REPLACE INTO system_schema (system_id, version_number) VALUES (?, ?)",
            (subsystem_id, version),
        )

    def schema(self, subsystem_id: str) -> Schema:
        return Schema(self, subsystem_id)


class Schema:
    """The view of the registry a single subsystem's initializer gets."""

    def __init__(self, registry: SchemaRegistry, subsystem_id: str):
        self.registry = registry
        self.subsystem_id = subsystem_id

    @property
    def db(self) -> Database:
        return self.registry.db

    async def get_version(self) -> int:
        return await self.registry.get_version(self.subsystem_id)

    async def set_version(self, version: int) -> None:
        await self.registry.set_version(self.subsystem_id, version)


Initializer = Callable[[Schema], Awaitable[None]]


class Subsystem:
    """A named owner of a schema fragment."""

    def __init__(self, subsystem_id: str, initialize: Initializer):
        self.subsystem_id = subsystem_id
        self.initialize = initialize

    def __repr__(self) -> str:
        return f"Subsystem({self.subsystem_id!r})"


class MigrationOutcome(BaseModel):
    """What happened to one subsystem during startup."""

    subsystem_id: str
    previous_version: int
    version: int

    @property
    def status(self) -> str:
        if self.previous_version == self.version:
            return "unchanged"
        if self.previous_version == 0:
            return "initialized"
        return "upgraded"


class SubsystemManager:
    """Ordered collection of subsystems, initialized once at startup."""

    def __init__(self, db: Database):
        self.registry = SchemaRegistry(db)
        self._subsystems: dict[str, Subsystem] = {}

    @property
    def subsystems(self) -> list[Subsystem]:
        return list(self._subsystems.values())

    def register(self, subsystem_id: str, initialize: Initializer) -> Subsystem:
        if subsystem_id in self._subsystems:
            raise ValueError(f"Subsystem {subsystem_id} is already registered")
        subsystem = Subsystem(subsystem_id, initialize)
        self._subsystems[subsystem_id] = subsystem
        logger.debug("Registered subsystem %s", subsystem_id)
        return subsystem

    async def initialize(self) -> list[MigrationOutcome]:
        """Bring every subsystem up to date, in registration order.

        Raises ``SchemaMigrationError`` on the first failure; that
        subsystem's changes are rolled back.
        """
        try:
            await self.registry.ensure_table()
        except Exception as e:
            raise SchemaMigrationError("system_schema", str(e)) from e

        outcomes = []
        for subsystem in self._subsystems.values():
            outcomes.append(await self._initialize_one(subsystem))
        return outcomes

    async def _initialize_one(self, subsystem: Subsystem) -> MigrationOutcome:
        schema = self.registry.schema(subsystem.subsystem_id)
        try:
            async with schema.db.transaction():
                previous = await schema.get_version()
                await subsystem.initialize(schema)
                current = await schema.get_version()
        except Exception as e:
            logger.error("Subsystem %s failed to initialize: %s", subsystem.subsystem_id, e)
            raise SchemaMigrationError(subsystem.subsystem_id, str(e)) from e

        outcome = MigrationOutcome(
            subsystem_id=subsystem.subsystem_id,
            previous_version=previous,
            version=current,
        )
        if outcome.status == "unchanged":
            logger.info("Subsystem %s version %d", subsystem.subsystem_id, current)
        elif outcome.status == "initialized":
            logger.info("Subsystem %s initialized to version %d", subsystem.subsystem_id, current)
        else:
            logger.info(
                "Subsystem %s upgraded from version %d to version %d",
                subsystem.subsystem_id, previous, current,
            )
        return outcome
