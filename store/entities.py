"""Entity/relationship store.

Entities are bare ids; everything else hangs off them in side tables.
Relationships are stored as two directional rows sharing a ``pair_id`` (the
edge and its inverse) and are only ever soft-deleted by clearing ``alive``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import AsyncIterator
from uuid import uuid4

from pydantic import BaseModel

from store.database import Database
from store.schema import Schema

logger = logging.getLogger(__name__)

CONTAINS = "contains"
IN = "in"

LOOK_BASIC = "basic"
SCALE_AREA = "area"


class Direction(str, Enum):
    OUTGOING = "outgoing"  # entity is the provider
    INCOMING = "incoming"  # entity is the receiver


class Relationship(BaseModel):
    """One directional row of a relationship pair."""

    relationship_id: str
    pair_id: str
    provider_id: str
    receiver_id: str
    verb: str
    alive: bool = True


class LookDescriptor(BaseModel):
    """A textual facet of an entity."""

    look_id: int
    entity_id: str
    look_type: str
    description: str


class VerbPairs:
    """Inverse verb conventions, built once and shared with the store.

    A verb without a declared partner is treated as symmetric.
    """

    def __init__(self, pairs: dict[str, str] | None = None):
        self._inverse: dict[str, str] = {}
        for verb, inverse in (pairs if pairs is not None else {CONTAINS: IN}).items():
            self.add(verb, inverse)

    def add(self, verb: str, inverse: str) -> None:
        for v in (verb, inverse):
            if v in self._inverse:
                raise ValueError(f"Verb {v} already has an inverse ({self._inverse[v]})")
        self._inverse[verb] = inverse
        self._inverse[inverse] = verb

    def inverse(self, verb: str) -> str:
        return self._inverse.get(verb, verb)


# --- Schema initializers ---

async def initialize_entity_schema(schema: Schema) -> None:
    if await schema.get_version() < 1:
        await schema.db.execute(
            "CREATE TABLE IF NOT EXISTS entity(entity_id TEXT PRIMARY KEY)"
        )
        await schema.set_version(1)


async def initialize_relationship_schema(schema: Schema) -> None:
    v = await schema.get_version()
    if v < 1:
        await schema.db.execute(
            """CREATE TABLE IF NOT EXISTS entity_relationship(
                   relationship_id TEXT PRIMARY KEY,
                   pair_id TEXT NOT NULL,
                   provider_id TEXT NOT NULL REFERENCES entity(entity_id),
                   receiver_id TEXT NOT NULL REFERENCES entity(entity_id),
                   verb TEXT NOT NULL,
                   alive INTEGER NOT NULL DEFAULT 1)"""
        )
        await schema.set_version(1)
    if v < 2:
        await schema.db.execute(
            "CREATE INDEX IF NOT EXISTS idx_relationship_provider "
            "ON entity_relationship(provider_id, verb, alive)"
        )
        await schema.db.execute(
            "CREATE INDEX IF NOT EXISTS idx_relationship_receiver "
            "ON entity_relationship(receiver_id, verb, alive)"
        )
        await schema.db.execute(
            "CREATE INDEX IF NOT EXISTS idx_relationship_pair ON entity_relationship(pair_id)"
        )
        await schema.set_version(2)


async def initialize_look_schema(schema: Schema) -> None:
    if await schema.get_version() < 1:
        await schema.db.execute(
            """CREATE TABLE IF NOT EXISTS entity_look(
                   look_id INTEGER PRIMARY KEY AUTOINCREMENT,
                   entity_id TEXT NOT NULL REFERENCES entity(entity_id),
                   look_type TEXT NOT NULL,
                   description TEXT NOT NULL)"""
        )
        await schema.db.execute(
            "CREATE INDEX IF NOT EXISTS idx_look_entity ON entity_look(entity_id)"
        )
        await schema.set_version(1)


async def initialize_position_schema(schema: Schema) -> None:
    if await schema.get_version() < 1:
        await schema.db.execute(
            """CREATE TABLE IF NOT EXISTS entity_position_scale(
                   entity_id TEXT PRIMARY KEY REFERENCES entity(entity_id),
                   scale TEXT NOT NULL)"""
        )
        await schema.set_version(1)


class EntityStore:
    """CRUD and traversal over entities, relationships and looks."""

    def __init__(self, db: Database, verbs: VerbPairs | None = None):
        self.db = db
        self.verbs = verbs or VerbPairs()

    # --- Entities ---

    async def create_entity(self) -> str:
        entity_id = str(uuid4())
        await self.db.execute("INSERT INTO entity (entity_id) VALUES (?)", (entity_id,))
        logger.debug("Entity created: %s", entity_id)
        return entity_id

    async def entity_exists(self, entity_id: str) -> bool:
        row = await self.db.fetchone(
            "SELECT 1 FROM entity WHERE entity_id = ?", (entity_id,),
        )
        return row is not None

    async def create_actor(self, description: str = "actor") -> str:
        async with self.db.transaction():
            entity_id = await self.create_entity()
            await self.add_look(entity_id, LOOK_BASIC, description)
        return entity_id

    async def create_place(self, description: str = "a place") -> str:
        async with self.db.transaction():
            entity_id = await self.create_entity()
            await self.add_look(entity_id, LOOK_BASIC, description)
            await self.set_position_scale(entity_id, SCALE_AREA)
        return entity_id

    # --- Relationships ---

    async def add_relationship(self, provider_id: str, receiver_id: str, verb: str) -> str:
        """Connect two entities; returns the id of the forward row.

        Duplicates are allowed: re-adding an edge creates a new pair.
        """
        relationship_id = str(uuid4())
        inverse_id = str(uuid4())
        sql = (
            "INSERT INTO entity_relationship "
            "(relationship_id, pair_id, provider_id, receiver_id, verb, alive) "
            "VALUES (?, ?, ?, ?, ?, 1)"
        )
        async with self.db.transaction():
            await self.db.execute(
                sql, (relationship_id, relationship_id, provider_id, receiver_id, verb),
            )
            await self.db.execute(
                sql, (inverse_id, relationship_id, receiver_id, provider_id, self.verbs.inverse(verb)),
            )
        logger.debug("Relationship %s: %s %s %s", relationship_id, provider_id, verb, receiver_id)
        return relationship_id

    async def remove_relationship(self, relationship_id: str) -> None:
        """Mark a relationship (both of its rows) dead. Idempotent."""
        row = await self.db.fetchone(
            "SELECT pair_id FROM entity_relationship WHERE relationship_id = ?",
            (relationship_id,),
        )
        if row is None:
            logger.debug("Remove of unknown relationship %s ignored", relationship_id)
            return
        await self.db.execute(
            "UPDATE entity_relationship SET alive = 0 WHERE pair_id = ?",
            (row["pair_id"],),
        )

    async def get_relationship(self, relationship_id: str) -> Relationship | None:
        row = await self.db.fetchone(
            "SELECT * FROM entity_relationship WHERE relationship_id = ?",
            (relationship_id,),
        )
        return self._row_to_relationship(row) if row is not None else None

    async def relationships_of(self, entity_id: str, include_dead: bool = False) -> list[Relationship]:
        """Rows where ``entity_id`` is the provider, oldest first."""
        sql = "SELECT * FROM entity_relationship WHERE provider_id = ?"
        if not include_dead:
            sql += " AND alive = 1"
        rows = await self.db.fetchall(sql + " ORDER BY rowid", (entity_id,))
        return [self._row_to_relationship(row) for row in rows]

    async def iter_related(
        self,
        entity_id: str,
        verb: str,
        direction: Direction = Direction.OUTGOING,
    ) -> AsyncIterator[str]:
        """Lazily yield ids joined to ``entity_id`` by live ``verb`` edges."""
        if direction == Direction.OUTGOING:
            sql = (
                "SELECT receiver_id AS other_id FROM entity_relationship "
                "WHERE provider_id = ? AND verb = ? AND alive = 1 ORDER BY rowid"
            )
        else:
            sql = (
                "SELECT provider_id AS other_id FROM entity_relationship "
                "WHERE receiver_id = ? AND verb = ? AND alive = 1 ORDER BY rowid"
            )
        async for row in self.db.iterate(sql, (entity_id, verb)):
            yield row["other_id"]

    async def traverse(
        self,
        entity_id: str,
        verb: str,
        direction: Direction = Direction.OUTGOING,
    ) -> list[str]:
        return [other async for other in self.iter_related(entity_id, verb, direction)]

    # --- Looks ---

    async def add_look(self, entity_id: str, look_type: str, description: str) -> LookDescriptor:
        look_id = await self.db.execute(
            "INSERT INTO entity_look (entity_id, look_type, description) VALUES (?, ?, ?)",
            (entity_id, look_type, description),
        )
        return LookDescriptor(
            look_id=look_id, entity_id=entity_id, look_type=look_type, description=description,
        )

    async def get_looks(self, entity_id: str) -> list[LookDescriptor]:
        rows = await self.db.fetchall(
            "SELECT * FROM entity_look WHERE entity_id = ? ORDER BY look_id",
            (entity_id,),
        )
        return [
            LookDescriptor(
                look_id=row["look_id"],
                entity_id=row["entity_id"],
                look_type=row["look_type"],
                description=row["description"],
            )
            for row in rows
        ]

    # --- Position ---

    async def set_position_scale(self, entity_id: str, scale: str) -> None:
        await self.db.execute(
            "INSERT OR REPLACE INTO entity_position_scale (entity_id, scale) VALUES (?, ?)",
            (entity_id, scale),
        )

    async def get_position_scale(self, entity_id: str) -> str | None:
        row = await self.db.fetchone(
            "SELECT scale FROM entity_position_scale WHERE entity_id = ?", (entity_id,),
        )
        return row["scale"] if row is not None else None

    # --- Navigation ---

    async def places(self) -> list[str]:
        rows = await self.db.fetchall(
            "SELECT p.entity_id FROM entity_position_scale p "
            "JOIN entity e ON e.entity_id = p.entity_id "
            "WHERE p.scale = ? ORDER BY e.rowid",
            (SCALE_AREA,),
        )
        return [row["entity_id"] for row in rows]

    async def find_place(self, name: str) -> str | None:
        """Place whose id or one of whose looks matches ``name``."""
        wanted = name.strip().lower()
        places = await self.places()
        if wanted in places:
            return wanted
        for place_id in places:
            for look in await self.get_looks(place_id):
                if look.description.lower() == wanted:
                    return place_id
        return None

    async def move_entity(self, entity_id: str, destination_id: str) -> list[str]:
        """Put ``entity_id`` in ``destination_id``; returns where it was.

        The old ``in`` pairs are soft-removed, so they stay in the history.
        """
        async with self.db.transaction():
            previous = [r for r in await self.relationships_of(entity_id) if r.verb == IN]
            for relationship in previous:
                await self.remove_relationship(relationship.relationship_id)
            await self.add_relationship(entity_id, destination_id, IN)
        logger.debug("Moved %s to %s", entity_id, destination_id)
        return [r.receiver_id for r in previous]

    @staticmethod
    def _row_to_relationship(row) -> Relationship:
        return Relationship(
            relationship_id=row["relationship_id"],
            pair_id=row["pair_id"],
            provider_id=row["provider_id"],
            receiver_id=row["receiver_id"],
            verb=row["verb"],
            alive=bool(row["alive"]),
        )
