"""Visibility resolution: what an actor sees from where it stands."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from store.entities import CONTAINS, IN, Direction, EntityStore

logger = logging.getLogger(__name__)


class LookResult(BaseModel):
    """Rendered view plus the per-entity breakdown behind it."""

    text: str = ""
    entities: list[str] = Field(default_factory=list)
    breakdown: dict[str, list[str]] = Field(default_factory=dict)


class VisibilityResolver:
    """Two-hop traversal over ``in``/``contains`` edges.

    Visible = everything the actor's containers contain (minus the actor)
    followed by everything the actor contains itself. Order is stable:
    containers, then their contents, then own contents, each by insertion.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    async def visible_entities(self, actor_id: str) -> list[str]:
        async with self.store.db.transaction():
            return await self._visible_entities(actor_id)

    async def look(self, actor_id: str) -> LookResult:
        async with self.store.db.transaction():
            visible = await self._visible_entities(actor_id)
            breakdown: dict[str, list[str]] = {}
            for entity_id in visible:
                looks = await self.store.get_looks(entity_id)
                breakdown[entity_id] = [look.description for look in looks]

        lines = [desc for entity_id in visible for desc in breakdown[entity_id]]
        logger.debug("Actor %s sees %d entities", actor_id, len(visible))
        return LookResult(text="\n".join(lines), entities=visible, breakdown=breakdown)

    async def _visible_entities(self, actor_id: str) -> list[str]:
        seen: set[str] = {actor_id}
        visible: list[str] = []

        def collect(entity_id: str) -> None:
            if entity_id not in seen:
                seen.add(entity_id)
                visible.append(entity_id)

        for container_id in await self.store.traverse(actor_id, IN, Direction.OUTGOING):
            for sibling_id in await self.store.traverse(container_id, CONTAINS, Direction.OUTGOING):
                collect(sibling_id)

        for content_id in await self.store.traverse(actor_id, CONTAINS, Direction.OUTGOING):
            collect(content_id)

        return visible
