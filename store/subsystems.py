"""The subsystems every world registers, in initialization order."""

from store.database import Database
from store.entities import (
    initialize_entity_schema,
    initialize_look_schema,
    initialize_position_schema,
    initialize_relationship_schema,
)
from store.schema import SubsystemManager
from store.world_state import initialize_world_schema

# entity must come first: the other tables reference it
CORE_SUBSYSTEMS = (
    ("entity", initialize_entity_schema),
    ("relationship", initialize_relationship_schema),
    ("look", initialize_look_schema),
    ("position", initialize_position_schema),
    ("world", initialize_world_schema),
)


def build_subsystem_manager(db: Database) -> SubsystemManager:
    manager = SubsystemManager(db)
    for subsystem_id, initialize in CORE_SUBSYSTEMS:
        manager.register(subsystem_id, initialize)
    return manager
