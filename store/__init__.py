"""Versioned entity/relationship store on top of SQLite."""

from store.database import Database, get_db
from store.entities import Direction, EntityStore, LookDescriptor, Relationship, VerbPairs
from store.schema import MigrationOutcome, Schema, SchemaRegistry, SubsystemManager
from store.subsystems import build_subsystem_manager
from store.visibility import LookResult, VisibilityResolver
from store.world_state import WorldState

__all__ = [
    "Database",
    "Direction",
    "EntityStore",
    "LookDescriptor",
    "LookResult",
    "MigrationOutcome",
    "Relationship",
    "Schema",
    "SchemaRegistry",
    "SubsystemManager",
    "VerbPairs",
    "VisibilityResolver",
    "WorldState",
    "build_subsystem_manager",
    "get_db",
]
