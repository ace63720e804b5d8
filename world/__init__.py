"""World system: sessions, the world owner and its loop."""

from world.game import World
from world.loop import WorldLoop
from world.session import Session

__all__ = [
    "Session",
    "World",
    "WorldLoop",
]
