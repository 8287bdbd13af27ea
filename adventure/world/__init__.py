"""World graph: rooms, paths and command resolution."""

from adventure.world.room import Room
from adventure.world.world_engine import (
    World,
    WorldError,
    NoRoomError,
    CANNOT_GO,
    WAY_LOCKED,
    WAY_CLOSED,
)

__all__ = [
    "Room",
    "World",
    "WorldError",
    "NoRoomError",
    "CANNOT_GO",
    "WAY_LOCKED",
    "WAY_CLOSED",
]
