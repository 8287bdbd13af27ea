"""Player command parsing and routing."""

from adventure.commands.command_dispatcher import (
    CommandDispatcher,
    CommandOutcome,
    DIRECTION_ALIASES,
    WORLD_FAULT_TEXT,
)

__all__ = [
    "CommandDispatcher",
    "CommandOutcome",
    "DIRECTION_ALIASES",
    "WORLD_FAULT_TEXT",
]
