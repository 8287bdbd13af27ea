"""Game state management module."""

from adventure.game_state.time_tracker import TimeTracker, ScheduledWait
from adventure.game_state.session_manager import (
    SessionManager,
    GameSession,
    SnapshotError,
)

__all__ = [
    "TimeTracker",
    "ScheduledWait",
    "SessionManager",
    "GameSession",
    "SnapshotError",
]
