"""
Observability for the adventure core.

Records rolls, resolved commands and virtual time steps in a single run log.
"""

from adventure.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    RollEvent,
    ActionEvent,
    TimeStepEvent,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "RollEvent",
    "ActionEvent",
    "TimeStepEvent",
    "get_run_log",
    "reset_run_log",
]
