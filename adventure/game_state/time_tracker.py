"""
Virtual time for an adventure session.

The core never sleeps. Commands that take time in the story (resting) hand
back a wait in milliseconds; the session loop schedules it here and then
completes it, advancing virtual time. A front end that wants a real pause
can subscribe to completed waits and sleep there, outside the core.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import logging

from adventure.observability.run_log import RunLog, get_run_log

logger = logging.getLogger(__name__)


@dataclass
class ScheduledWait:
    """A timed effect waiting for the session loop to complete it."""
    wait_ms: int
    reason: str = ""
    scheduled_turn: int = 0
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "wait_ms": self.wait_ms,
            "reason": self.reason,
            "scheduled_turn": self.scheduled_turn,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledWait":
        return cls(
            wait_ms=data["wait_ms"],
            reason=data.get("reason", ""),
            scheduled_turn=data.get("scheduled_turn", 0),
            completed=data.get("completed", False),
        )


@dataclass
class TimeTracker:
    """
    Tracks resolved turns and elapsed virtual time.

    One turn is one resolved player command. Elapsed time only moves when a
    scheduled wait is completed.
    """

    turns: int = 0
    elapsed_ms: int = 0
    pending: list[ScheduledWait] = field(default_factory=list)
    run_log: Optional[RunLog] = field(default=None, repr=False, compare=False)

    # Callbacks fired for each completed wait
    _wait_callbacks: list[Callable[[ScheduledWait], None]] = field(
        default_factory=list, repr=False, compare=False
    )

    def _log(self) -> RunLog:
        return self.run_log if self.run_log is not None else get_run_log()

    def advance_turn(self, turns: int = 1) -> dict[str, Any]:
        """
        Record resolved commands.

        Returns:
            Dictionary with the turns advanced and the new total
        """
        self.turns += turns
        self._log().log_time_step(
            turns_advanced=turns,
            total_turns=self.turns,
            total_ms=self.elapsed_ms,
            reason="command resolved",
        )
        return {"turns_advanced": turns, "total_turns": self.turns}

    def schedule(self, wait_ms: int, reason: str = "") -> ScheduledWait:
        """Queue a timed effect for completion by the session loop."""
        if wait_ms < 0:
            raise ValueError(f"wait_ms must not be negative: {wait_ms}")
        wait = ScheduledWait(wait_ms=wait_ms, reason=reason, scheduled_turn=self.turns)
        self.pending.append(wait)
        logger.debug(f"Scheduled {wait_ms}ms wait ({reason}) at turn {self.turns}")
        return wait

    def complete_pending(self) -> list[ScheduledWait]:
        """
        Complete every pending wait, advancing virtual time by each.

        Returns:
            The waits completed, in scheduling order
        """
        completed, self.pending = self.pending, []
        for wait in completed:
            self.elapsed_ms += wait.wait_ms
            wait.completed = True
            self._log().log_time_step(
                ms_advanced=wait.wait_ms,
                total_turns=self.turns,
                total_ms=self.elapsed_ms,
                reason=wait.reason,
            )
            for callback in self._wait_callbacks:
                callback(wait)
        return completed

    def register_wait_callback(self, callback: Callable[[ScheduledWait], None]) -> None:
        """Register a function called with each completed wait."""
        self._wait_callbacks.append(callback)

    def to_dict(self) -> dict[str, Any]:
        return {
            "turns": self.turns,
            "elapsed_ms": self.elapsed_ms,
            "pending": [w.to_dict() for w in self.pending],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], run_log: Optional[RunLog] = None) -> "TimeTracker":
        return cls(
            turns=data.get("turns", 0),
            elapsed_ms=data.get("elapsed_ms", 0),
            pending=[ScheduledWait.from_dict(w) for w in data.get("pending", [])],
            run_log=run_log,
        )
