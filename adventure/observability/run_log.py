"""
Run log for the adventure core.

One process-wide journal of what happened during play: every random draw,
every world or player command, and every step of virtual time. A seeded
session can be replayed and its journal compared line by line.

Events are small dataclasses. Serialization is generic over their fields,
so adding an event kind only needs a new dataclass and an entry in
EVENT_KINDS.
"""

from collections import Counter
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional
import json
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ROLL = "roll"
    ACTION = "action"
    TIME_STEP = "time_step"
    NOTE = "note"


@dataclass
class LogEvent:
    """A journal entry. Subclasses pin event_type and add their own fields."""

    event_type: EventType = field(default=EventType.NOTE, init=False)
    timestamp: datetime = field(default_factory=datetime.now)
    sequence_number: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["event_type"] = self.event_type.value
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEvent":
        kwargs = {f.name: data[f.name] for f in fields(cls) if f.init and f.name in data}
        if "timestamp" in kwargs:
            kwargs["timestamp"] = datetime.fromisoformat(kwargs["timestamp"])
        return cls(**kwargs)

    def describe(self) -> str:
        return str(self.context)

    def __str__(self) -> str:
        return f"[{self.sequence_number}] {self.event_type.value.upper()} {self.describe()}"


@dataclass
class RollEvent(LogEvent):
    """One draw from a DiceRoller."""

    event_type: EventType = field(default=EventType.ROLL, init=False)
    notation: str = ""  # "2d6+1", "range(2000-5000)"
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    reason: str = ""

    def describe(self) -> str:
        mod = f" {self.modifier:+d}" if self.modifier else ""
        return f"{self.notation} {self.rolls}{mod} -> {self.total} ({self.reason})"


@dataclass
class ActionEvent(LogEvent):
    """A command resolved by the world or the player."""

    event_type: EventType = field(default=EventType.ACTION, init=False)
    actor: str = ""  # "world" | "player"
    action: str = ""
    target: str = ""
    changed: bool = False  # False for soft outcomes
    result_text: str = ""

    def describe(self) -> str:
        flag = "*" if self.changed else "-"
        return f"{flag} {self.actor}.{self.action}({self.target})"


@dataclass
class TimeStepEvent(LogEvent):
    """Turns or virtual milliseconds added to the clock."""

    event_type: EventType = field(default=EventType.TIME_STEP, init=False)
    turns_advanced: int = 0
    ms_advanced: int = 0
    total_turns: int = 0
    total_ms: int = 0
    reason: str = ""

    def describe(self) -> str:
        return (
            f"+{self.turns_advanced} turn(s) +{self.ms_advanced}ms "
            f"=> turn {self.total_turns}, {self.total_ms}ms ({self.reason})"
        )


EVENT_KINDS: dict[EventType, type[LogEvent]] = {
    EventType.ROLL: RollEvent,
    EventType.ACTION: ActionEvent,
    EventType.TIME_STEP: TimeStepEvent,
    EventType.NOTE: LogEvent,
}


class RunLog:
    """
    Process-wide event journal.

    There is one instance per process; get_run_log() returns it. Components
    that take a run_log argument fall back to it when none is given.
    """

    _instance: Optional["RunLog"] = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._events = []
            instance._listeners = []
            instance._paused = False
            instance._seed = None
            instance._started = datetime.now()
            cls._instance = instance
        return cls._instance

    def reset(self) -> None:
        """Forget all events and the seed. Listeners stay attached."""
        self._events: list[LogEvent] = []
        self._seed: Optional[int] = None
        self._started = datetime.now()
        logger.debug("Run log cleared")

    def set_seed(self, seed: Optional[int]) -> None:
        self._seed = seed
        logger.info(f"Run seed: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def pause(self) -> None:
        """Drop events until resume() is called."""
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def subscribe(self, listener: Callable[[LogEvent], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[LogEvent], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __len__(self) -> int:
        return len(self._events)

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def record(self, event: LogEvent) -> LogEvent:
        """Number an event, store it and notify listeners."""
        if self._paused:
            return event
        event.sequence_number = len(self._events) + 1
        self._events.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # A broken listener must not stop the game
                logger.warning(f"Run log listener {listener!r} failed: {e}")
        return event

    def log_roll(
        self,
        notation: str,
        rolls: list[int],
        modifier: int,
        total: int,
        reason: str = "",
    ) -> RollEvent:
        return self.record(RollEvent(
            notation=notation, rolls=rolls, modifier=modifier, total=total, reason=reason,
        ))

    def log_action(
        self,
        actor: str,
        action: str,
        target: str = "",
        changed: bool = False,
        result_text: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> ActionEvent:
        return self.record(ActionEvent(
            actor=actor,
            action=action,
            target=target,
            changed=changed,
            result_text=result_text,
            context=context or {},
        ))

    def log_time_step(
        self,
        turns_advanced: int = 0,
        ms_advanced: int = 0,
        total_turns: int = 0,
        total_ms: int = 0,
        reason: str = "",
    ) -> TimeStepEvent:
        return self.record(TimeStepEvent(
            turns_advanced=turns_advanced,
            ms_advanced=ms_advanced,
            total_turns=total_turns,
            total_ms=total_ms,
            reason=reason,
        ))

    def note(self, name: str, **details: Any) -> LogEvent:
        """Record a free-form event."""
        return self.record(LogEvent(context={"name": name, **details}))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_events(self, event_type: Optional[EventType] = None, since: int = 0) -> list[LogEvent]:
        """Events after sequence number `since`, optionally of one type."""
        return [
            e for e in self._events[since:]
            if event_type is None or e.event_type == event_type
        ]

    def get_rolls(self) -> list[RollEvent]:
        return self.get_events(EventType.ROLL)

    def get_actions(self) -> list[ActionEvent]:
        return self.get_events(EventType.ACTION)

    def summary(self) -> dict[str, Any]:
        """Event counts per type, plus the seed."""
        counts = Counter(e.event_type.value for e in self._events)
        return {"seed": self._seed, "total": len(self._events), **counts}

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "started": self._started.isoformat(),
            "seed": self._seed,
            "events": [e.to_dict() for e in self._events],
        }

    def save(self, filepath: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Run log written to {filepath} ({len(self)} events)")

    @classmethod
    def load(cls, filepath: str) -> "RunLog":
        """Replace the journal of the process-wide log with a saved one."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        log = get_run_log()
        log.reset()
        log._started = datetime.fromisoformat(data["started"])
        log._seed = data.get("seed")
        log._events = [
            EVENT_KINDS[EventType(entry["event_type"])].from_dict(entry)
            for entry in data.get("events", [])
        ]
        logger.info(f"Run log read from {filepath} ({len(log)} events)")
        return log

    def format_log(self, event_types: Optional[list[EventType]] = None, last: Optional[int] = None) -> str:
        """Render the journal one event per line."""
        events = [e for e in self._events if not event_types or e.event_type in event_types]
        if last:
            events = events[-last:]
        header = f"Run log, seed {self._seed if self._seed is not None else 'unset'}, {len(self)} events"
        return "\n".join([header, *(str(e) for e in events)])


def get_run_log() -> RunLog:
    return RunLog()


def reset_run_log() -> RunLog:
    """Clear the process-wide log and return it."""
    log = get_run_log()
    log.reset()
    return log
