"""
Save games for the adventure core.

A save is one JSON file holding a GameSession: a small header (id, name,
timestamps, format version, dice seed) and the serialized world, player and
clock. Entities serialize themselves through to_dict()/from_dict(), so a
save and a reload give back an equal game.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import json
import logging
import uuid

from adventure.game_state.time_tracker import TimeTracker
from adventure.player.player_state import Player
from adventure.world.world_engine import World, WorldError

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0.0"

# Header fields shown when listing saves
SLOT_FIELDS = ("session_id", "session_name", "created_at", "last_saved_at", "version")


class SnapshotError(Exception):
    """A save file exists but does not hold a usable game."""


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class GameSession:
    """Header plus the serialized world, player and clock of one game."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session_name: str = "Untitled Session"
    created_at: str = field(default_factory=_now)
    last_saved_at: Optional[str] = None
    version: str = SNAPSHOT_VERSION
    seed: Optional[int] = None

    world: dict[str, Any] = field(default_factory=dict)
    player: dict[str, Any] = field(default_factory=dict)
    clock: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameSession":
        """
        Build a session from parsed JSON.

        Raises:
            SnapshotError: If the world or player section is missing or empty
        """
        missing = [key for key in ("world", "player") if not data.get(key)]
        if missing:
            raise SnapshotError(f"Snapshot has no {' or '.join(missing)} section")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class SessionManager:
    """
    Reads and writes save files in one directory.

    capture() and restore() convert between live objects and a GameSession;
    save_session() and load_session() move a GameSession to and from disk.
    The last captured or loaded session is kept as current_session.
    """

    def __init__(self, save_directory: Optional[Path] = None):
        self.save_directory = Path(save_directory or "saves")
        self.save_directory.mkdir(parents=True, exist_ok=True)
        self._current: Optional[GameSession] = None

    @property
    def current_session(self) -> Optional[GameSession]:
        return self._current

    def _resolve(self, filepath: Path | str) -> Path:
        """Accept either a full path or a file name inside the save directory."""
        path = Path(filepath)
        return path if path.exists() else self.save_directory / path

    # -------------------------------------------------------------------------
    # Live objects <-> session
    # -------------------------------------------------------------------------

    def capture(
        self,
        world: World,
        player: Player,
        clock: Optional[TimeTracker] = None,
        seed: Optional[int] = None,
        session_name: str = "New Adventure",
    ) -> GameSession:
        """
        Snapshot the running game.

        A game that was captured or loaded before keeps its id and creation
        time, so saving it again overwrites the same slot.
        """
        previous = self._current
        session = GameSession(
            session_name=session_name,
            seed=seed,
            world=world.to_dict(),
            player=player.to_dict(),
            clock=clock.to_dict() if clock is not None else {},
        )
        if previous is not None:
            session.session_id = previous.session_id
            session.created_at = previous.created_at
        self._current = session
        return session

    def restore(self, session: Optional[GameSession] = None) -> tuple[World, Player, TimeTracker]:
        """
        Rebuild the world, player and clock from a session.

        Raises:
            ValueError: If there is no session to restore
            SnapshotError: If the snapshot breaks a world or player invariant
        """
        session = session or self._current
        if session is None:
            raise ValueError("No session to restore")

        try:
            world = World.from_dict(session.world)
            player = Player.from_dict(session.player)
        except (KeyError, ValueError, WorldError) as e:
            raise SnapshotError(f"Session '{session.session_name}' is corrupt: {e}") from e
        clock = TimeTracker.from_dict(session.clock)

        logger.info(
            f"Restored '{session.session_name}' at turn {clock.turns} "
            f"in room {world.current_room_id}"
        )
        return world, player, clock

    # -------------------------------------------------------------------------
    # Session <-> disk
    # -------------------------------------------------------------------------

    def save_session(
        self,
        session: Optional[GameSession] = None,
        filename: Optional[str] = None,
    ) -> Path:
        """
        Write a session as JSON and return the file path.

        The default file name is the session name with unsafe characters
        removed, followed by the first eight characters of the session id.
        """
        session = session or self._current
        if session is None:
            raise ValueError("No session to save")

        session.last_saved_at = _now()
        if filename is None:
            stem = "".join(c for c in session.session_name if c.isalnum() or c in " -_")
            filename = f"{stem}_{session.session_id[:8]}.json"

        path = self.save_directory / filename
        path.write_text(json.dumps(session.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Game saved: {path}")
        return path

    def load_session(self, filepath: Path | str) -> GameSession:
        """
        Read a save file and make it the current session.

        Raises:
            FileNotFoundError: If there is no such file
            SnapshotError: If the file is not JSON or lacks world/player data
        """
        path = self._resolve(filepath)
        if not path.exists():
            raise FileNotFoundError(f"No save file at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SnapshotError(f"{path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SnapshotError(f"{path} does not hold a saved game")

        self._current = GameSession.from_dict(data)
        logger.info(f"Game loaded: {self._current.session_name} from {path}")
        return self._current

    def list_sessions(self) -> list[dict[str, Any]]:
        """Headers of every readable save, newest save first."""
        slots = []
        for path in self.save_directory.glob("*.json"):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping unreadable save {path}: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Skipping {path}: not a saved game")
                continue
            slot = {key: data.get(key) for key in SLOT_FIELDS}
            slot.update(filepath=str(path), filename=path.name)
            slots.append(slot)

        slots.sort(key=lambda s: s["last_saved_at"] or s["created_at"] or "", reverse=True)
        return slots

    def delete_session(self, filepath: Path | str) -> bool:
        """Remove a save file. Returns False when there was nothing to remove."""
        path = self._resolve(filepath)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Save deleted: {path}")
        return True
