"""
Shared data structures for the adventure core.

Items, enemies and paths are owned by rooms, the player or (for items) a
container item. They are plain dataclasses so the whole world can be
snapshotted with to_dict()/from_dict() and restored without loss.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence
import logging
import random

from adventure.observability.run_log import RunLog, get_run_log

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Resting (inclusive ranges)
REST_WAIT_MS_RANGE = (2000, 5000)
REST_HEAL_RANGE = (1, 6)

# Alias used throughout for name-keyed item collections
ItemMap = dict[str, "Item"]


# =============================================================================
# DICE AND RANDOMIZATION
# =============================================================================


class DiceRoller:
    """
    Seedable randomization source.

    Every random draw in the core goes through an instance of this class so
    a session can be reproduced from its seed, and every draw is logged.
    """

    def __init__(self, seed: Optional[int] = None, run_log: Optional[RunLog] = None):
        self._seed = seed
        self._rng = random.Random(seed)
        self._roll_log: list[DiceResult] = []
        self._run_log = run_log if run_log is not None else get_run_log()

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def set_seed(self, seed: int) -> None:
        """Reseed for reproducibility."""
        self._seed = seed
        self._rng.seed(seed)

    def roll(self, dice: str, reason: str = "") -> "DiceResult":
        """
        Roll dice using standard notation (e.g., '1d6', '2d6+1', '1d8-2').

        Args:
            dice: Dice notation string
            reason: Why this roll is being made (for logging)

        Returns:
            DiceResult with individual rolls and total
        """
        modifier = 0
        if '+' in dice:
            dice_part, mod_part = dice.split('+')
            modifier = int(mod_part)
        elif '-' in dice:
            dice_part, mod_part = dice.split('-')
            modifier = -int(mod_part)
        else:
            dice_part = dice

        num_dice, die_size = dice_part.lower().split('d')
        num_dice = int(num_dice) if num_dice else 1
        die_size = int(die_size)

        rolls = [self._rng.randint(1, die_size) for _ in range(num_dice)]
        result = DiceResult(
            notation=dice,
            rolls=rolls,
            modifier=modifier,
            total=sum(rolls) + modifier,
            reason=reason,
        )
        self._record(result)
        return result

    def randint(self, a: int, b: int, reason: str = "") -> int:
        """Return a random integer in [a, b], inclusive."""
        value = self._rng.randint(a, b)
        self._record(
            DiceResult(
                notation=f"range({a}-{b})",
                rolls=[value],
                modifier=0,
                total=value,
                reason=reason,
            )
        )
        return value

    def choice(self, seq: Sequence[Any], reason: str = "") -> Any:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        index = self.randint(0, len(seq) - 1, reason or f"choice from {len(seq)} options")
        return seq[index]

    def _record(self, result: "DiceResult") -> None:
        self._roll_log.append(result)
        self._run_log.log_roll(
            notation=result.notation,
            rolls=result.rolls,
            modifier=result.modifier,
            total=result.total,
            reason=result.reason,
        )

    def get_roll_log(self) -> list["DiceResult"]:
        """Get every roll made by this roller."""
        return self._roll_log.copy()

    def clear_roll_log(self) -> None:
        self._roll_log = []


@dataclass
class DiceResult:
    """Result of a dice roll with full information."""
    notation: str
    rolls: list[int]
    modifier: int
    total: int
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.notation}: {self.rolls} + {self.modifier} = {self.total}"
        elif self.modifier < 0:
            return f"{self.notation}: {self.rolls} - {abs(self.modifier)} = {self.total}"
        return f"{self.notation}: {self.rolls} = {self.total}"


# =============================================================================
# GAME ENTITIES
# =============================================================================


@dataclass
class Item:
    """
    A named object in a room, in the player's inventory, or in a container.

    An item with damage is a weapon. An item with contents (even an empty
    dict) is a container. Containers hold items one level deep only: an item
    inside a container may not itself be a container.
    """
    name: str
    description: str = ""  # Line shown when the room is looked at
    inspection: str = ""   # Shown on inspect; falls back to description
    damage: Optional[int] = None
    contents: Optional[dict[str, "Item"]] = None

    def __post_init__(self):
        if not self.inspection:
            self.inspection = self.description
        if self.contents:
            for inner in self.contents.values():
                if inner.is_container:
                    raise ValueError(
                        f"Container '{self.name}' cannot hold container '{inner.name}'"
                    )

    @property
    def is_weapon(self) -> bool:
        return self.damage is not None

    @property
    def is_container(self) -> bool:
        return self.contents is not None

    def can_hold(self, item: "Item") -> bool:
        """Check if an item may be placed inside this one."""
        return self.is_container and not item.is_container and item is not self

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "inspection": self.inspection,
            "damage": self.damage,
            "contents": (
                None if self.contents is None
                else [i.to_dict() for i in self.contents.values()]
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Deserialize from dictionary."""
        contents = data.get("contents")
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            inspection=data.get("inspection", ""),
            damage=data.get("damage"),
            contents=(
                None if contents is None
                else items_from_list(contents)
            ),
        )


@dataclass
class Enemy:
    """A combatant with hit points and a loot set released on death."""
    name: str
    description: str = ""
    inspection: str = ""
    hp: int = 1
    loot: dict[str, Item] = field(default_factory=dict)

    def __post_init__(self):
        if not self.inspection:
            self.inspection = self.description

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    def get_hit(self, damage: int) -> int:
        """Apply damage (hp may go negative) and return the remaining hp."""
        self.hp -= damage
        return self.hp

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inspection": self.inspection,
            "hp": self.hp,
            "loot": [i.to_dict() for i in self.loot.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Enemy":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            inspection=data.get("inspection", ""),
            hp=data.get("hp", 1),
            loot=items_from_list(data.get("loot", [])),
        )


@dataclass
class PathState:
    """
    A directed edge from a room to a target room.

    Locked and closed are independent flags. Only closed is toggled by
    open/close; a locked path blocks movement whatever its closed flag says.
    """
    target: str  # room_id
    locked: bool = False
    closed: bool = False
    description: str = ""  # Appended to the owning room's description
    inspection: str = ""

    def __post_init__(self):
        if not self.inspection:
            self.inspection = self.description

    def open(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "locked": self.locked,
            "closed": self.closed,
            "description": self.description,
            "inspection": self.inspection,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathState":
        return cls(
            target=data["target"],
            locked=data.get("locked", False),
            closed=data.get("closed", False),
            description=data.get("description", ""),
            inspection=data.get("inspection", ""),
        )


@dataclass
class CmdResult:
    """Outcome of a command that reports success separately from its text."""
    ok: bool
    text: str


def items_from_list(data: list[dict[str, Any]]) -> dict[str, Item]:
    """Rebuild an ordered name -> Item mapping from serialized items."""
    items: dict[str, Item] = {}
    for entry in data:
        item = Item.from_dict(entry)
        items[item.name] = item
    return items
