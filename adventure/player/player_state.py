"""
Player state for the adventure core.

Holds the player's health, combat flag, equipped weapon and inventory, and
resolves the commands that touch only the player. Attacking is the first
half of the combat protocol: attack() picks the weapon and its damage, and
World.harm_enemy() applies that damage to a target.

Resting never blocks. The randomized wait is returned in the RestOutcome
for the session loop to schedule (see game_state.time_tracker).
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import logging

from adventure.data_models import (
    DiceRoller,
    Item,
    ItemMap,
    REST_HEAL_RANGE,
    REST_WAIT_MS_RANGE,
    items_from_list,
)
from adventure.observability.run_log import RunLog, get_run_log

logger = logging.getLogger(__name__)

SELF_NAMES = ("me", "self", "myself")


@dataclass
class RestPlan:
    """How long a rest takes and how much it heals, before clamping."""
    wait_ms: int
    heal: int


@dataclass
class RestOutcome:
    """Result of Player.rest()."""
    text: str
    healed: int = 0
    wait_ms: int = 0  # Virtual time the rest costs; 0 when no rest happened

    @property
    def rested(self) -> bool:
        return self.wait_ms > 0


def plan_rest(dice: DiceRoller) -> RestPlan:
    """Draw the wait and heal amounts for one rest."""
    wait_ms = dice.randint(*REST_WAIT_MS_RANGE, reason="rest duration")
    heal = dice.randint(*REST_HEAL_RANGE, reason="rest heal")
    return RestPlan(wait_ms=wait_ms, heal=heal)


@dataclass
class Player:
    """
    The user-controlled character.

    Attributes:
        hp: Current hit points (may drop below zero; defeat is handled outside)
        hp_cap: Maximum hit points
        in_combat: Set once the player attacks with something they carry
        equipped_weapon: Name of the readied weapon, if any
        inventory: Carried items keyed by name, in pickup order
    """
    hp: int
    hp_cap: int
    in_combat: bool = False
    equipped_weapon: Optional[str] = None
    inventory: dict[str, Item] = field(default_factory=dict)
    run_log: Optional[RunLog] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.hp > self.hp_cap:
            raise ValueError(f"hp {self.hp} exceeds cap {self.hp_cap}")

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def _record(self, action: str, target: str, changed: bool, text: str = "") -> None:
        log = self.run_log if self.run_log is not None else get_run_log()
        log.log_action(
            actor="player",
            action=action,
            target=target,
            changed=changed,
            result_text=text,
        )

    # -------------------------------------------------------------------------
    # Combat and health
    # -------------------------------------------------------------------------

    def attack(self, weapon: str) -> Optional[int]:
        """
        Pick a carried item to attack with.

        Returns:
            The item's damage (0 for an item that is not a weapon), or None
            if the item is not carried. Only a carried item starts combat.
        """
        item = self.inventory.get(weapon)
        if item is None:
            self._record("attack", weapon, False)
            return None
        self.in_combat = True
        self._record("attack", weapon, True)
        return item.damage or 0

    def equip(self, weapon: str) -> str:
        """Ready a carried weapon."""
        item = self.inventory.get(weapon)
        if item is None:
            text = f'You do not have the "{weapon}".'
        elif not item.is_weapon:
            text = f"The {weapon} is not a weapon."
        else:
            self.equipped_weapon = weapon
            text = f"You ready the {weapon}."
            self._record("equip", weapon, True, text)
            return text
        self._record("equip", weapon, False, text)
        return text

    def rest(self, dice: DiceRoller) -> RestOutcome:
        """
        Rest to regain a random amount of HP, clamped to the cap.

        At full health nothing is drawn and nothing changes.
        """
        if self.hp >= self.hp_cap:
            outcome = RestOutcome(text="You already have full health.")
            self._record("rest", "", False, outcome.text)
            return outcome

        plan = plan_rest(dice)
        before = self.hp
        self.hp = min(self.hp + plan.heal, self.hp_cap)
        healed = self.hp - before
        outcome = RestOutcome(
            text=f"You regained {healed} HP for a total of ({self.hp} / {self.hp_cap}) HP.",
            healed=healed,
            wait_ms=plan.wait_ms,
        )
        logger.debug(f"Rest healed {healed} (rolled {plan.heal}), wait {plan.wait_ms}ms")
        self._record("rest", "", True, outcome.text)
        return outcome

    def take_damage(self, damage: int) -> None:
        """Lose HP. Not clamped at zero."""
        self.hp -= damage
        self._record("take_damage", str(damage), True)

    def status(self) -> str:
        return f"You have ({self.hp} / {self.hp_cap}) HP."

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    def inventory_text(self) -> str:
        """List carried items in pickup order."""
        if not self.inventory:
            return "You are empty-handed."
        lines = ["You are carrying:"]
        for name in self.inventory:
            lines.append(f"  {name}")
        return "\n".join(lines)

    def inspect(self, name: str) -> Optional[str]:
        if name in SELF_NAMES:
            return self.status()
        item = self.inventory.get(name)
        if item is not None:
            return item.inspection
        return None

    def take(self, name: str, item: Optional[Item]) -> str:
        """
        Put an item handed over by the world into the inventory.

        An item whose name is already carried is refused and not stored;
        the caller keeps it and must return it to where it came from.
        """
        if item is None:
            self._record("take", name, False)
            return f'There is no "{name}" here.'
        if item.name in self.inventory:
            text = f'You are already carrying a "{item.name}".'
            self._record("take", name, False, text)
            return text
        self.inventory[item.name] = item
        self._record("take", name, True, "Taken.")
        return "Taken."

    def take_all(self, items: ItemMap) -> str:
        """
        Move every item of a set into the inventory.

        Items taken are popped from `items`; items whose names are already
        carried are refused and left in `items` for the caller to return.
        """
        if not items:
            self._record("take_all", "", False)
            return "There is nothing here to take."
        taken = [name for name in items if name not in self.inventory]
        refused = [name for name in items if name in self.inventory]
        for name in taken:
            self.inventory[name] = items.pop(name)

        lines = ["Taken."] if taken else []
        lines += [f'You are already carrying a "{name}".' for name in refused]
        text = "\n".join(lines)
        self._record("take_all", ", ".join(taken), bool(taken), text)
        return text

    def remove(self, name: str) -> Optional[Item]:
        """Remove and return a carried item, or None."""
        item = self.inventory.pop(name, None)
        if item is not None and self.equipped_weapon == name:
            self.equipped_weapon = None
        self._record("remove", name, item is not None)
        return item

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "hp": self.hp,
            "hp_cap": self.hp_cap,
            "in_combat": self.in_combat,
            "equipped_weapon": self.equipped_weapon,
            "inventory": [i.to_dict() for i in self.inventory.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], run_log: Optional[RunLog] = None) -> "Player":
        return cls(
            hp=data["hp"],
            hp_cap=data["hp_cap"],
            in_combat=data.get("in_combat", False),
            equipped_weapon=data.get("equipped_weapon"),
            inventory=items_from_list(data.get("inventory", [])),
            run_log=run_log,
        )
