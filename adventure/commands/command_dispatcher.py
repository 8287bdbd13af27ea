"""
Command dispatcher.

Turns one line of player text into one World or Player operation and
returns the narrative text. Transfers and attacks are the documented
two-step pairs:
- take:   World.give*/give_all   -> Player.take/take_all
- drop:   Player.remove          -> World.insert/insert_into
- attack: Player.attack          -> World.harm_enemy

A transfer the receiving side refuses hands the item back to where it
came from, so no command loses an item.

Structural world faults are caught here, logged, and reported with
ok=False; they are never dressed up as gameplay text.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional
import logging

from adventure.data_models import DiceRoller, Item
from adventure.game_state.time_tracker import ScheduledWait, TimeTracker
from adventure.player.player_state import SELF_NAMES, Player
from adventure.world.world_engine import World, WorldError

logger = logging.getLogger(__name__)


DIRECTION_ALIASES = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
    "ne": "northeast",
    "nw": "northwest",
    "se": "southeast",
    "sw": "southwest",
}
DIRECTIONS = frozenset(DIRECTION_ALIASES.values())

WORLD_FAULT_TEXT = "Something is wrong with the world. The command was not completed."

# Verbs that take no game time and never touch the world
TIMELESS_VERBS = frozenset({"help", "quit", "exit"})

HELP_TEXT = """Commands:
  look                      describe the room
  go <direction>, n/s/e/w   move
  open <path>, close <path>
  take <item> [from <container>], take all
  drop <item>, throw <item>
  put <item> in <container>
  inventory (i), status
  inspect <thing> (x)
  equip <weapon>
  attack <enemy> [with <weapon>]
  rest
  quit"""


@dataclass
class CommandOutcome:
    """Result of one dispatched command."""
    ok: bool
    text: str
    verb: str = ""
    quit: bool = False
    wait: Optional[ScheduledWait] = None  # Set when the command scheduled a timed effect


class CommandDispatcher:
    """
    Parses player text and routes it to the world and the player.

    Every recognised command counts as one turn on the TimeTracker, whether
    or not it changed anything.
    """

    def __init__(
        self,
        world: World,
        player: Player,
        dice: DiceRoller,
        clock: Optional[TimeTracker] = None,
    ):
        self.world = world
        self.player = player
        self.dice = dice
        self.clock = clock or TimeTracker()

        self._handlers: dict[str, Callable[[str, list[str]], CommandOutcome]] = {
            "look": self._handle_look,
            "l": self._handle_look,
            "go": self._handle_go,
            "move": self._handle_go,
            "open": self._handle_open,
            "close": self._handle_close,
            "take": self._handle_take,
            "get": self._handle_take,
            "drop": self._handle_drop,
            "throw": self._handle_drop,
            "put": self._handle_put,
            "inventory": self._handle_inventory,
            "i": self._handle_inventory,
            "status": self._handle_status,
            "inspect": self._handle_inspect,
            "examine": self._handle_inspect,
            "x": self._handle_inspect,
            "equip": self._handle_equip,
            "attack": self._handle_attack,
            "rest": self._handle_rest,
            "help": self._handle_help,
            "quit": self._handle_quit,
            "exit": self._handle_quit,
        }

    def execute(self, text: str) -> CommandOutcome:
        """
        Resolve one line of player input.

        The verb and the keywords (all, from, in, with) are case-insensitive.
        Names are matched against what is in reach ignoring case, so a world
        may name things "Rusty Key" and the player may type "rusty key".
        """
        words = text.strip().split()
        if not words:
            return CommandOutcome(False, "I beg your pardon?")

        verb, args = words[0].lower(), words[1:]
        if verb in DIRECTION_ALIASES or verb in DIRECTIONS:
            verb, args = "go", [verb]

        handler = self._handlers.get(verb)
        if handler is None:
            return CommandOutcome(False, f'I don\'t understand "{text.strip()}".', verb)

        try:
            if verb not in TIMELESS_VERBS:
                # A corrupt position pointer must abort before anything moves
                self.world.current_room
            outcome = handler(verb, args)
        except WorldError as e:
            logger.error(f"World fault while resolving {text.strip()!r}: {e}")
            return CommandOutcome(False, WORLD_FAULT_TEXT, verb)

        outcome.verb = verb
        if verb not in TIMELESS_VERBS:
            self.clock.advance_turn()
        return outcome

    def _return_to_player(self, item: Item, was_equipped: bool) -> None:
        """Give back an item the world refused to take."""
        self.player.inventory[item.name] = item
        if was_equipped:
            self.player.equipped_weapon = item.name

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _handle_look(self, verb: str, args: list[str]) -> CommandOutcome:
        return CommandOutcome(True, self.world.look())

    def _handle_go(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Go where?")
        direction = " ".join(args)
        direction = DIRECTION_ALIASES.get(direction.lower(), direction)
        direction = _match(direction, self.world.current_room.paths)
        return CommandOutcome(True, self.world.move_room(direction))

    def _handle_open(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Open what?")
        name = _match(" ".join(args), self.world.current_room.paths)
        return CommandOutcome(True, self.world.open_path(name))

    def _handle_close(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Close what?")
        name = _match(" ".join(args), self.world.current_room.paths)
        return CommandOutcome(True, self.world.close_path(name))

    def _handle_take(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Take what?")
        room = self.world.current_room
        if [a.lower() for a in args] == ["all"]:
            items = self.world.give_all()
            text = self.player.take_all(items)
            for item in items.values():
                self.world.put_back(item)
            return CommandOutcome(True, text)

        name, container = _split_on(args, "from")
        if container:
            container = _match(container, room.items)
            cont = room.items.get(container)
            name = _match(name, cont.contents if cont and cont.contents else {})
            item = self.world.give_from(name, container)
        else:
            name = _match(name, room.items)
            item = self.world.give(name)

        text = self.player.take(name, item)
        if item is not None and self.player.inventory.get(item.name) is not item:
            self.world.put_back(item, container)
        return CommandOutcome(True, text)

    def _handle_drop(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, f"{verb.capitalize()} what?")
        name = _match(" ".join(args), self.player.inventory)

        was_equipped = self.player.equipped_weapon == name
        item = self.player.remove(name)
        text = self.world.insert(verb, name, item)
        if item is not None and not self.world.room_holds(item):
            self._return_to_player(item, was_equipped)
        return CommandOutcome(True, text)

    def _handle_put(self, verb: str, args: list[str]) -> CommandOutcome:
        name, container = _split_on(args, "in")
        if not name or not container:
            return CommandOutcome(False, "Put what in what?")
        name = _match(name, self.player.inventory)
        container = _match(container, self.world.current_room.items)

        was_equipped = self.player.equipped_weapon == name
        item = self.player.remove(name)
        text = self.world.insert_into(name, container, item)
        if item is not None and not self.world.container_holds(container, item):
            self._return_to_player(item, was_equipped)
        return CommandOutcome(True, text)

    def _handle_inventory(self, verb: str, args: list[str]) -> CommandOutcome:
        return CommandOutcome(True, self.player.inventory_text())

    def _handle_status(self, verb: str, args: list[str]) -> CommandOutcome:
        return CommandOutcome(True, self.player.status())

    def _handle_inspect(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Inspect what?")
        name = " ".join(args)
        if name.lower() in SELF_NAMES:
            return CommandOutcome(True, self.player.inspect(name.lower()))

        room = self.world.current_room
        name = _match(name, self.player.inventory, room.items, room.paths, room.enemies)
        text = self.player.inspect(name)
        if text is None:
            text = self.world.inspect(name)
        if text is None:
            return CommandOutcome(True, f'There is no "{name}" here.')
        return CommandOutcome(True, text)

    def _handle_equip(self, verb: str, args: list[str]) -> CommandOutcome:
        if not args:
            return CommandOutcome(False, "Equip what?")
        name = _match(" ".join(args), self.player.inventory)
        return CommandOutcome(True, self.player.equip(name))

    def _handle_attack(self, verb: str, args: list[str]) -> CommandOutcome:
        enemy, weapon = _split_on(args, "with")
        if not enemy:
            return CommandOutcome(False, "Attack what?")
        enemy = _match(enemy, self.world.current_room.enemies)
        weapon = _match(weapon, self.player.inventory) if weapon else self.player.equipped_weapon
        if not weapon:
            return CommandOutcome(False, "Attack with what?")

        damage = self.player.attack(weapon)
        result = self.world.harm_enemy(enemy, weapon, damage)
        return CommandOutcome(result.ok, result.text)

    def _handle_rest(self, verb: str, args: list[str]) -> CommandOutcome:
        outcome = self.player.rest(self.dice)
        wait = None
        if outcome.rested:
            wait = self.clock.schedule(outcome.wait_ms, reason="rest")
        return CommandOutcome(True, outcome.text, wait=wait)

    def _handle_help(self, verb: str, args: list[str]) -> CommandOutcome:
        return CommandOutcome(True, HELP_TEXT)

    def _handle_quit(self, verb: str, args: list[str]) -> CommandOutcome:
        return CommandOutcome(True, "Goodbye.", quit=True)


def _split_on(args: list[str], keyword: str) -> tuple[str, str]:
    """Split 'a b KEYWORD c d' into ('a b', 'c d'); the second part may be empty."""
    lowered = [a.lower() for a in args]
    if keyword in lowered:
        index = lowered.index(keyword)
        return " ".join(args[:index]), " ".join(args[index + 1:])
    return " ".join(args), ""


def _match(name: str, *collections: Mapping[str, Any]) -> str:
    """
    Resolve a typed name to a key of the first collection that has it.

    An exact key wins; otherwise the first key equal ignoring case. A name
    nothing matches is returned as typed.
    """
    for keys in collections:
        if name in keys:
            return name
    lowered = name.lower()
    for keys in collections:
        for key in keys:
            if key.lower() == lowered:
                return key
    return name
