"""
World engine for the adventure core.

The World owns the room graph and the pointer to the room the player is
standing in, and it is the only surface through which the graph is mutated.

Command results come in two tiers:
- Soft outcomes ("You cannot go that way.", "There is no ...") are ordinary
  return values. The command was understood, it simply had no effect.
- Structural faults (the current room or a path target is missing from the
  graph) raise WorldError. They mean the loaded world is corrupt and are
  never shown to the player as gameplay text.
"""

from typing import Any, Optional
import logging

from adventure.data_models import CmdResult, Item, ItemMap
from adventure.observability.run_log import RunLog, get_run_log
from adventure.world.room import Room

logger = logging.getLogger(__name__)


CANNOT_GO = "You cannot go that way."
WAY_LOCKED = "The way is locked."
WAY_CLOSED = "The way is closed."


class WorldError(Exception):
    """Raised when the world graph breaks one of its structural invariants."""

    pass


class NoRoomError(WorldError):
    """Raised when a room id does not resolve to a room in the graph."""

    def __init__(self, room_id: str, detail: str = ""):
        self.room_id = room_id
        message = f"No room with id '{room_id}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class World:
    """
    A graph of Rooms plus the player's current location.

    The graph is built once by a loader and is never shrunk; commands only
    mutate rooms in place.
    """

    def __init__(
        self,
        current_room_id: str,
        rooms: dict[str, Room],
        run_log: Optional[RunLog] = None,
    ):
        """
        Initialize the world.

        Args:
            current_room_id: Room the player starts in
            rooms: All rooms keyed by room_id
            run_log: Event log for resolved commands (defaults to the global log)

        Raises:
            NoRoomError: If the start room or any path target is missing
        """
        self.current_room_id = current_room_id
        self.rooms = rooms
        self._run_log = run_log if run_log is not None else get_run_log()
        self.validate()

    def validate(self) -> None:
        """Check that the current room and every path target exist."""
        if self.current_room_id not in self.rooms:
            raise NoRoomError(self.current_room_id, "current room")
        for room in self.rooms.values():
            for direction, path in room.paths.items():
                if path.target not in self.rooms:
                    raise NoRoomError(
                        path.target, f"path '{direction}' from '{room.room_id}'"
                    )

    @property
    def current_room(self) -> Room:
        room = self.rooms.get(self.current_room_id)
        if room is None:
            raise NoRoomError(self.current_room_id, "current room")
        return room

    def _record(self, action: str, target: str, changed: bool, text: str) -> None:
        logger.debug(f"{action}({target!r}) in {self.current_room_id}: changed={changed}")
        self._run_log.log_action(
            actor="world",
            action=action,
            target=target,
            changed=changed,
            result_text=text,
            context={"room_id": self.current_room_id},
        )

    # -------------------------------------------------------------------------
    # Looking and moving
    # -------------------------------------------------------------------------

    def look(self) -> str:
        """Describe the current room."""
        return self.current_room.desc()

    def inspect(self, name: str) -> Optional[str]:
        """Find a room item, path or enemy by name (in that order) and describe it."""
        room = self.current_room
        if name in room.items:
            return room.items[name].inspection
        if name in room.paths:
            return room.paths[name].inspection
        if name in room.enemies:
            return room.enemies[name].inspection
        return None

    def move_room(self, direction: str) -> str:
        """
        Follow the current room's path in a direction.

        A locked path is reported before a closed one. Blocked moves leave
        the world untouched.

        Raises:
            NoRoomError: If the path target is not in the graph
        """
        path = self.current_room.paths.get(direction)
        if path is None:
            text = CANNOT_GO
        elif path.locked:
            text = WAY_LOCKED
        elif path.closed:
            text = WAY_CLOSED
        else:
            if path.target not in self.rooms:
                raise NoRoomError(path.target, f"path '{direction}' from '{self.current_room_id}'")
            self.current_room_id = path.target
            text = self.look()
            self._record("move_room", direction, True, text)
            return text

        self._record("move_room", direction, False, text)
        return text

    def open_path(self, name: str) -> str:
        """Open a closed path. Locks are not affected."""
        path = self.current_room.paths.get(name)
        if path is None:
            text = f'There is no "{name}".'
        elif path.closed:
            path.open()
            self._record("open_path", name, True, "Opened.")
            return "Opened."
        else:
            text = f"The {name} is already opened."
        self._record("open_path", name, False, text)
        return text

    def close_path(self, name: str) -> str:
        """Close an open path."""
        path = self.current_room.paths.get(name)
        if path is None:
            text = f'There is no "{name}".'
        elif path.closed:
            text = f"The {name} is already closed."
        else:
            path.close()
            self._record("close_path", name, True, "Closed.")
            return "Closed."
        self._record("close_path", name, False, text)
        return text

    # -------------------------------------------------------------------------
    # Combat
    # -------------------------------------------------------------------------

    def harm_enemy(self, enemy: str, weapon: str, damage: Optional[int]) -> CmdResult:
        """
        Apply damage from Player.attack() to an enemy in the current room.

        When the enemy's hp drops to zero or below it is removed from the room
        and its loot is moved into the room's items before this returns, so
        a kill (and its loot) is reported exactly once.

        Args:
            enemy: Name of the target enemy
            weapon: Name of the weapon used (for the message)
            damage: Damage from Player.attack(); None if the player lacks the weapon
        """
        room = self.current_room
        target = room.enemies.get(enemy)
        if target is None:
            text = f'There is no "{enemy}" here.'
            self._record("harm_enemy", enemy, False, text)
            return CmdResult(False, text)
        if damage is None:
            text = f'You do not have the "{weapon}".'
            self._record("harm_enemy", enemy, False, text)
            return CmdResult(False, text)

        target.get_hit(damage)
        text = f"You hit the {enemy} with your {weapon} for {damage} damage."
        if not target.is_dead:
            self._record("harm_enemy", enemy, True, text)
            return CmdResult(True, text)

        del room.enemies[enemy]
        loot, target.loot = target.loot, {}
        text += " It is dead."
        if loot:
            text += "\nIt dropped:"
            for item in loot.values():
                if item.name in room.items:
                    item.name = _free_name(item.name, room.items)
                    logger.info(f"Loot from {enemy} renamed to '{item.name}' in {room.room_id}")
                room.items[item.name] = item
                text += f"\n  {item.name}"

        logger.info(f"{enemy} killed in {room.room_id}, {len(loot)} loot item(s) dropped")
        self._record("harm_enemy", enemy, True, text)
        return CmdResult(True, text)

    # -------------------------------------------------------------------------
    # Item transfer
    # -------------------------------------------------------------------------

    def give(self, name: str) -> Optional[Item]:
        """Remove an item from the current room and hand it to the caller."""
        item = self.current_room.items.pop(name, None)
        self._record("give", name, item is not None, "")
        return item

    def give_from(self, item: str, container: str) -> Optional[Item]:
        """Remove an item from a container lying in the current room."""
        cont = self.current_room.items.get(container)
        found = None
        if cont is not None and cont.contents is not None:
            found = cont.contents.pop(item, None)
        self._record("give_from", f"{item} from {container}", found is not None, "")
        return found

    def give_all(self) -> ItemMap:
        """Empty the current room's items and return them all."""
        room = self.current_room
        items, room.items = room.items, {}
        self._record("give_all", "", bool(items), "")
        return items

    def insert(self, cmd: str, name: str, item: Optional[Item]) -> str:
        """
        Put an item the caller was holding into the current room.

        Args:
            cmd: Verb used ("throw" changes the message only)
            name: Name the player asked for
            item: The item, or None if the player did not have it
        """
        room = self.current_room
        if item is None:
            text = f'You do not have the "{name}".'
            self._record("insert", name, False, text)
            return text

        if item.name in room.items:
            text = f'There is already a "{item.name}" here.'
            self._record("insert", name, False, text)
            return text

        room.items[item.name] = item
        if cmd == "throw":
            text = f"You throw the {name} across the room."
        else:
            text = "Dropped."
        self._record("insert", name, True, text)
        return text

    def insert_into(self, name: str, container: str, item: Optional[Item]) -> str:
        """
        Put an item the caller was holding into a container in the current room.

        A refused insert leaves the item with the caller; use
        container_holds() to check whether it landed. A container never
        holds two items of the same name.
        """
        if item is None:
            text = f'You do not have the "{name}".'
            self._record("insert_into", name, False, text)
            return text

        cont = self.current_room.items.get(container)
        if cont is None:
            text = f'There is no "{container}" here.'
        elif not cont.is_container:
            text = "You can not put anything in there."
        elif not cont.can_hold(item):
            text = f"The {name} will not fit in the {container}."
        elif item.name in cont.contents:
            text = f'The {container} already holds a "{item.name}".'
        else:
            cont.contents[item.name] = item
            self._record("insert_into", f"{name} into {container}", True, "Placed.")
            return "Placed."

        self._record("insert_into", f"{name} into {container}", False, text)
        return text

    def container_holds(self, container: str, item: Item) -> bool:
        """Check whether this exact item sits in a container of the current room."""
        cont = self.current_room.items.get(container)
        if cont is None or cont.contents is None:
            return False
        return cont.contents.get(item.name) is item

    def room_holds(self, item: Item) -> bool:
        """Check whether this exact item lies in the current room."""
        return self.current_room.items.get(item.name) is item

    def put_back(self, item: Item, container: str = "") -> None:
        """
        Return an item the caller could not place elsewhere to the slot it
        was just taken from: the room, or a container in the room.
        """
        room = self.current_room
        target = room.items[container].contents if container else room.items
        target[item.name] = item
        logger.debug(f"'{item.name}' returned to {container or room.room_id}")

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the whole graph."""
        return {
            "current_room_id": self.current_room_id,
            "rooms": [room.to_dict() for room in self.rooms.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], run_log: Optional[RunLog] = None) -> "World":
        """
        Rebuild a world from a snapshot.

        Raises:
            NoRoomError: If the snapshot breaks the graph invariants
        """
        rooms = {}
        for entry in data.get("rooms", []):
            room = Room.from_dict(entry)
            rooms[room.room_id] = room
        return cls(current_room_id=data["current_room_id"], rooms=rooms, run_log=run_log)


def _free_name(name: str, taken: ItemMap) -> str:
    """First of "name 2", "name 3", ... not already a key of `taken`."""
    n = 2
    while f"{name} {n}" in taken:
        n += 1
    return f"{name} {n}"
