"""
Room: a node of the world graph.

A room holds its paths to other rooms, the items lying in it and the
enemies standing in it. Adding a path also appends the path's flavor text
to the room description, permanently.
"""

from dataclasses import dataclass, field
from typing import Any

from adventure.data_models import Enemy, Item, PathState, items_from_list


@dataclass
class Room:
    """A location the player can stand in."""

    room_id: str
    name: str = ""
    description: str = ""
    paths: dict[str, PathState] = field(default_factory=dict)  # direction -> path
    items: dict[str, Item] = field(default_factory=dict)
    enemies: dict[str, Enemy] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            self.name = self.room_id

    def desc(self) -> str:
        """Compile the room header, description and item lines for printing."""
        desc = f"{self.name}\n{self.description}\n"
        for item in self.items.values():
            if item.description:
                desc += f"{item.description}\n"
        return desc

    def add_path(self, direction: str, path: PathState) -> None:
        """Add a path to another room and append its flavor text."""
        self.paths[direction] = path
        if path.description:
            self.description += f"\n{path.description}"

    def add_item(self, item: Item) -> None:
        self.items[item.name] = item

    def add_enemy(self, enemy: Enemy) -> None:
        self.enemies[enemy.name] = enemy

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "room_id": self.room_id,
            "name": self.name,
            "description": self.description,
            "paths": {d: p.to_dict() for d, p in self.paths.items()},
            "items": [i.to_dict() for i in self.items.values()],
            "enemies": [e.to_dict() for e in self.enemies.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        """
        Deserialize from dictionary.

        The stored description already carries the text of every added path,
        so paths are restored directly rather than through add_path().
        """
        enemies = {}
        for entry in data.get("enemies", []):
            enemy = Enemy.from_dict(entry)
            enemies[enemy.name] = enemy
        return cls(
            room_id=data["room_id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            paths={d: PathState.from_dict(p) for d, p in data.get("paths", {}).items()},
            items=items_from_list(data.get("items", [])),
            enemies=enemies,
        )
