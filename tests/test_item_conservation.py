"""
Item conservation across the room, the inventory and a container.

Every transfer moves an item; none copies or loses one.
"""

import pytest

from adventure.commands import CommandDispatcher
from adventure.data_models import DiceRoller, Item


def locations(world, player):
    """Map every item id to the places it is found."""
    seen: dict[int, list[str]] = {}
    for name, item in world.current_room.items.items():
        seen.setdefault(id(item), []).append(f"room:{name}")
        for inner in (item.contents or {}).values():
            seen.setdefault(id(inner), []).append(f"{name}:{inner.name}")
    for name, item in player.inventory.items():
        seen.setdefault(id(item), []).append(f"inventory:{name}")
        for inner in (item.contents or {}).values():
            seen.setdefault(id(inner), []).append(f"inventory/{name}:{inner.name}")
    return seen


SEQUENCES = [
    ["take lamp", "put lamp in chest", "take lamp from chest", "drop lamp"],
    ["take coin from chest", "take all", "drop coin", "put coin in chest", "drop chest"],
    ["take sword", "put sword in chest", "take all", "throw chest", "take coin from chest"],
    ["put stick in lamp", "put stick in barrel", "put ghost in chest", "take ghost", "drop ghost"],
    ["take chest", "put stick in chest", "drop chest", "put chest in chest", "take all", "drop stick"],
]


class TestConservation:
    """Tests that transfers neither duplicate nor lose items."""

    @pytest.mark.parametrize("commands", SEQUENCES)
    def test_sequence_conserves_items(self, world, player, run_log, commands):
        dispatcher = CommandDispatcher(world, player, DiceRoller(seed=1, run_log=run_log))
        start = locations(world, player)

        for command in commands:
            dispatcher.execute(command)
            now = locations(world, player)
            assert len(now) == len(start), command
            assert all(len(places) == 1 for places in now.values()), (command, now)
            assert set(now) == set(start), command

    def test_take_all_then_drop_back(self, world, player):
        before = dict(world.current_room.items)
        player.take_all(world.give_all())
        assert world.current_room.items == {}
        for name in list(before):
            world.insert("drop", name, player.remove(name))
        assert world.current_room.items == before


def every_item(world, player):
    """Ids of every item anywhere: all rooms, their containers and the inventory."""
    places = [room.items for room in world.rooms.values()] + [player.inventory]
    found = []
    for items in places:
        for item in items.values():
            found.append(id(item))
            found.extend(id(inner) for inner in (item.contents or {}).values())
    return found


COLLISION_SEQUENCES = [
    ["take lamp", "go east", "take lamp"],
    ["take lamp", "go east", "take all", "drop lamp", "go west", "take coin from chest"],
    ["take lamp", "e", "take coin", "w", "take coin from chest", "take all", "put coin in chest"],
    ["e", "take lamp", "w", "drop lamp", "put lamp in chest", "take all"],
]


class TestSameNameCollisions:
    """Tests that two items sharing a name in different rooms both survive."""

    @pytest.fixture
    def crowded_world(self, world):
        hall = world.rooms["hall"]
        hall.add_item(Item(name="lamp", description="A tin lamp hangs here."))
        hall.add_item(Item(name="coin", description="A silver coin."))
        return world

    @pytest.mark.parametrize("commands", COLLISION_SEQUENCES)
    def test_sequence_conserves_items(self, crowded_world, player, run_log, commands):
        dispatcher = CommandDispatcher(crowded_world, player, DiceRoller(seed=1, run_log=run_log))
        start = every_item(crowded_world, player)

        for command in commands:
            dispatcher.execute(command)
            now = every_item(crowded_world, player)
            assert len(now) == len(set(now)), command
            assert sorted(now) == sorted(start), command

    def test_second_lamp_stays_in_hall(self, crowded_world, player, run_log):
        dispatcher = CommandDispatcher(crowded_world, player, DiceRoller(seed=1, run_log=run_log))
        dispatcher.execute("take lamp")
        dispatcher.execute("go east")
        outcome = dispatcher.execute("take lamp")

        assert outcome.text == 'You are already carrying a "lamp".'
        assert player.inventory["lamp"].description == "A brass lamp sits here."
        assert crowded_world.current_room.items["lamp"].description == "A tin lamp hangs here."

    def test_loot_collision_keeps_both(self, tunnel_world, player, run_log):
        tunnel_world.current_room.add_item(Item(name="fang", description="An old fang."))
        dispatcher = CommandDispatcher(tunnel_world, player, DiceRoller(seed=1, run_log=run_log))
        start = len(every_item(tunnel_world, player)) + 2

        dispatcher.execute("attack wolf with sword")
        assert len(every_item(tunnel_world, player)) == start
        dispatcher.execute("take all")
        assert {"fang", "fang 2", "pelt"} <= set(player.inventory)
