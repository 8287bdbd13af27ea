"""
Unit tests for player state.

Tests resting, inventory, inspection and snapshots from
adventure/player/player_state.py.
"""

import pytest

from adventure.data_models import DiceRoller, Item, REST_HEAL_RANGE, REST_WAIT_MS_RANGE
from adventure.player import Player, RestOutcome, plan_rest


class TestPlayerConstruction:
    """Tests for the hp invariant."""

    def test_hp_above_cap_rejected(self):
        with pytest.raises(ValueError):
            Player(hp=11, hp_cap=10)

    def test_defaults(self):
        p = Player(hp=10, hp_cap=10)
        assert p.in_combat is False
        assert p.equipped_weapon is None
        assert p.inventory == {}


class TestRest:
    """Tests for rest() and plan_rest()."""

    def test_rest_when_wounded(self, player, seeded_dice):
        outcome = player.rest(seeded_dice)
        assert 6 <= player.hp <= 10
        assert outcome.healed == player.hp - 5
        assert outcome.text == f"You regained {player.hp - 5} HP for a total of ({player.hp} / 10) HP."

    def test_rest_returns_wait_instead_of_sleeping(self, player, seeded_dice):
        outcome = player.rest(seeded_dice)
        assert REST_WAIT_MS_RANGE[0] <= outcome.wait_ms <= REST_WAIT_MS_RANGE[1]
        assert outcome.rested

    def test_rest_at_full_health(self, seeded_dice):
        p = Player(hp=10, hp_cap=10)
        outcome = p.rest(seeded_dice)
        assert outcome == RestOutcome(text="You already have full health.")
        assert p.hp == 10
        assert not outcome.rested
        assert seeded_dice.get_roll_log() == []

    @pytest.mark.parametrize("seed", range(25))
    def test_rest_bounds(self, seed, run_log):
        dice = DiceRoller(seed=seed, run_log=run_log)
        p = Player(hp=7, hp_cap=10)
        p.rest(dice)
        assert 7 < p.hp <= 10
        assert p.hp - 7 <= REST_HEAL_RANGE[1]

    def test_rest_clamps_to_cap(self, run_log):
        p = Player(hp=9, hp_cap=10)
        outcome = p.rest(DiceRoller(seed=3, run_log=run_log))
        assert p.hp == 10
        assert outcome.healed == 1
        assert outcome.text == "You regained 1 HP for a total of (10 / 10) HP."

    def test_rest_from_negative_hp(self, seeded_dice):
        p = Player(hp=-3, hp_cap=10)
        p.rest(seeded_dice)
        assert -3 < p.hp <= 3

    def test_plan_rest_reproducible(self, run_log):
        a = plan_rest(DiceRoller(seed=9, run_log=run_log))
        b = plan_rest(DiceRoller(seed=9, run_log=run_log))
        assert a == b
        assert REST_HEAL_RANGE[0] <= a.heal <= REST_HEAL_RANGE[1]

    def test_rest_draws_are_logged(self, player, seeded_dice, run_log):
        player.rest(seeded_dice)
        assert [r.reason for r in run_log.get_rolls()] == ["rest duration", "rest heal"]


class TestHealth:
    """Tests for status() and take_damage()."""

    def test_status(self, player):
        assert player.status() == "You have (5 / 10) HP."

    def test_take_damage_unclamped(self, player):
        player.take_damage(8)
        assert player.hp == -3
        assert player.is_defeated
        assert player.status() == "You have (-3 / 10) HP."


class TestInventory:
    """Tests for inventory handling."""

    def test_inventory_text(self, player):
        assert player.inventory_text() == "You are carrying:\n  sword\n  stick"

    def test_empty_handed(self):
        assert Player(hp=1, hp_cap=1).inventory_text() == "You are empty-handed."

    def test_take(self, player):
        assert player.take("rope", Item(name="rope")) == "Taken."
        assert list(player.inventory) == ["sword", "stick", "rope"]

    def test_take_nothing(self, player):
        assert player.take("rope", None) == 'There is no "rope" here.'
        assert "rope" not in player.inventory

    def test_take_all(self, player):
        items = {"a": Item(name="a"), "b": Item(name="b")}
        assert player.take_all(items) == "Taken."
        assert list(player.inventory) == ["sword", "stick", "a", "b"]

    def test_take_all_empty(self, player):
        assert player.take_all({}) == "There is nothing here to take."

    def test_take_refuses_same_name(self, player):
        old_stick = player.inventory["stick"]
        new_stick = Item(name="stick", description="A newer stick.")
        assert player.take("stick", new_stick) == 'You are already carrying a "stick".'
        assert player.inventory["stick"] is old_stick
        assert len(player.inventory) == 2

    def test_take_all_leaves_refused_items(self, player):
        items = {
            "stick": Item(name="stick", description="Another stick."),
            "rope": Item(name="rope", description="A coil of rope."),
        }
        text = player.take_all(items)
        assert text == 'Taken.\nYou are already carrying a "stick".'
        assert "rope" in player.inventory
        assert list(items) == ["stick"]
        assert player.inventory["stick"] is not items["stick"]

    def test_take_all_refuses_everything(self, player):
        items = {"stick": Item(name="stick", description="Another stick.")}
        assert player.take_all(items) == 'You are already carrying a "stick".'
        assert list(items) == ["stick"]

    def test_remove(self, player):
        sword = player.remove("sword")
        assert sword.name == "sword"
        assert "sword" not in player.inventory
        assert player.remove("sword") is None

    def test_remove_clears_equipped(self, player):
        player.equip("sword")
        player.remove("sword")
        assert player.equipped_weapon is None


class TestEquip:
    """Tests for equip()."""

    def test_equip_weapon(self, player):
        assert player.equip("sword") == "You ready the sword."
        assert player.equipped_weapon == "sword"

    def test_equip_non_weapon(self, player):
        assert player.equip("stick") == "The stick is not a weapon."
        assert player.equipped_weapon is None

    def test_equip_missing(self, player):
        assert player.equip("axe") == 'You do not have the "axe".'


class TestInspect:
    """Tests for inspect()."""

    @pytest.mark.parametrize("name", ["me", "self", "myself"])
    def test_self(self, player, name):
        assert player.inspect(name) == "You have (5 / 10) HP."

    def test_item(self, player):
        assert player.inspect("sword") == "A fine blade."

    def test_missing(self, player):
        assert player.inspect("axe") is None


class TestSerialization:
    """Tests for to_dict()/from_dict()."""

    def test_round_trip(self, player):
        player.equip("sword")
        player.in_combat = True
        restored = Player.from_dict(player.to_dict())
        assert restored == player
        assert list(restored.inventory) == ["sword", "stick"]
