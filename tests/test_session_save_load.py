"""
Snapshot validation tests for save/load functionality.

Tests that world, player and clock survive a save/load cycle:
- Current room and path flags
- Room items, container contents and enemies
- Player HP, inventory, equipped weapon and combat flag
- Pending timed effects
"""

import json

import pytest

from adventure.game_state import GameSession, SessionManager, SnapshotError


@pytest.fixture
def manager(temp_save_dir):
    return SessionManager(temp_save_dir)


@pytest.fixture
def played_state(world, player, clock):
    """A world and player after a few turns of play."""
    world.open_path("west")
    world.move_room("west")
    world.move_room("west")
    player.take("lamp", world.give("lamp"))
    player.equip("sword")
    player.attack("sword")
    clock.advance_turn(6)
    clock.schedule(2500, "rest")
    return world, player, clock


class TestCaptureRestore:
    """Tests for capture()/restore() without touching disk."""

    def test_round_trip(self, manager, played_state):
        world, player, clock = played_state
        session = manager.capture(world, player, clock, seed=7)
        w2, p2, c2 = manager.restore(session)

        assert w2.current_room_id == world.current_room_id
        assert w2.rooms == world.rooms
        assert w2.look() == world.look()
        assert p2 == player
        assert c2.turns == 6
        assert [w.wait_ms for w in c2.pending] == [2500]

    def test_recapture_keeps_session_id(self, manager, played_state):
        world, player, clock = played_state
        first = manager.capture(world, player, clock)
        second = manager.capture(world, player, clock)
        assert first.session_id == second.session_id

    def test_restore_without_session(self, manager):
        with pytest.raises(ValueError):
            manager.restore()

    def test_restore_corrupt_world(self, manager, played_state):
        world, player, clock = played_state
        session = manager.capture(world, player, clock)
        session.world["current_room_id"] = "void"
        with pytest.raises(SnapshotError):
            manager.restore(session)

    def test_restore_player_over_cap(self, manager, played_state):
        world, player, clock = played_state
        session = manager.capture(world, player, clock)
        session.player["hp"] = 99
        with pytest.raises(SnapshotError):
            manager.restore(session)


class TestSaveLoad:
    """Tests for JSON files on disk."""

    def test_save_and_load(self, manager, played_state, temp_save_dir):
        world, player, clock = played_state
        session = manager.capture(world, player, clock, seed=7, session_name="Cave Run")
        path = manager.save_session(session)
        assert path.parent == temp_save_dir
        assert path.name.startswith("Cave Run_")

        fresh = SessionManager(temp_save_dir)
        loaded = fresh.load_session(path)
        assert loaded.seed == 7
        assert loaded.last_saved_at is not None
        w2, p2, _ = fresh.restore(loaded)
        assert w2.rooms == world.rooms
        assert p2.inventory == player.inventory

    def test_load_relative_to_save_dir(self, manager, played_state):
        world, player, clock = played_state
        manager.capture(world, player, clock)
        path = manager.save_session(filename="slot1.json")
        assert manager.load_session("slot1.json").session_id == manager.current_session.session_id
        assert path.exists()

    def test_load_missing_file(self, manager):
        with pytest.raises(FileNotFoundError):
            manager.load_session("nope.json")

    def test_load_invalid_json(self, manager, temp_save_dir):
        (temp_save_dir / "bad.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError):
            manager.load_session("bad.json")

    def test_load_missing_sections(self, manager, temp_save_dir):
        (temp_save_dir / "empty.json").write_text(json.dumps({"session_name": "x"}), encoding="utf-8")
        with pytest.raises(SnapshotError):
            manager.load_session("empty.json")

    def test_save_without_session(self, manager):
        with pytest.raises(ValueError):
            manager.save_session()

    def test_list_and_delete(self, manager, played_state, temp_save_dir):
        world, player, clock = played_state
        manager.capture(world, player, clock, session_name="One")
        path = manager.save_session()
        (temp_save_dir / "junk.json").write_text("???", encoding="utf-8")

        listed = manager.list_sessions()
        assert [s["session_name"] for s in listed] == ["One"]

        assert manager.delete_session(path) is True
        assert manager.delete_session(path) is False
        assert manager.list_sessions() == []


class TestGameSession:
    """Tests for GameSession serialization."""

    def test_from_dict_requires_world_and_player(self):
        with pytest.raises(SnapshotError):
            GameSession.from_dict({"world": {"rooms": []}})

    def test_round_trip(self):
        session = GameSession(
            session_name="x",
            world={"current_room_id": "a", "rooms": []},
            player={"hp": 1, "hp_cap": 1},
        )
        assert GameSession.from_dict(session.to_dict()) == session
