"""
Pytest fixtures for the adventure core test suite.

Provides a small hand-built world, a player, seeded dice and a clean run
log for every test.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from adventure.data_models import DiceRoller, Enemy, Item, PathState
from adventure.game_state import TimeTracker
from adventure.observability import reset_run_log
from adventure.player import Player
from adventure.world import Room, World


# =============================================================================
# RUN LOG AND DICE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def run_log():
    """Give every test an empty global run log."""
    log = reset_run_log()
    log.resume()
    yield log
    log.reset()


@pytest.fixture
def seeded_dice(run_log):
    """Provide a seeded DiceRoller for reproducible tests."""
    return DiceRoller(seed=42, run_log=run_log)


# =============================================================================
# WORLD FIXTURES
# =============================================================================


def build_cave() -> Room:
    cave = Room(room_id="cave", name="Cave", description="A dark cave.")
    cave.add_item(Item(name="lamp", description="A brass lamp sits here."))
    cave.add_item(Item(
        name="chest",
        description="A chest rests in the corner.",
        inspection="An old oak chest.",
        contents={"coin": Item(name="coin", description="A coin.")},
    ))
    cave.add_path("north", PathState(target="tunnel", locked=True, description="A gate leads north."))
    cave.add_path("west", PathState(target="hall", closed=True, description="A door leads west."))
    cave.add_path("east", PathState(target="hall", description="A passage opens east."))
    return cave


def build_hall() -> Room:
    hall = Room(room_id="hall", name="Hall", description="A long hall.")
    hall.add_path("west", PathState(target="cave"))
    return hall


def build_tunnel() -> Room:
    tunnel = Room(room_id="tunnel", name="Tunnel", description="A narrow tunnel.")
    tunnel.add_enemy(Enemy(
        name="wolf",
        description="A grey wolf.",
        hp=10,
        loot={
            "fang": Item(name="fang", description="A wolf fang."),
            "pelt": Item(name="pelt", description="A wolf pelt."),
        },
    ))
    tunnel.add_enemy(Enemy(name="rat", description="A fat rat.", hp=3))
    tunnel.add_path("south", PathState(target="cave"))
    return tunnel


@pytest.fixture
def world(run_log):
    """Three-room world starting in the cave."""
    rooms = {room.room_id: room for room in (build_cave(), build_hall(), build_tunnel())}
    return World(current_room_id="cave", rooms=rooms, run_log=run_log)


@pytest.fixture
def tunnel_world(world):
    """The same world with the player standing in the tunnel."""
    world.current_room_id = "tunnel"
    return world


# =============================================================================
# PLAYER FIXTURES
# =============================================================================


@pytest.fixture
def player(run_log):
    """A wounded player carrying a sword and a stick."""
    return Player(
        hp=5,
        hp_cap=10,
        inventory={
            "sword": Item(name="sword", description="A sword.", inspection="A fine blade.", damage=12),
            "stick": Item(name="stick", description="A stick."),
        },
        run_log=run_log,
    )


@pytest.fixture
def clock(run_log):
    return TimeTracker(run_log=run_log)


# =============================================================================
# FILESYSTEM FIXTURES
# =============================================================================


@pytest.fixture
def temp_save_dir():
    """Create a temporary directory for saves."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir)
