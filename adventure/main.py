"""
Adventure - Main Entry Point

A small turn-based text adventure built on the adventure core. This module
wires the core to a terminal: it builds (or loads) a world, reads commands,
prints the narrative the core returns, and handles save/load.
"""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from adventure.commands import CommandDispatcher
from adventure.data_models import DiceRoller, Enemy, Item, PathState
from adventure.game_state import GameSession, SessionManager, SnapshotError, TimeTracker
from adventure.observability import get_run_log
from adventure.player import Player
from adventure.world import Room, World


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class GameConfig:
    """Configuration for a play session."""

    save_dir: Path = field(default_factory=lambda: Path("saves"))
    session_name: str = "New Adventure"
    load_path: Optional[Path] = None
    seed: Optional[int] = None
    starting_hp: int = 10
    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.save_dir, str):
            self.save_dir = Path(self.save_dir)
        if isinstance(self.load_path, str):
            self.load_path = Path(self.load_path)


# =============================================================================
# DEMO WORLD
# =============================================================================

def create_demo_world() -> World:
    """Build the bundled three-room cave."""
    cave = Room(
        room_id="cave",
        name="Damp Cave",
        description="Water drips from the ceiling of a low cave.",
    )
    cave.add_item(Item(
        name="sword",
        description="A rusty sword leans against the wall.",
        inspection="The blade is pitted but still sharp enough.",
        damage=6,
    ))
    cave.add_item(Item(
        name="chest",
        description="A battered wooden chest sits in the corner.",
        inspection="The lid is loose. Something rattles inside.",
        contents={"coin": Item(name="coin", description="A tarnished coin.")},
    ))
    cave.add_item(Item(name="torch", description="A spent torch lies on the floor."))
    cave.add_path("north", PathState(
        target="tunnel",
        closed=True,
        description="A wooden door is set into the north wall.",
        inspection="The door is swollen with damp but has no lock.",
    ))
    cave.add_path("east", PathState(
        target="vault",
        locked=True,
        closed=True,
        description="An iron gate bars a passage to the east.",
        inspection="The gate is chained shut.",
    ))

    tunnel = Room(
        room_id="tunnel",
        name="Narrow Tunnel",
        description="The tunnel smells of wet fur.",
    )
    tunnel.add_enemy(Enemy(
        name="wolf",
        description="A gaunt wolf.",
        inspection="The wolf bares its teeth at you.",
        hp=10,
        loot={"pelt": Item(name="pelt", description="A wolf pelt lies on the ground.")},
    ))
    tunnel.add_path("south", PathState(target="cave", description="The cave lies back to the south."))

    vault = Room(
        room_id="vault",
        name="Vault",
        description="A cramped vault cut from bare rock.",
    )
    vault.add_item(Item(name="gem", description="A red gem glitters on a ledge."))
    vault.add_path("west", PathState(target="cave", description="The gate leads west."))

    return World(
        current_room_id="cave",
        rooms={room.room_id: room for room in (cave, tunnel, vault)},
    )


# =============================================================================
# CLI
# =============================================================================

class AdventureCLI:
    """
    Read-eval-print loop around a CommandDispatcher.

    Handles the meta commands (save, load) itself; everything else is sent
    to the dispatcher. Timed effects are completed after each command.
    """

    def __init__(
        self,
        config: GameConfig,
        world: World,
        player: Player,
        dice: DiceRoller,
        clock: Optional[TimeTracker] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.config = config
        self.dice = dice
        self.sessions = SessionManager(config.save_dir)
        self.dispatcher = CommandDispatcher(world, player, dice, clock)
        self._input = input_fn
        self._output = output_fn

    def handle(self, line: str) -> bool:
        """
        Process one line of input.

        Returns:
            False when the session should end
        """
        words = line.strip().split()
        if words and words[0].lower() == "save":
            self._save()
            return True
        if words and words[0].lower() == "load":
            self._load(words[1] if len(words) > 1 else None)
            return True

        outcome = self.dispatcher.execute(line)
        self._output(outcome.text)
        self.dispatcher.clock.complete_pending()

        if self.dispatcher.player.is_defeated:
            self._output("You have been defeated.")
            return False
        return not outcome.quit

    def run(self) -> None:
        """Run until the player quits or input ends."""
        self._output(self.dispatcher.world.look())
        while True:
            try:
                line = self._input("> ")
            except (EOFError, KeyboardInterrupt):
                self._output("")
                break
            if not self.handle(line):
                break

    def _save(self) -> None:
        d = self.dispatcher
        session = self.sessions.capture(
            d.world, d.player, d.clock,
            seed=self.dice.seed,
            session_name=self.config.session_name,
        )
        path = self.sessions.save_session(session)
        self._output(f"Saved to {path}.")

    def _load(self, filename: Optional[str]) -> None:
        if filename is None:
            available = self.sessions.list_sessions()
            if not available:
                self._output("There are no saved games.")
                return
            filename = available[0]["filepath"]
        try:
            session = self.sessions.load_session(filename)
            world, player, clock = self.sessions.restore(session)
        except (FileNotFoundError, SnapshotError) as e:
            logger.error(f"Could not load {filename}: {e}")
            self._output("That saved game could not be loaded.")
            return
        apply_saved_seed(self.dice, self.config, session)
        self.dispatcher = CommandDispatcher(world, player, self.dice, clock)
        self._output(world.look())


def apply_saved_seed(dice: DiceRoller, config: GameConfig, session: GameSession) -> None:
    """Continue a saved game on its own seed unless --seed was given."""
    if config.seed is None and session.seed is not None:
        dice.set_seed(session.seed)
        get_run_log().set_seed(session.seed)


def create_game(config: GameConfig) -> AdventureCLI:
    """Build a CLI session from config, loading a save when one is given."""
    dice = DiceRoller(seed=config.seed)
    get_run_log().set_seed(config.seed)

    if config.load_path:
        sessions = SessionManager(config.save_dir)
        world, player, clock = sessions.restore(sessions.load_session(config.load_path))
        apply_saved_seed(dice, config, sessions.current_session)
    else:
        world = create_demo_world()
        player = Player(hp=config.starting_hp, hp_cap=config.starting_hp)
        clock = TimeTracker()

    return AdventureCLI(config, world, player, dice, clock)


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Adventure - a turn-based text adventure",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m adventure.main                       # Play the demo cave
  python -m adventure.main --seed 42             # Reproducible rests
  python -m adventure.main --load saves/x.json   # Resume a saved game
        """
    )

    parser.add_argument(
        "--save-dir",
        type=Path,
        default=Path("saves"),
        help="Directory for save files (default: saves)",
    )
    parser.add_argument(
        "--session-name",
        type=str,
        default="New Adventure",
        help="Name recorded in save files (default: New Adventure)",
    )
    parser.add_argument(
        "--load",
        type=Path,
        help="Save file to resume",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible play",
    )
    parser.add_argument(
        "--hp",
        type=int,
        default=10,
        help="Starting and maximum HP for a new game (default: 10)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def create_config_from_args(args: argparse.Namespace) -> GameConfig:
    """Create GameConfig from parsed arguments."""
    return GameConfig(
        save_dir=args.save_dir,
        session_name=args.session_name,
        load_path=args.load,
        seed=args.seed,
        starting_hp=args.hp,
        verbose=args.verbose,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    config = create_config_from_args(args)
    cli = create_game(config)
    cli.run()


if __name__ == "__main__":
    main()
