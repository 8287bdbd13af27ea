"""Player state: health, combat flag and inventory."""

from adventure.player.player_state import (
    Player,
    RestOutcome,
    RestPlan,
    plan_rest,
)

__all__ = [
    "Player",
    "RestOutcome",
    "RestPlan",
    "plan_rest",
]
