"""
Obstacle tile effects.
"""

import math
from dataclasses import dataclass, replace

from mathquest.config import SLIP_DISTANCE, TRAP_PENALTY_RATE
from mathquest.items import ItemType, has_item, use_item
from mathquest.player import PlayerState
from mathquest.scoring import apply_score_change
from mathquest.tiles import ObstacleType

SLIP_MESSAGE = "❄️ You hit an ice tile! Slipped back 3 spaces!"
SHIELD_MESSAGE = "🛡️ Your Shield protected you from the {obstacle}!"

_OBSTACLE_NAMES = {
    ObstacleType.SLIP: "ice tile",
    ObstacleType.TRAP: "trap",
}


@dataclass(frozen=True)
class ObstacleOutcome:
    player: PlayerState
    message: str
    shielded: bool = False


def slip_position(position: int) -> int:
    """Position after slipping back. Clamped at START, never wraps."""
    return max(0, position - SLIP_DISTANCE)


def trap_penalty(score: int) -> int:
    return math.floor(score * TRAP_PENALTY_RATE)


def apply_obstacle_effect(
    player: PlayerState, obstacle_type: ObstacleType, board_size: int
) -> ObstacleOutcome:
    """
    Apply a hazard to the player who landed on it.

    A held Shield absorbs the hazard entirely and loses one use. Otherwise a
    slip moves the player back 3 tiles and a trap takes 15% of their score
    (rounded down); both reset the streak.
    """
    if has_item(player, ItemType.SHIELD):
        return ObstacleOutcome(
            player=use_item(player, ItemType.SHIELD),
            message=SHIELD_MESSAGE.format(obstacle=_OBSTACLE_NAMES[obstacle_type]),
            shielded=True,
        )

    if obstacle_type == ObstacleType.SLIP:
        moved = replace(player, position=slip_position(player.position) % board_size, streak=0)
        return ObstacleOutcome(player=moved, message=SLIP_MESSAGE)

    penalty = trap_penalty(player.score)
    trapped = replace(apply_score_change(player, -penalty), streak=0)
    return ObstacleOutcome(
        player=trapped,
        message=f"⚠️ You hit a trap! Lost 15% of your points (-{penalty} points)!",
    )
