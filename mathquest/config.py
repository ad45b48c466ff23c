"""
Game configuration settings and rule constants.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Mapping, Optional

from mathquest.exceptions import ConfigError

if TYPE_CHECKING:
    from mathquest.settings import GameSettings


BOARD_SIZE = 40
MAX_ROUNDS = 10
DICE_SIDES = 6

# Fixed tile layout for the 40-tile ring
SLIP_POSITIONS = (7, 28)
TRAP_POSITIONS = (18, 38)
SHOP_POSITIONS = (5, 25)

CORRECT_ANSWER_COINS = 15
PASS_START_POINTS = 50
PASS_START_COINS = 30

SLIP_DISTANCE = 3
TRAP_PENALTY_RATE = 0.15
POINT_BOOSTER_RATE = 1.5
CELEBRATION_STREAK = 3

# UI option names accepted alongside the attribute names
_CONFIG_ALIASES = {
    "negativePointsEnabled": "negative_points_enabled",
    "timerEnabled": "timer_enabled",
    "timerDuration": "timer_duration",
    "autoCloseModal": "auto_close_modal",
    "displayProblemsInTiles": "display_problems_in_tiles",
    "maxRounds": "max_rounds",
    "boardSize": "board_size",
}


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a Math Quest game. Read-only once the game starts."""

    negative_points_enabled: bool = True
    timer_enabled: bool = False
    timer_duration: int = 30
    auto_close_modal: bool = True
    display_problems_in_tiles: bool = True

    max_rounds: int = MAX_ROUNDS
    board_size: int = BOARD_SIZE

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.board_size != BOARD_SIZE:
            raise ConfigError(
                f"Only {BOARD_SIZE}-tile boards are supported, got {self.board_size}"
            )
        if self.max_rounds < 1:
            raise ConfigError(f"max_rounds must be at least 1, got {self.max_rounds}")
        if self.timer_duration < 1:
            raise ConfigError(f"timer_duration must be at least 1, got {self.timer_duration}")

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "GameConfig":
        """
        Return a copy with a partial set of options replaced.

        Keys may be attribute names or the camel-case names used by the UI.
        """
        if not overrides:
            return self

        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            name = _CONFIG_ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown config option: {key}")
            changes[name] = value
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: "GameSettings") -> "GameConfig":
        """Build a config from environment-driven defaults."""
        return cls(
            negative_points_enabled=settings.negative_points_enabled,
            timer_enabled=settings.timer_enabled,
            timer_duration=settings.timer_duration,
            auto_close_modal=settings.auto_close_modal,
            display_problems_in_tiles=settings.display_problems_in_tiles,
            max_rounds=settings.max_rounds,
            seed=settings.seed,
        )
