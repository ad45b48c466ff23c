"""
The game state snapshot.

A GameState is never modified in place: the engine builds a new snapshot
with dataclasses.replace for every change and hands it to subscribers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from mathquest.config import GameConfig
from mathquest.importer import ImportedProblemsData
from mathquest.items import ItemType
from mathquest.player import PlayerState
from mathquest.problems import ProblemPoolState
from mathquest.tiles import Tile

# Returned by roll_dice when the roll is rejected
NO_ROLL = 0


class GameScreen(Enum):
    SETUP = "setup"
    AVATAR_SELECTION = "avatarSelection"
    PLAYING = "playing"
    GAME_OVER = "gameOver"


class MessageType(Enum):
    SUCCESS = "success"
    ERROR = "error"


class TileLandingResult(Enum):
    """What the caller should do after a landing is resolved."""

    MATH = "math"
    SPECIAL = "special"
    NEXT = "next"


class ItemContext(Enum):
    """Situation in which a player is asked whether to use an item."""

    DICE = "dice"
    MATH = "math"
    OBSTACLE = "obstacle"
    TELEPORT = "teleport"


@dataclass(frozen=True)
class GameMessage:
    """Result message shown in the modal after an answer or a hazard."""

    text: str
    type: MessageType
    streak: Optional[int] = None
    celebrate: bool = False


@dataclass(frozen=True)
class BannerMessage:
    text: str
    type: MessageType


@dataclass(frozen=True)
class MathProblem:
    """The problem currently presented to the current player."""

    question: str
    answer: float
    points: int


@dataclass(frozen=True)
class PendingItemUse:
    item_type: ItemType
    context: ItemContext
    player_id: int


@dataclass(frozen=True)
class TeleporterState:
    active: bool = False
    selected_tile: Optional[int] = None


@dataclass(frozen=True)
class GameState:
    """Complete state of a Math Quest game."""

    screen: GameScreen = GameScreen.SETUP
    current_player: int = 0
    round: int = 1
    moves_in_round: int = 0

    players: Tuple[PlayerState, ...] = ()
    tiles: Tuple[Tile, ...] = ()

    # Dice and movement
    dice_value: int = 0
    is_rolling: bool = False
    moving_player: Optional[int] = None
    dice_choices: Tuple[int, ...] = ()

    # Math problem and timer
    math_problem: Optional[MathProblem] = None
    time_left: int = 0
    is_paused: bool = False

    imported_problems: Optional[ImportedProblemsData] = None
    problem_pool: ProblemPoolState = field(default_factory=ProblemPoolState)

    config: GameConfig = field(default_factory=GameConfig)

    message: Optional[GameMessage] = None
    banner_message: Optional[BannerMessage] = None

    # Shop and items
    shop_open: bool = False
    pending_item_use: Optional[PendingItemUse] = None
    teleporter: TeleporterState = field(default_factory=TeleporterState)
    declined_items: FrozenSet[ItemType] = frozenset()

    # Avatar selection
    avatar_selection_player_count: int = 0
    avatar_selection_current_player: int = 0
    selected_avatars: Tuple[int, ...] = ()
    selected_colors: Tuple[str, ...] = ()

    @property
    def used_problem_ids(self) -> FrozenSet[int]:
        return self.problem_pool.used_ids

    def get_current_player(self) -> Optional[PlayerState]:
        if 0 <= self.current_player < len(self.players):
            return self.players[self.current_player]
        return None


def create_initial_state(config: Optional[GameConfig] = None) -> GameState:
    """A fresh Setup-screen snapshot."""
    return GameState(config=config or GameConfig())
