"""
Board tile definitions and types.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar


class TileType(Enum):
    """Types of tiles on the board."""

    CORNER = "corner"
    REGULAR = "regular"
    OBSTACLE = "obstacle"
    SHOP = "shop"


class SpecialTilePosition(IntEnum):
    """Corner tile positions on the 40-tile ring."""

    START = 0
    BONUS = 10
    CHALLENGE = 20
    PENALTY = 30


class Difficulty(IntEnum):
    """Problem difficulty tiers. The value feeds the tile point formula."""

    EASY = 1
    MEDIUM = 2
    HARD = 3


class ObstacleType(Enum):
    """Hazard tile kinds."""

    SLIP = "slip"
    TRAP = "trap"


@dataclass(frozen=True)
class CornerScoring:
    """Scoring and text for one corner tile."""

    label: str
    message: str
    points: int = 0
    difficulty: Difficulty = Difficulty.EASY
    message_no_deduct: str = ""


TILE_SCORING = {
    SpecialTilePosition.START: CornerScoring(
        label="START +50pts",
        message="Landed on START! +50 points!",
        points=50,
    ),
    SpecialTilePosition.BONUS: CornerScoring(
        label="BONUS x2pts",
        message="BONUS! Your next correct answer worth double!",
        points=2,
        difficulty=Difficulty.MEDIUM,
    ),
    SpecialTilePosition.CHALLENGE: CornerScoring(
        label="CHALLENGE ±100pts",
        message="CHALLENGE! High risk, high reward!",
        points=100,
        difficulty=Difficulty.HARD,
    ),
    SpecialTilePosition.PENALTY: CornerScoring(
        label="PENALTY -30pts",
        message="PENALTY! -30 points!",
        points=-30,
        message_no_deduct="PENALTY! (No points deducted)",
    ),
}

PASS_START_MESSAGE = "Passed START! +50 points!"


@dataclass(frozen=True)
class Tile:
    """Base class for a board tile."""

    index: int

    tile_type: ClassVar[TileType]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(index={self.index})"


@dataclass(frozen=True, repr=False)
class CornerTile(Tile):
    """One of the four fixed corner tiles."""

    corner: SpecialTilePosition
    label: str

    tile_type: ClassVar[TileType] = TileType.CORNER


@dataclass(frozen=True, repr=False)
class RegularTile(Tile):
    """A math tile carrying the question bound to it at board creation."""

    difficulty: Difficulty
    points: int
    question: str
    answer: float

    tile_type: ClassVar[TileType] = TileType.REGULAR


@dataclass(frozen=True, repr=False)
class ObstacleTile(Tile):
    """A hazard tile. Never triggers a math problem."""

    obstacle_type: ObstacleType

    tile_type: ClassVar[TileType] = TileType.OBSTACLE


@dataclass(frozen=True, repr=False)
class ShopTile(Tile):
    """Landing here opens the item shop."""

    tile_type: ClassVar[TileType] = TileType.SHOP
