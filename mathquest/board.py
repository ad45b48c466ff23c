"""
The Math Quest board: a fixed ring of 40 tiles.
"""

import random
from typing import List, Optional, Sequence

from mathquest.config import BOARD_SIZE, SHOP_POSITIONS, SLIP_POSITIONS, TRAP_POSITIONS
from mathquest.exceptions import ConfigError
from mathquest.importer import ImportedProblemsData
from mathquest.problems import get_next_problem, initialize_problem_pool
from mathquest.tiles import (
    TILE_SCORING,
    CornerTile,
    Difficulty,
    ObstacleTile,
    ObstacleType,
    RegularTile,
    ShopTile,
    SpecialTilePosition,
    Tile,
    TileType,
)

_CORNER_POSITIONS = frozenset(p.value for p in SpecialTilePosition)


def create_board(
    board_size: int = BOARD_SIZE,
    problems: Optional[ImportedProblemsData] = None,
    rng: Optional[random.Random] = None,
) -> List[Tile]:
    """
    Lay out the tile ring.

    Corners, obstacles and shops sit at fixed positions. Every other tile is
    a regular math tile with a random difficulty, a point value of
    difficulty * 10 + [0, 20), and a question bound to it now: drawn from
    the imported problems without replacement when given, generated
    otherwise.

    Args:
        board_size: Number of tiles (only 40 is supported)
        problems: Optional imported problem set
        rng: Random source

    Returns:
        Tiles ordered by index
    """
    if board_size != BOARD_SIZE:
        raise ConfigError(f"Only {BOARD_SIZE}-tile boards are supported, got {board_size}")

    rng = rng or random
    pool_state = initialize_problem_pool(problems)
    tiles: List[Tile] = []

    for i in range(board_size):
        if i in _CORNER_POSITIONS:
            corner = SpecialTilePosition(i)
            tiles.append(CornerTile(i, corner=corner, label=TILE_SCORING[corner].label))
        elif i in SLIP_POSITIONS:
            tiles.append(ObstacleTile(i, obstacle_type=ObstacleType.SLIP))
        elif i in TRAP_POSITIONS:
            tiles.append(ObstacleTile(i, obstacle_type=ObstacleType.TRAP))
        elif i in SHOP_POSITIONS:
            tiles.append(ShopTile(i))
        else:
            difficulty = Difficulty(rng.randint(1, 3))
            points = difficulty * 10 + rng.randrange(20)
            draw = get_next_problem(difficulty, problems, pool_state, rng)
            pool_state = draw.pool_state
            tiles.append(
                RegularTile(
                    i,
                    difficulty=difficulty,
                    points=int(points),
                    question=draw.problem.question,
                    answer=draw.problem.answer,
                )
            )

    return tiles


def get_tile_at(tiles: Sequence[Tile], position: int) -> Optional[Tile]:
    """Get the tile at a position, or None if off the board."""
    if 0 <= position < len(tiles):
        return tiles[position]
    return None


def is_corner_tile(tile: Tile) -> bool:
    return tile.tile_type == TileType.CORNER


def get_tiles_of_type(tiles: Sequence[Tile], tile_type: TileType) -> List[int]:
    """Get positions of all tiles of a type."""
    return [t.index for t in tiles if t.tile_type == tile_type]
