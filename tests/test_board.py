import random

import pytest

from mathquest.board import create_board, get_tile_at, get_tiles_of_type, is_corner_tile
from mathquest.exceptions import ConfigError
from mathquest.tiles import (
    CornerTile,
    Difficulty,
    ObstacleTile,
    ObstacleType,
    RegularTile,
    ShopTile,
    SpecialTilePosition,
    TileType,
)


@pytest.fixture
def board():
    return create_board(rng=random.Random(42))


def test_board_has_forty_tiles_in_order(board):
    assert len(board) == 40
    assert [t.index for t in board] == list(range(40))


def test_corners_are_fixed(board):
    assert get_tiles_of_type(board, TileType.CORNER) == [0, 10, 20, 30]
    assert board[0].label.startswith("START")
    assert board[10].corner == SpecialTilePosition.BONUS
    assert board[20].corner == SpecialTilePosition.CHALLENGE
    assert board[30].label.startswith("PENALTY")
    assert all(is_corner_tile(board[i]) for i in (0, 10, 20, 30))


def test_obstacles_and_shops_are_fixed(board):
    assert get_tiles_of_type(board, TileType.OBSTACLE) == [7, 18, 28, 38]
    assert board[7].obstacle_type == ObstacleType.SLIP
    assert board[28].obstacle_type == ObstacleType.SLIP
    assert board[18].obstacle_type == ObstacleType.TRAP
    assert board[38].obstacle_type == ObstacleType.TRAP
    assert get_tiles_of_type(board, TileType.SHOP) == [5, 25]
    assert isinstance(board[5], ShopTile)


def test_layout_does_not_depend_on_seed():
    first = create_board(rng=random.Random(1))
    second = create_board(rng=random.Random(2))
    assert [t.tile_type for t in first] == [t.tile_type for t in second]


def test_regular_tiles_carry_problem_and_points(board):
    regular = [t for t in board if isinstance(t, RegularTile)]
    assert len(regular) == 40 - 4 - 4 - 2

    for tile in regular:
        assert tile.difficulty in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)
        low = tile.difficulty * 10
        assert low <= tile.points < low + 20
        assert tile.question


def test_imported_problems_are_bound_to_tiles(three_problems):
    board = create_board(problems=three_problems, rng=random.Random(8))
    questions = {p.question for p in three_problems.problems}
    regular = [t for t in board if isinstance(t, RegularTile)]

    assert all(t.question in questions for t in regular)
    # 30 tiles over 3 problems: each problem is used
    assert {t.question for t in regular} == questions


def test_get_tile_at_bounds(board):
    assert isinstance(get_tile_at(board, 0), CornerTile)
    assert isinstance(get_tile_at(board, 39), (RegularTile, ObstacleTile, ShopTile))
    assert get_tile_at(board, 40) is None
    assert get_tile_at(board, -1) is None


def test_unsupported_board_size_raises():
    with pytest.raises(ConfigError):
        create_board(board_size=20)
