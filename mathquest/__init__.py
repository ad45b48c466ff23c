"""
Math Quest Game Engine

Board game rules where players race around a 40-tile ring solving
arithmetic problems for points, coins and power-up items.
"""

from .config import GameConfig
from .engine import GameEngine
from .importer import ImportedProblemsData, load_problems
from .player import PlayerState
from .state import NO_ROLL, GameScreen, GameState, TileLandingResult

__all__ = [
    "GameConfig",
    "GameEngine",
    "GameScreen",
    "GameState",
    "ImportedProblemsData",
    "NO_ROLL",
    "PlayerState",
    "TileLandingResult",
    "load_problems",
]
