"""
Debug helpers for manual testing.

Each helper drives the engine through its public commands. Misuse (no game
running, no problem open) is reported as a warning and otherwise ignored.
"""

import logging
from typing import List, Optional

from mathquest.board import get_tile_at, is_corner_tile
from mathquest.engine import GameEngine
from mathquest.player import PlayerState
from mathquest.state import GameScreen, TileLandingResult
from mathquest.turns import dice_label

logger = logging.getLogger(__name__)


class DevTools:
    """Shortcuts for poking at a running game."""

    def __init__(self, engine: GameEngine):
        self.engine = engine

    def _current_player(self) -> Optional[PlayerState]:
        player = self.engine.state.get_current_player()
        if player is None:
            logger.warning("No current player found")
        return player

    def move_player_to(self, tile_index: int) -> Optional[TileLandingResult]:
        """
        Place the current player on a tile and resolve the landing.

        Corner tiles are only placed on, not resolved.
        """
        state = self.engine.state
        if state.screen != GameScreen.PLAYING:
            logger.warning("Game is not in playing state. Start the game first.")
            return None

        player = self._current_player()
        if player is None:
            return None

        board_size = state.config.board_size
        if not 0 <= tile_index < board_size:
            logger.warning("Tile index must be between 0 and %d", board_size - 1)
            return None

        logger.info("Moving %s from tile %d to tile %d", player.name, player.position, tile_index)
        self.engine.set_player_position(player.player_id, tile_index)

        if is_corner_tile(get_tile_at(state.tiles, tile_index)):
            return None
        return self.engine.handle_tile_landing(tile_index, player.player_id)

    def answer_correctly(self) -> bool:
        problem = self.engine.state.math_problem
        if problem is None:
            logger.warning("No math problem currently open")
            return False
        logger.info("Auto-answering: %s = %s", problem.question, problem.answer)
        return self.engine.submit_answer(problem.answer)

    def answer_incorrectly(self) -> bool:
        problem = self.engine.state.math_problem
        if problem is None:
            logger.warning("No math problem currently open")
            return False
        wrong = problem.answer + 999
        logger.info("Auto-answering incorrectly: %s (correct: %s)", wrong, problem.answer)
        self.engine.submit_answer(wrong)
        return True

    def skip_problem(self) -> bool:
        """Time out the current problem."""
        if self.engine.state.math_problem is None:
            logger.warning("No math problem currently open")
            return False
        self.engine.submit_answer_timeout()
        return True

    def add_coins(self, amount: int = 100) -> bool:
        player = self._current_player()
        if player is None:
            return False
        self.engine.award_coins(player.player_id, amount)
        logger.info(
            "Added %d coins to %s (%d -> %d)", amount, player.name, player.coins, player.coins + amount
        )
        return True

    def skip_timer(self) -> bool:
        state = self.engine.state
        if state.math_problem is None or not state.config.timer_enabled:
            logger.warning("No timer currently running")
            return False
        self.engine.set_time_left(0)
        return True

    def toggle_pause(self) -> None:
        paused = not self.engine.state.is_paused
        logger.info("Game %s", "paused" if paused else "resumed")
        self.engine.toggle_pause()

    def next_turn(self) -> None:
        logger.info("Advancing to next turn")
        self.engine.next_turn()

    def leader(self) -> Optional[PlayerState]:
        """The player with the highest score (first one on ties)."""
        players = self.engine.state.players
        if not players:
            return None
        return max(players, key=lambda p: p.score)

    def describe_state(self) -> List[str]:
        """Human-readable summary lines of the current state."""
        state = self.engine.state
        lines = [
            f"Screen: {state.screen.value}",
            f"Round: {state.round}/{state.config.max_rounds}",
            f"Current player: {state.current_player}",
            "Players:",
        ]
        for p in state.players:
            lines.append(
                f"  {p.player_id}: {p.name} - Score: {p.score}, "
                f"Position: {p.position}, Coins: {p.coins}"
            )
        current = state.get_current_player()
        if current is not None:
            lines.append(f"Dice: {dice_label(current.name, state.dice_value != 0)}")
        if state.math_problem is not None:
            lines.append(
                f"Current Problem: {state.math_problem.question} = {state.math_problem.answer}"
            )
        return lines
