#!/usr/bin/env python3
"""
Minimal CLI for simulating Math Quest games.

This script demonstrates the game engine by driving it the way the board UI
does, with simulated students who answer correctly at a given rate.
"""

import argparse
import logging
import random
from typing import Optional

from mathquest.config import GameConfig
from mathquest.engine import GameEngine
from mathquest.game_logger import GameLogger
from mathquest.importer import load_problems
from mathquest.items import ITEM_CATALOG, ItemType, can_afford_item, has_item
from mathquest.settings import get_game_settings
from mathquest.state import NO_ROLL, GameScreen, ItemContext, TileLandingResult
from mathquest.tiles import ObstacleTile

# Shopping preference, most wanted first
SHOPPING_LIST = (
    ItemType.SHIELD,
    ItemType.POINT_MULTIPLIER,
    ItemType.EXTRA_DICE_ROLL,
    ItemType.TELEPORT,
)


class SimulatedStudent:
    """A player who answers correctly with a fixed probability."""

    def __init__(self, accuracy: float, rng: random.Random, timeout_rate: float = 0.1):
        self.accuracy = accuracy
        self.timeout_rate = timeout_rate
        self.rng = rng

    def answers_correctly(self) -> bool:
        return self.rng.random() < self.accuracy

    def runs_out_of_time(self) -> bool:
        return self.rng.random() < self.timeout_rate


def print_game_state(engine: GameEngine) -> None:
    """Print current game state."""
    state = engine.state
    print("\n" + "=" * 60)
    print(f"ROUND {state.round}/{state.config.max_rounds}")
    print("=" * 60)

    for player in state.players:
        items = ", ".join(
            f"{ITEM_CATALOG[i.item_type].name} x{i.uses_remaining}" for i in player.inventory
        )
        print(
            f"{player.name}: {player.score} pts | {player.coins} coins | "
            f"tile {player.position} | streak {player.streak}"
            + (f" | {items}" if items else "")
        )


def print_game_summary(engine: GameEngine) -> None:
    """Print final game summary."""
    state = engine.state
    print("\n" + "=" * 60)
    print("GAME OVER")
    print("=" * 60)

    ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
    if ranked:
        print(f"\nWinner: {ranked[0].name} with {ranked[0].score} points")

    print("\nFinal Standings:")
    for rank, player in enumerate(ranked, start=1):
        print(f"  {rank}. {player.name}: {player.score} pts, {player.coins} coins")


def _go_shopping(engine: GameEngine, verbose: bool) -> None:
    player = engine.state.get_current_player()
    for item_type in SHOPPING_LIST:
        if player is None or has_item(player, item_type):
            continue
        if can_afford_item(player, item_type) and engine.purchase_item(item_type):
            if verbose:
                print(f"  {player.name} bought {ITEM_CATALOG[item_type].name}")
            player = engine.state.get_current_player()
    engine.close_shop()


def _try_teleport(engine: GameEngine, rng: random.Random) -> bool:
    """Jump to a random allowed tile if the current player holds a Teleporter."""
    state = engine.state
    player = state.get_current_player()
    if player is None or not has_item(player, ItemType.TELEPORT):
        return False

    targets = [
        t.index
        for t in state.tiles
        if not isinstance(t, ObstacleTile) and t.index != player.position
    ]
    if not engine.use_item(ItemType.TELEPORT):
        return False
    if not engine.select_teleport_tile(rng.choice(targets)):
        engine.cancel_teleport()
        return False
    return engine.confirm_teleport()


def _roll(engine: GameEngine) -> int:
    value = engine.roll_dice()
    if value != NO_ROLL:
        engine.complete_dice_roll(value)
        return value

    state = engine.state
    pending = state.pending_item_use
    if pending is not None and pending.context == ItemContext.DICE:
        engine.choose_dice_roll(max(state.dice_choices))
        return engine.state.dice_value
    return NO_ROLL


def _move(engine: GameEngine, player_id: int, steps: int) -> int:
    board_size = engine.state.config.board_size
    engine.start_moving_player(player_id)
    for _ in range(steps):
        position = engine.state.players[player_id].position
        if engine.move_player_step(player_id, (position + 1) % board_size):
            engine.apply_pass_start_bonus(player_id)
    engine.complete_player_movement()
    return engine.state.players[player_id].position


def _solve(engine: GameEngine, student: SimulatedStudent, verbose: bool) -> None:
    pending = engine.state.pending_item_use
    if pending is not None and pending.context == ItemContext.MATH:
        engine.use_item(pending.item_type)

    problem = engine.state.math_problem
    name = engine.state.get_current_player().name
    if engine.state.config.timer_enabled and student.runs_out_of_time():
        engine.submit_answer_timeout()
    elif student.answers_correctly():
        engine.submit_answer(problem.answer)
    else:
        engine.submit_answer(problem.answer + student.rng.randint(1, 9))

    if verbose and engine.state.message is not None:
        print(f"  {name}: {problem.question} -> {engine.state.message.text}")


def play_turn(
    engine: GameEngine,
    student: SimulatedStudent,
    rng: random.Random,
    teleport_chance: float,
    verbose: bool,
) -> None:
    """Play one full turn for the current player."""
    player_id = engine.state.current_player

    if rng.random() < teleport_chance and _try_teleport(engine, rng):
        position = engine.state.players[player_id].position
    else:
        value = _roll(engine)
        if value == NO_ROLL:
            engine.next_turn()
            return
        position = _move(engine, player_id, value)

    result = engine.handle_tile_landing(position, player_id)
    if result == TileLandingResult.MATH:
        _solve(engine, student, verbose)
    elif result == TileLandingResult.SPECIAL:
        _go_shopping(engine, verbose)
    elif verbose and engine.state.message is not None:
        print(f"  {engine.state.players[player_id].name}: {engine.state.message.text}")

    engine.close_message()
    engine.clear_banner_message()
    engine.next_turn()


def simulate_game(
    num_players: int = 2,
    accuracy: float = 0.7,
    seed: Optional[int] = None,
    verbose: bool = True,
    max_rounds: Optional[int] = None,
    timer: bool = False,
    problems_file: Optional[str] = None,
    log_file: Optional[str] = None,
) -> GameEngine:
    """
    Simulate a complete game of Math Quest.

    Args:
        num_players: Number of players (1-4)
        accuracy: Probability that a student answers correctly
        seed: Random seed for reproducibility
        verbose: Whether to print detailed output
        max_rounds: Rounds to play (default from settings)
        timer: Enable the per-problem timer (students may time out)
        problems_file: Optional JSON problem file to import
        log_file: Path to JSONL log file (None = no log)
    """
    settings = get_game_settings()
    config = GameConfig.from_settings(settings).merged(
        {
            "seed": seed if seed is not None else settings.seed,
            "max_rounds": max_rounds or settings.max_rounds,
            "timer_enabled": timer or settings.timer_enabled,
        }
    )
    problems = load_problems(problems_file) if problems_file else None

    engine = GameEngine(config)
    logger = GameLogger(log_file) if log_file is not None else None

    rng = random.Random(config.seed)
    students = [SimulatedStudent(accuracy, random.Random(rng.random())) for _ in range(num_players)]

    engine.start_avatar_selection(num_players, problems)
    for i in range(num_players):
        engine.select_avatar(i, "")

    if verbose:
        print(f"Starting game with {num_players} players (accuracy {accuracy:.0%})")
        print(f"Seed: {config.seed}")
        if logger is not None:
            print(f"Logging to: {logger.log_file}")

    last_round = 0
    while engine.state.screen == GameScreen.PLAYING:
        if logger is not None:
            logger.flush_engine_events(engine)
            if engine.state.round != last_round:
                logger.log_turn_snapshot(engine.state)

        if verbose and engine.state.round != last_round:
            print_game_state(engine)
        last_round = engine.state.round

        play_turn(
            engine,
            students[engine.state.current_player],
            rng,
            teleport_chance=0.3,
            verbose=verbose,
        )

    if logger is not None:
        logger.flush_engine_events(engine)

    if verbose:
        print_game_summary(engine)
        if logger is not None:
            print(f"\nGame logged to: {logger.log_file}")

    return engine


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Simulate a Math Quest game")
    parser.add_argument(
        "--players",
        type=int,
        default=2,
        choices=range(1, 5),
        help="Number of players (1-4)",
    )
    parser.add_argument(
        "--accuracy",
        type=float,
        default=0.7,
        help="Chance that a student answers correctly (0-1)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")
    parser.add_argument("--rounds", type=int, default=None, help="Number of rounds")
    parser.add_argument("--timer", action="store_true", help="Enable the answer timer")
    parser.add_argument("--problems", type=str, default=None, help="JSON problem file to import")
    parser.add_argument("--log-file", type=str, default=None, help="Path to JSONL log file")

    args = parser.parse_args()

    logging.basicConfig(level=get_game_settings().log_level)

    simulate_game(
        num_players=args.players,
        accuracy=args.accuracy,
        seed=args.seed,
        verbose=not args.quiet,
        max_rounds=args.rounds,
        timer=args.timer,
        problems_file=args.problems,
        log_file=args.log_file,
    )


if __name__ == "__main__":
    main()
