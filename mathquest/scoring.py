"""
Scoring rules for answers, timeouts, corner tiles and passing START.

Pure functions: each returns a result describing the change; applying it
to a player is a separate step (apply_score_change), which is where the
zero floor on scores is enforced.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from mathquest.config import (
    CELEBRATION_STREAK,
    CORRECT_ANSWER_COINS,
    PASS_START_COINS,
    PASS_START_POINTS,
    POINT_BOOSTER_RATE,
)
from mathquest.player import PlayerState
from mathquest.tiles import PASS_START_MESSAGE, TILE_SCORING, SpecialTilePosition


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of an answer submission or a timeout."""

    correct: bool
    score_change: int
    coin_reward: int
    new_streak: int
    message: str


@dataclass(frozen=True)
class ScoreChange:
    """A fixed score (and coin) change with the message to show for it."""

    score_change: int
    message: str
    coin_reward: int = 0


def format_number(value: float) -> str:
    """Render an answer without a trailing '.0' when it is whole."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def calculate_answer_result(
    user_answer: float,
    correct_answer: float,
    points: int,
    current_streak: int,
    negative_points_enabled: bool,
) -> AnswerResult:
    """
    Score an answer submission.

    Correct: +points, +15 coins, streak + 1.
    Incorrect: -points (or 0 when negative points are off), no coins,
    streak back to 0.
    """
    if user_answer == correct_answer:
        return AnswerResult(
            correct=True,
            score_change=points,
            coin_reward=CORRECT_ANSWER_COINS,
            new_streak=current_streak + 1,
            message=f"+{points} points!",
        )

    shown = format_number(correct_answer)
    if negative_points_enabled:
        message = f"The answer was {shown}. -{points} points!"
    else:
        message = f"The answer was {shown}."

    return AnswerResult(
        correct=False,
        score_change=-points if negative_points_enabled else 0,
        coin_reward=0,
        new_streak=0,
        message=message,
    )


def calculate_timeout_result(
    correct_answer: float, points: int, negative_points_enabled: bool
) -> AnswerResult:
    """Score a problem whose timer ran out. Same deduction policy as a wrong answer."""
    shown = format_number(correct_answer)
    message = f"⏰ You ran out of time! The correct answer was {shown}."
    if negative_points_enabled:
        message = f"{message} -{points} points!"

    return AnswerResult(
        correct=False,
        score_change=-points if negative_points_enabled else 0,
        coin_reward=0,
        new_streak=0,
        message=message,
    )


def calculate_special_tile_score(position: int) -> Optional[ScoreChange]:
    """
    Fixed score for the START and PENALTY corners.

    Returns None for every other position; BONUS and CHALLENGE open a math
    problem instead. Whether the PENALTY deduction applies when negative
    points are off is decided by the caller.
    """
    if position == SpecialTilePosition.START:
        scoring = TILE_SCORING[SpecialTilePosition.START]
        return ScoreChange(scoring.points, scoring.message)
    if position == SpecialTilePosition.PENALTY:
        scoring = TILE_SCORING[SpecialTilePosition.PENALTY]
        return ScoreChange(scoring.points, scoring.message)
    return None


def calculate_pass_start_bonus() -> ScoreChange:
    return ScoreChange(PASS_START_POINTS, PASS_START_MESSAGE, coin_reward=PASS_START_COINS)


def should_celebrate(streak: int) -> bool:
    return streak >= CELEBRATION_STREAK


def apply_score_change(player: PlayerState, score_change: int) -> PlayerState:
    """Apply a score change. Scores never drop below zero."""
    return replace(player, score=max(0, player.score + score_change))


def apply_point_booster(result: AnswerResult) -> AnswerResult:
    """Scale a correct answer's points by the Point Booster rate (rounded down)."""
    if not result.correct:
        return result
    boosted = math.floor(result.score_change * POINT_BOOSTER_RATE)
    return replace(result, score_change=boosted, message=f"+{boosted} points! ⭐ Boosted!")
