"""
Turn sequencing: player rotation, round accounting and game end.
"""

from dataclasses import dataclass

from mathquest.player import get_next_player_id


@dataclass(frozen=True)
class TurnState:
    current_player: int
    round: int
    moves_in_round: int


@dataclass(frozen=True)
class NextTurnResult:
    """
    Result of advancing the turn.

    When should_end_game is set, new_state still carries the player who
    just moved; the caller moves to the game-over screen and changes
    nothing else.
    """

    new_state: TurnState
    should_end_game: bool
    round_completed: bool


def next_turn(
    current_player: int,
    round: int,
    moves_in_round: int,
    total_players: int,
    max_rounds: int,
) -> NextTurnResult:
    """
    Advance to the next turn.

    Must run exactly once per completed turn: skipping a call breaks the
    round count, calling twice skips a player.

    Args:
        current_player: Index of the player who just finished
        round: Current round (1-based)
        moves_in_round: Turns already taken this round
        total_players: Number of players
        max_rounds: Last round to be played

    Returns:
        NextTurnResult with the advanced counters
    """
    moves = moves_in_round + 1
    new_round = round
    round_completed = False

    if moves >= total_players:
        new_round += 1
        moves = 0
        round_completed = True

    if new_round > max_rounds:
        return NextTurnResult(
            new_state=TurnState(current_player, new_round, moves),
            should_end_game=True,
            round_completed=round_completed,
        )

    return NextTurnResult(
        new_state=TurnState(get_next_player_id(current_player, total_players), new_round, moves),
        should_end_game=False,
        round_completed=round_completed,
    )


def is_first_turn(round: int, moves_in_round: int) -> bool:
    return round == 1 and moves_in_round == 0


def dice_label(player_name: str, has_rolled: bool) -> str:
    """Caption shown on the dice for the current player."""
    if has_rolled:
        return f"{player_name} rolled!"
    return f"{player_name}'s turn - Click to Roll!"
