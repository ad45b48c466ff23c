"""
Player state and management.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from mathquest.items import PlayerItem

PLAYER_COLORS = ("#e74c3c", "#3498db", "#2ecc71", "#f39c12")


@dataclass(frozen=True)
class PlayerState:
    """Represents the complete state of a player in the game."""

    player_id: int
    name: str
    color: str
    avatar_index: int
    position: int = 0
    score: int = 0
    streak: int = 0
    coins: int = 0
    inventory: Tuple[PlayerItem, ...] = ()

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"score={self.score}, coins={self.coins}, position={self.position})"
        )


def _default_color(index: int) -> str:
    return PLAYER_COLORS[index % len(PLAYER_COLORS)]


def initialize_players(count: int) -> List[PlayerState]:
    """Create players with default avatars and colors."""
    return [
        PlayerState(
            player_id=i,
            name=f"Player {i + 1}",
            color=_default_color(i),
            avatar_index=i,
        )
        for i in range(count)
    ]


def initialize_players_with_avatars(
    avatar_indices: Sequence[int], colors: Sequence[str]
) -> List[PlayerState]:
    """Create one player per avatar choice, falling back to default colors."""
    players = []
    for i, avatar_index in enumerate(avatar_indices):
        color = colors[i] if i < len(colors) and colors[i] else _default_color(i)
        players.append(
            PlayerState(
                player_id=i,
                name=f"Player {i + 1}",
                color=color,
                avatar_index=avatar_index,
            )
        )
    return players


def move_player_to_position(player: PlayerState, new_position: int, board_size: int) -> PlayerState:
    return replace(player, position=new_position % board_size)


def update_player_streak(player: PlayerState, new_streak: int) -> PlayerState:
    return replace(player, streak=new_streak)


def did_pass_start(old_position: int, new_position: int, board_size: int) -> bool:
    """Check if a single step wrapped around past START."""
    return new_position % board_size < old_position


def get_player_by_id(players: Sequence[PlayerState], player_id: int) -> Optional[PlayerState]:
    for player in players:
        if player.player_id == player_id:
            return player
    return None


def get_next_player_id(current_player_id: int, total_players: int) -> int:
    return (current_player_id + 1) % total_players
