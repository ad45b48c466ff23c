"""
Public snapshot serialization of GameState.

Produces a UI-friendly, JSON-safe view of the current game without
exposing hidden information (problem answers).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mathquest.items import ITEM_CATALOG
from mathquest.player import PlayerState
from mathquest.state import GameState, GameMessage
from mathquest.tiles import CornerTile, ObstacleTile, RegularTile, Tile


def _serialize_player(player: PlayerState) -> Dict[str, Any]:
    return {
        "player_id": player.player_id,
        "name": player.name,
        "color": player.color,
        "avatar_index": player.avatar_index,
        "position": player.position,
        "score": player.score,
        "streak": player.streak,
        "coins": player.coins,
        "inventory": [
            {
                "item": item.item_type.value,
                "name": ITEM_CATALOG[item.item_type].name,
                "uses_remaining": item.uses_remaining,
                "is_active": item.is_active,
            }
            for item in player.inventory
        ],
    }


def _serialize_tile(tile: Tile, show_questions: bool) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"index": tile.index, "type": tile.tile_type.value}
    if isinstance(tile, CornerTile):
        entry["label"] = tile.label
    elif isinstance(tile, RegularTile):
        entry["difficulty"] = int(tile.difficulty)
        entry["points"] = tile.points
        if show_questions:
            entry["question"] = tile.question
    elif isinstance(tile, ObstacleTile):
        entry["obstacle"] = tile.obstacle_type.value
    return entry


def _serialize_message(message: Optional[GameMessage]) -> Optional[Dict[str, Any]]:
    if message is None:
        return None
    return {
        "text": message.text,
        "type": message.type.value,
        "streak": message.streak,
        "celebrate": message.celebrate,
    }


def serialize_snapshot(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict.

    The snapshot includes:
    - screen, round and current player
    - players with score, coins and inventory
    - tiles with their type-specific payload (questions only when the
      config shows them on tiles)
    - the open math problem without its answer, and the timer
    - shop, item prompt and teleporter state
    """
    config = state.config
    tiles: List[Dict[str, Any]] = [
        _serialize_tile(t, config.display_problems_in_tiles) for t in state.tiles
    ]

    problem = None
    if state.math_problem is not None:
        problem = {
            "question": state.math_problem.question,
            "points": state.math_problem.points,
        }

    pending = None
    if state.pending_item_use is not None:
        pending = {
            "item": state.pending_item_use.item_type.value,
            "context": state.pending_item_use.context.value,
            "player_id": state.pending_item_use.player_id,
        }

    banner = None
    if state.banner_message is not None:
        banner = {"text": state.banner_message.text, "type": state.banner_message.type.value}

    return {
        "screen": state.screen.value,
        "round": state.round,
        "max_rounds": config.max_rounds,
        "moves_in_round": state.moves_in_round,
        "current_player_id": state.current_player,
        "players": [_serialize_player(p) for p in state.players],
        "tiles": tiles,
        "dice": {
            "value": state.dice_value,
            "is_rolling": state.is_rolling,
            "choices": list(state.dice_choices),
        },
        "moving_player": state.moving_player,
        "math_problem": problem,
        "timer": {
            "enabled": config.timer_enabled,
            "time_left": state.time_left,
            "is_paused": state.is_paused,
        },
        "message": _serialize_message(state.message),
        "banner_message": banner,
        "shop_open": state.shop_open,
        "pending_item_use": pending,
        "teleporter": {
            "active": state.teleporter.active,
            "selected_tile": state.teleporter.selected_tile,
        },
        "problem_pool": {
            "remaining": len(state.problem_pool.pool),
            "used": len(state.problem_pool.used_ids),
        },
    }
