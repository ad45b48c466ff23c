"""
JSONL logger for Math Quest game events.

Writes the engine's internal events, enriched with round and player names,
to a JSONL file, one event per line.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from mathquest.board import get_tile_at
from mathquest.engine import GameEngine
from mathquest.events import EventType
from mathquest.items import inventory_summary
from mathquest.player import get_player_by_id
from mathquest.state import GameState


class GameLogger:
    """Logger that writes game events to a JSONL file."""

    def __init__(self, log_file: Optional[str] = None):
        """
        Initialize game logger.

        Args:
            log_file: Path to log file. If None, generates timestamped filename.
        """
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"mathquest_game_{timestamp}.jsonl"

        self.log_file = log_file
        self.event_count = 0
        self._engine_last_idx = 0  # last flushed index from engine's internal EventLog

        # Create/clear log file
        with open(self.log_file, "w"):
            pass

    def log_event(self, event_type: str, **kwargs: Any) -> None:
        """
        Log a game event to JSONL file.

        Args:
            event_type: Type of event (e.g., "game_start", "dice_roll", "answer")
            **kwargs: Additional event data
        """
        event = {
            "event_id": self.event_count,
            "timestamp": datetime.now().isoformat(),
            "event_type": event_type,
            **kwargs,
        }

        with open(self.log_file, "a") as f:
            f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")

        self.event_count += 1

    def flush_engine_events(self, engine: GameEngine) -> int:
        """Flush new internal engine events to JSONL.

        Returns the number of events written.
        """
        events = engine.event_log.events
        if self._engine_last_idx >= len(events):
            return 0

        state = engine.state
        wrote = 0
        for event in events[self._engine_last_idx :]:
            round_number = event.round if event.round is not None else state.round
            record: Dict[str, Any] = {"round": round_number, **event.details}

            if event.player_id is not None:
                record["player_id"] = event.player_id
                player = get_player_by_id(state.players, event.player_id)
                if player is not None:
                    record["player_name"] = player.name

            if event.event_type == EventType.GAME_END:
                record["final_standings"] = self._final_standings(state)

            self.log_event(event.event_type.value, **record)
            wrote += 1

        self._engine_last_idx = len(events)
        return wrote

    def _final_standings(self, state: GameState) -> List[Dict[str, Any]]:
        ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
        return [
            {
                "rank": rank,
                "player_id": p.player_id,
                "player_name": p.name,
                "score": p.score,
                "coins": p.coins,
            }
            for rank, p in enumerate(ranked, start=1)
        ]

    def log_turn_snapshot(self, state: GameState) -> None:
        """Log a state snapshot for every player at the start of a turn."""
        for player in state.players:
            tile = get_tile_at(state.tiles, player.position)
            self.log_player_state(
                round_number=state.round,
                player_id=player.player_id,
                player_name=player.name,
                position=player.position,
                tile_type=tile.tile_type.value if tile else None,
                score=player.score,
                coins=player.coins,
                streak=player.streak,
                inventory=list(inventory_summary(player)),
            )

    def log_player_state(
        self,
        round_number: int,
        player_id: int,
        player_name: str,
        position: int,
        tile_type: Optional[str],
        score: int,
        coins: int,
        streak: int,
        inventory: list,
    ) -> None:
        """Log player state snapshot."""
        self.log_event(
            "player_state",
            round=round_number,
            player_id=player_id,
            player_name=player_name,
            position=position,
            tile_type=tile_type,
            score=score,
            coins=coins,
            streak=streak,
            inventory=inventory,
        )
