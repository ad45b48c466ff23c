"""
Game event logging.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    """Types of game events."""

    GAME_START = "game_start"
    AVATAR_SELECTED = "avatar_selected"
    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    MOVE = "move"
    PASS_START = "pass_start"
    LAND = "land"

    MATH_PROBLEM = "math_problem"
    ANSWER = "answer"
    TIMEOUT = "timeout"

    OBSTACLE = "obstacle"

    SHOP_OPEN = "shop_open"
    SHOP_CLOSE = "shop_close"
    PURCHASE = "purchase"

    ITEM_PROMPT = "item_prompt"
    ITEM_DECLINED = "item_declined"
    ITEM_USED = "item_used"
    TELEPORT = "teleport"

    GAME_END = "game_end"
    GAME_RESET = "game_reset"


@dataclass
class GameEvent:
    """A logged event in the game."""

    event_type: EventType
    player_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)
    round: Optional[int] = None

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.details}"


class EventLog:
    """Manages the game event log."""

    def __init__(self):
        self.events: List[GameEvent] = []

    def log(
        self,
        event_type: EventType,
        player_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        round: Optional[int] = None,
    ) -> None:
        """Log a game event, tagged with the round it happened in."""
        self.events.append(GameEvent(event_type, player_id, dict(details or {}), round))

    def get_events(self) -> List[GameEvent]:
        """Get all logged events."""
        return self.events.copy()

    def get_recent_events(self, count: int = 10) -> List[GameEvent]:
        """Get the most recent N events."""
        return self.events[-count:]

    def clear(self) -> None:
        """Clear the event log."""
        self.events.clear()
