"""
Power-up item catalog and inventory/economy rules.

All functions take a PlayerState and return a new one; the input is never
modified. Failed operations return the player unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from mathquest.player import PlayerState


class ItemType(Enum):
    """Items sold in the shop."""

    SHIELD = "shield"
    EXTRA_DICE_ROLL = "extraDiceRoll"
    POINT_MULTIPLIER = "pointMultiplier"
    TELEPORT = "teleport"


class ItemTrigger(Enum):
    """When an item becomes eligible to apply."""

    MANUAL = "manual"
    ON_OBSTACLE = "onObstacle"
    BEFORE_DICE = "beforeDice"
    ON_MATH_PROBLEM = "onMathProblem"


@dataclass(frozen=True)
class ItemDefinition:
    """Static catalog entry for an item."""

    item_type: ItemType
    name: str
    description: str
    emoji: str
    price: int
    max_uses: int
    trigger: ItemTrigger
    stackable: bool


@dataclass(frozen=True)
class PlayerItem:
    """An item held in a player's inventory."""

    item_type: ItemType
    uses_remaining: int
    is_active: bool = False


ITEM_CATALOG: Dict[ItemType, ItemDefinition] = {
    ItemType.SHIELD: ItemDefinition(
        item_type=ItemType.SHIELD,
        name="Shield",
        description="Protects from the next trap or slip",
        emoji="🛡️",
        price=45,
        max_uses=1,
        trigger=ItemTrigger.ON_OBSTACLE,
        stackable=True,
    ),
    ItemType.EXTRA_DICE_ROLL: ItemDefinition(
        item_type=ItemType.EXTRA_DICE_ROLL,
        name="Lucky Dice",
        description="Roll twice and choose the better result",
        emoji="🎲",
        price=60,
        max_uses=3,
        trigger=ItemTrigger.BEFORE_DICE,
        stackable=False,
    ),
    ItemType.POINT_MULTIPLIER: ItemDefinition(
        item_type=ItemType.POINT_MULTIPLIER,
        name="Point Booster",
        description="1.5x points on next 2 correct answers",
        emoji="⭐",
        price=75,
        max_uses=2,
        trigger=ItemTrigger.ON_MATH_PROBLEM,
        stackable=False,
    ),
    ItemType.TELEPORT: ItemDefinition(
        item_type=ItemType.TELEPORT,
        name="Teleporter",
        description="Move to any tile (no obstacles)",
        emoji="🌀",
        price=90,
        max_uses=1,
        trigger=ItemTrigger.MANUAL,
        stackable=True,
    ),
}


def _find_item(player: "PlayerState", item_type: ItemType) -> Optional[PlayerItem]:
    for item in player.inventory:
        if item.item_type == item_type:
            return item
    return None


def can_afford_item(player: "PlayerState", item_type: ItemType) -> bool:
    """Check if the player has enough coins for an item."""
    return player.coins >= ITEM_CATALOG[item_type].price


def purchase_item(player: "PlayerState", item_type: ItemType) -> "PlayerState":
    """
    Buy one unit of an item.

    Fails (returns the player unchanged) when the player cannot afford it,
    or when the item is not stackable and already owned. Otherwise debits
    the price and adds the item's uses, topping up an existing entry.
    """
    definition = ITEM_CATALOG[item_type]

    if not can_afford_item(player, item_type):
        return player

    existing = _find_item(player, item_type)
    if existing is not None and not definition.stackable:
        return player

    if existing is not None:
        inventory = tuple(
            replace(item, uses_remaining=item.uses_remaining + definition.max_uses)
            if item.item_type == item_type
            else item
            for item in player.inventory
        )
    else:
        inventory = player.inventory + (PlayerItem(item_type, definition.max_uses),)

    return replace(player, coins=player.coins - definition.price, inventory=inventory)


def use_item(player: "PlayerState", item_type: ItemType) -> "PlayerState":
    """Consume one use of an item, dropping it from the inventory at zero."""
    existing = _find_item(player, item_type)
    if existing is None or existing.uses_remaining <= 0:
        return player

    remaining = existing.uses_remaining - 1
    if remaining > 0:
        inventory = tuple(
            replace(item, uses_remaining=remaining) if item.item_type == item_type else item
            for item in player.inventory
        )
    else:
        inventory = tuple(item for item in player.inventory if item.item_type != item_type)

    return replace(player, inventory=inventory)


def _set_active(player: "PlayerState", item_type: ItemType, active: bool) -> "PlayerState":
    inventory = tuple(
        replace(item, is_active=active) if item.item_type == item_type else item
        for item in player.inventory
    )
    return replace(player, inventory=inventory)


def activate_item(player: "PlayerState", item_type: ItemType) -> "PlayerState":
    """Mark a multi-turn item (Point Booster) as active."""
    return _set_active(player, item_type, True)


def deactivate_item(player: "PlayerState", item_type: ItemType) -> "PlayerState":
    return _set_active(player, item_type, False)


def award_coins(player: "PlayerState", amount: int) -> "PlayerState":
    return replace(player, coins=player.coins + amount)


def has_item(player: "PlayerState", item_type: ItemType) -> bool:
    """Check if the player holds an item with uses remaining."""
    item = _find_item(player, item_type)
    return item is not None and item.uses_remaining > 0


def get_items_for_trigger(player: "PlayerState", trigger: ItemTrigger) -> List[PlayerItem]:
    """Get held items that apply at a given trigger point."""
    return [
        item
        for item in player.inventory
        if ITEM_CATALOG[item.item_type].trigger == trigger and item.uses_remaining > 0
    ]


def get_active_item(player: "PlayerState", item_type: ItemType) -> Optional[PlayerItem]:
    item = _find_item(player, item_type)
    if item is not None and item.is_active:
        return item
    return None


def get_uses_remaining(player: "PlayerState", item_type: ItemType) -> int:
    item = _find_item(player, item_type)
    return item.uses_remaining if item is not None else 0


def inventory_summary(player: "PlayerState") -> Tuple[str, ...]:
    """Short display strings like '🛡️ Shield x2'."""
    return tuple(
        f"{ITEM_CATALOG[item.item_type].emoji} {ITEM_CATALOG[item.item_type].name} x{item.uses_remaining}"
        for item in player.inventory
    )
