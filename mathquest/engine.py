"""
Main game engine and state management.

GameEngine owns the single authoritative GameState. Every public command
builds one new snapshot, swaps it in and notifies subscribers
synchronously. Commands issued in the wrong situation (rolling twice,
answering with no problem open, buying without coins) are no-ops: they
return False, NO_ROLL or None and leave the state and subscribers alone.

The engine runs no clock and no animation. Callers drive the timer,
step-wise movement and teleport phases by calling commands in order.
"""

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from mathquest.board import create_board, get_tile_at
from mathquest.config import DICE_SIDES, GameConfig
from mathquest.events import EventLog, EventType
from mathquest.importer import ImportedProblemsData
from mathquest.items import (
    ItemType,
    activate_item,
    award_coins,
    get_active_item,
    has_item,
    purchase_item as purchase_item_rule,
    use_item as use_item_rule,
)
from mathquest.obstacles import apply_obstacle_effect
from mathquest.player import (
    PlayerState,
    did_pass_start,
    get_player_by_id,
    initialize_players,
    initialize_players_with_avatars,
    move_player_to_position,
    update_player_streak,
)
from mathquest.problems import get_next_problem, initialize_problem_pool
from mathquest.scoring import (
    apply_point_booster,
    apply_score_change,
    calculate_answer_result,
    calculate_pass_start_bonus,
    calculate_special_tile_score,
    calculate_timeout_result,
    should_celebrate,
)
from mathquest.state import (
    NO_ROLL,
    BannerMessage,
    GameMessage,
    GameScreen,
    GameState,
    ItemContext,
    MathProblem,
    MessageType,
    PendingItemUse,
    TeleporterState,
    TileLandingResult,
    create_initial_state,
)
from mathquest.tiles import (
    TILE_SCORING,
    Difficulty,
    ObstacleTile,
    RegularTile,
    ShopTile,
    SpecialTilePosition,
)
from mathquest.turns import next_turn as next_turn_rule

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


class GameEngine:
    """
    Math Quest game engine.

    Args:
        config: Base configuration. Options passed when a game starts are
            merged over it.
        rng: Random source. Defaults to random.Random(config.seed).
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.base_config = config or GameConfig()
        self.rng = rng or random.Random(self.base_config.seed)
        self.event_log = EventLog()

        self._state = create_initial_state(self.base_config)
        self._listeners: Dict[object, StateListener] = {}

    # ===== STATE & SUBSCRIPTION =====

    @property
    def state(self) -> GameState:
        """The current snapshot. Snapshots are immutable."""
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every new snapshot.

        The same listener may be registered more than once. The returned
        function removes only the registration it belongs to.
        """
        token = object()
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def _commit(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            listener(self._state)

    def _log_event(
        self,
        event_type: EventType,
        player_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.event_log.log(event_type, player_id, details, round=self._state.round)

    def _reject(self, command: str, reason: str) -> None:
        logger.debug("Ignored %s: %s", command, reason)

    def _get_player(self, player_id: int) -> Optional[PlayerState]:
        return get_player_by_id(self._state.players, player_id)

    def _with_player(self, updated: PlayerState) -> Tuple[PlayerState, ...]:
        return tuple(
            updated if p.player_id == updated.player_id else p for p in self._state.players
        )

    # ===== GAME LIFECYCLE =====

    def start_avatar_selection(
        self,
        player_count: int,
        problems: Optional[ImportedProblemsData] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Move from Setup to avatar selection.

        Stores the player count, the imported problems and the merged
        config for the game that starts once every avatar is chosen.
        """
        if self._state.screen != GameScreen.SETUP:
            self._reject("start_avatar_selection", "not on the setup screen")
            return False
        if player_count < 1:
            self._reject("start_avatar_selection", f"invalid player count {player_count}")
            return False

        self._commit(
            screen=GameScreen.AVATAR_SELECTION,
            avatar_selection_player_count=player_count,
            avatar_selection_current_player=0,
            selected_avatars=(),
            selected_colors=(),
            imported_problems=problems,
            config=self._state.config.merged(config),
        )
        return True

    def select_avatar(self, avatar_index: int, color: str) -> bool:
        """
        Record the current chooser's avatar and colour.

        The last choice starts the game.
        """
        state = self._state
        if state.screen != GameScreen.AVATAR_SELECTION:
            self._reject("select_avatar", "avatar selection is not running")
            return False

        avatars = state.selected_avatars + (avatar_index,)
        colors = state.selected_colors + (color,)
        chooser = state.avatar_selection_current_player

        self._log_event(
            EventType.AVATAR_SELECTED,
            player_id=chooser,
            details={"avatar_index": avatar_index, "color": color},
        )

        if len(avatars) >= state.avatar_selection_player_count:
            players = initialize_players_with_avatars(avatars, colors)
            self._start_playing(
                players,
                state.imported_problems,
                state.config,
                selected_avatars=avatars,
                selected_colors=colors,
            )
        else:
            self._commit(
                selected_avatars=avatars,
                selected_colors=colors,
                avatar_selection_current_player=chooser + 1,
            )
        return True

    def start_game(
        self,
        player_count: int,
        problems: Optional[ImportedProblemsData] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Start a game directly, skipping avatar selection."""
        new_config = self._state.config.merged(config)
        self._start_playing(initialize_players(player_count), problems, new_config)

    def _start_playing(
        self,
        players: List[PlayerState],
        problems: Optional[ImportedProblemsData],
        config: GameConfig,
        **extra: Any,
    ) -> None:
        if config.seed is not None:
            self.rng = random.Random(config.seed)

        tiles = create_board(config.board_size, problems, self.rng)

        self._commit(
            screen=GameScreen.PLAYING,
            players=tuple(players),
            tiles=tuple(tiles),
            current_player=0,
            round=1,
            moves_in_round=0,
            dice_value=0,
            dice_choices=(),
            is_rolling=False,
            moving_player=None,
            math_problem=None,
            time_left=0,
            is_paused=False,
            imported_problems=problems,
            problem_pool=initialize_problem_pool(problems),
            config=config,
            message=None,
            banner_message=None,
            shop_open=False,
            pending_item_use=None,
            teleporter=TeleporterState(),
            declined_items=frozenset(),
            **extra,
        )

        self._log_event(
            EventType.GAME_START,
            details={
                "players": [p.name for p in players],
                "imported_problems": len(problems.problems) if problems else 0,
                "max_rounds": config.max_rounds,
                "seed": config.seed,
            },
        )
        logger.info("Game started with %d players", len(players))

    def reset_game(self) -> None:
        """Replace the whole state with a fresh Setup snapshot."""
        self._state = create_initial_state(self.base_config)
        self._log_event(EventType.GAME_RESET)
        logger.info("Game reset")
        self._notify()

    # ===== DICE =====

    def _roll_guard(self, accepting_prompt: bool = False) -> Optional[str]:
        state = self._state
        if state.screen != GameScreen.PLAYING:
            return "game is not running"
        if state.is_rolling:
            return "dice already rolling"
        if state.moving_player is not None:
            return "a player is moving"
        if state.math_problem is not None:
            return "a math problem is open"
        if state.dice_value != 0:
            return "a dice value is pending"
        if state.pending_item_use is not None and not accepting_prompt:
            return "an item prompt is open"
        if state.teleporter.active:
            return "teleporter selection is active"
        return None

    def _lucky_dice_changes(self, player: PlayerState) -> Dict[str, Any]:
        choices = (self.rng.randint(1, DICE_SIDES), self.rng.randint(1, DICE_SIDES))
        self._log_event(
            EventType.ITEM_PROMPT,
            player_id=player.player_id,
            details={"item": ItemType.EXTRA_DICE_ROLL.value, "choices": list(choices)},
        )
        return {
            "dice_choices": choices,
            "pending_item_use": PendingItemUse(
                ItemType.EXTRA_DICE_ROLL, ItemContext.DICE, player.player_id
            ),
        }

    def roll_dice(self) -> int:
        """
        Roll the die for the current player.

        Returns NO_ROLL when a roll is already in progress or not allowed
        yet. If the player holds Lucky Dice (and has not declined it this
        turn) two candidates are rolled into dice_choices, a prompt opens
        and NO_ROLL is returned; the roll then finishes via
        choose_dice_roll or decline_item_use.
        """
        reason = self._roll_guard()
        if reason:
            self._reject("roll_dice", reason)
            return NO_ROLL

        player = self._state.get_current_player()
        if (
            player is not None
            and has_item(player, ItemType.EXTRA_DICE_ROLL)
            and ItemType.EXTRA_DICE_ROLL not in self._state.declined_items
        ):
            self._commit(**self._lucky_dice_changes(player))
            return NO_ROLL

        value = self.rng.randint(1, DICE_SIDES)
        self._commit(is_rolling=True)
        self._log_event(
            EventType.DICE_ROLL,
            player_id=player.player_id if player else None,
            details={"value": value},
        )
        return value

    def complete_dice_roll(self, value: int) -> None:
        """Finalize the rolled value. Movement is started by the caller."""
        self._commit(dice_value=value, is_rolling=False)

    def set_rolling(self, is_rolling: bool) -> None:
        self._commit(is_rolling=is_rolling)

    def choose_dice_roll(self, value: int) -> bool:
        """Pick one of the Lucky Dice candidates. Consumes one Lucky Dice use."""
        state = self._state
        pending = state.pending_item_use
        if pending is None or pending.context != ItemContext.DICE:
            self._reject("choose_dice_roll", "no dice choice is open")
            return False
        if value not in state.dice_choices:
            self._reject("choose_dice_roll", f"{value} is not one of {state.dice_choices}")
            return False

        player = self._get_player(pending.player_id)
        if player is None:
            return False

        updated = use_item_rule(player, ItemType.EXTRA_DICE_ROLL)
        self._commit(
            players=self._with_player(updated),
            dice_value=value,
            dice_choices=(),
            is_rolling=False,
            pending_item_use=None,
        )
        self._log_event(
            EventType.ITEM_USED,
            player_id=player.player_id,
            details={"item": ItemType.EXTRA_DICE_ROLL.value, "chosen": value},
        )
        self._log_event(
            EventType.DICE_ROLL,
            player_id=player.player_id,
            details={"value": value, "lucky_dice": True},
        )
        return True

    # ===== MOVEMENT =====

    def start_moving_player(self, player_id: int) -> None:
        self._commit(moving_player=player_id)

    def move_player_step(self, player_id: int, new_position: int) -> bool:
        """
        Move a player one step.

        Returns:
            True if this step wrapped past START
        """
        player = self._get_player(player_id)
        if player is None:
            self._reject("move_player_step", f"unknown player {player_id}")
            return False

        old_position = player.position
        board_size = self._state.config.board_size
        updated = move_player_to_position(player, new_position, board_size)
        self._commit(players=self._with_player(updated))

        self._log_event(
            EventType.MOVE,
            player_id=player_id,
            details={"from": old_position, "to": updated.position},
        )
        return did_pass_start(old_position, new_position, board_size)

    def complete_player_movement(self) -> None:
        self._commit(moving_player=None)

    def set_player_position(self, player_id: int, position: int) -> bool:
        """Place a player directly on a tile. No pass-START check, no landing."""
        player = self._get_player(player_id)
        if player is None or not 0 <= position < self._state.config.board_size:
            self._reject("set_player_position", f"player {player_id} to {position}")
            return False

        self._commit(players=self._with_player(replace(player, position=position)))
        self._log_event(
            EventType.MOVE,
            player_id=player_id,
            details={"from": player.position, "to": position, "direct": True},
        )
        return True

    def apply_pass_start_bonus(self, player_id: int) -> None:
        """Give the fixed bonus for passing START: +50 points, +30 coins."""
        player = self._get_player(player_id)
        if player is None:
            return

        bonus = calculate_pass_start_bonus()
        updated = award_coins(apply_score_change(player, bonus.score_change), bonus.coin_reward)
        self._commit(
            players=self._with_player(updated),
            banner_message=BannerMessage(bonus.message, MessageType.SUCCESS),
        )
        self._log_event(
            EventType.PASS_START,
            player_id=player_id,
            details={"points": bonus.score_change, "coins": bonus.coin_reward},
        )

    # ===== TILE LANDING =====

    def handle_tile_landing(self, position: int, player_id: int) -> TileLandingResult:
        """
        Resolve landing on a tile.

        Returns:
            SPECIAL for a shop (the shop opens, the turn waits for it),
            NEXT for obstacles, START and PENALTY, MATH when a problem
            was opened (the turn advances once it is answered).
        """
        state = self._state
        tile = get_tile_at(state.tiles, position)
        if tile is None:
            return TileLandingResult.NEXT

        self._log_event(
            EventType.LAND,
            player_id=player_id,
            details={"position": position, "tile_type": tile.tile_type.value},
        )

        if isinstance(tile, ShopTile):
            self._commit(shop_open=True)
            self._log_event(EventType.SHOP_OPEN, player_id=player_id)
            return TileLandingResult.SPECIAL

        if isinstance(tile, ObstacleTile):
            self._land_on_obstacle(tile, player_id)
            return TileLandingResult.NEXT

        special = calculate_special_tile_score(position)
        if special is not None:
            self._land_on_scoring_corner(special.score_change, special.message, player_id)
            return TileLandingResult.NEXT

        if position == SpecialTilePosition.BONUS:
            scoring = TILE_SCORING[SpecialTilePosition.BONUS]
            base_points = scoring.difficulty * 10 + self.rng.randrange(20)
            self._open_problem(
                scoring.difficulty,
                base_points * scoring.points,
                banner_message=BannerMessage(scoring.message, MessageType.SUCCESS),
            )
            return TileLandingResult.MATH

        if position == SpecialTilePosition.CHALLENGE:
            scoring = TILE_SCORING[SpecialTilePosition.CHALLENGE]
            self._open_problem(
                scoring.difficulty,
                scoring.points,
                banner_message=BannerMessage(scoring.message, MessageType.SUCCESS),
            )
            return TileLandingResult.MATH

        if isinstance(tile, RegularTile):
            self._open_problem(tile.difficulty, tile.points, tile.question, tile.answer)
            return TileLandingResult.MATH

        return TileLandingResult.NEXT

    def _land_on_obstacle(self, tile: ObstacleTile, player_id: int) -> None:
        player = self._get_player(player_id)
        if player is None:
            return

        outcome = apply_obstacle_effect(player, tile.obstacle_type, self._state.config.board_size)
        message_type = MessageType.SUCCESS if outcome.shielded else MessageType.ERROR
        self._commit(
            players=self._with_player(outcome.player),
            message=GameMessage(outcome.message, message_type, streak=outcome.player.streak),
        )

        self._log_event(
            EventType.OBSTACLE,
            player_id=player_id,
            details={
                "obstacle": tile.obstacle_type.value,
                "shielded": outcome.shielded,
                "position": outcome.player.position,
                "score_change": outcome.player.score - player.score,
            },
        )
        if outcome.shielded:
            self._log_event(
                EventType.ITEM_USED,
                player_id=player_id,
                details={"item": ItemType.SHIELD.value},
            )

    def _land_on_scoring_corner(self, score_change: int, message: str, player_id: int) -> None:
        player = self._get_player(player_id)
        if player is None:
            return

        applies = self._state.config.negative_points_enabled or score_change > 0
        updated = apply_score_change(player, score_change) if applies else player
        if not applies:
            message = TILE_SCORING[SpecialTilePosition.PENALTY].message_no_deduct

        message_type = MessageType.SUCCESS if score_change > 0 else MessageType.ERROR
        self._commit(
            players=self._with_player(updated),
            banner_message=BannerMessage(message, message_type),
        )

    # ===== MATH PROBLEMS =====

    def _open_problem(
        self,
        difficulty: Difficulty,
        points: int,
        question: Optional[str] = None,
        answer: Optional[float] = None,
        **extra: Any,
    ) -> None:
        state = self._state
        changes: Dict[str, Any] = dict(extra)

        if question is None or answer is None:
            draw = get_next_problem(difficulty, state.imported_problems, state.problem_pool, self.rng)
            question, answer = draw.problem.question, draw.problem.answer
            changes["problem_pool"] = draw.pool_state

        changes.update(
            math_problem=MathProblem(question=question, answer=answer, points=points),
            time_left=state.config.timer_duration if state.config.timer_enabled else 0,
            is_paused=False,
        )

        # Offer an owned, idle Point Booster once per turn
        player = state.get_current_player()
        if (
            player is not None
            and state.pending_item_use is None
            and has_item(player, ItemType.POINT_MULTIPLIER)
            and get_active_item(player, ItemType.POINT_MULTIPLIER) is None
            and ItemType.POINT_MULTIPLIER not in state.declined_items
        ):
            changes["pending_item_use"] = PendingItemUse(
                ItemType.POINT_MULTIPLIER, ItemContext.MATH, player.player_id
            )
            self._log_event(
                EventType.ITEM_PROMPT,
                player_id=player.player_id,
                details={"item": ItemType.POINT_MULTIPLIER.value},
            )

        self._commit(**changes)
        self._log_event(
            EventType.MATH_PROBLEM,
            player_id=player.player_id if player else None,
            details={"question": question, "points": points, "difficulty": int(difficulty)},
        )

    def show_math_problem(
        self,
        difficulty: Difficulty,
        points: int,
        question: Optional[str] = None,
        answer: Optional[float] = None,
    ) -> None:
        """
        Present a problem to the current player.

        Without an explicit question one is drawn from the problem pool (or
        generated). Restarts the timer and unpauses.
        """
        self._open_problem(difficulty, points, question, answer)

    def _clear_math_prompt(self) -> Optional[PendingItemUse]:
        pending = self._state.pending_item_use
        if pending is not None and pending.context == ItemContext.MATH:
            return None
        return pending

    def submit_answer(self, user_answer: float) -> bool:
        """
        Score the current player's answer and close the problem.

        Returns:
            True if the answer was correct
        """
        state = self._state
        problem = state.math_problem
        if problem is None:
            self._reject("submit_answer", "no math problem is open")
            return False

        player = state.get_current_player()
        if player is None:
            return False

        result = calculate_answer_result(
            user_answer,
            problem.answer,
            problem.points,
            player.streak,
            state.config.negative_points_enabled,
        )

        boosted = result.correct and get_active_item(player, ItemType.POINT_MULTIPLIER) is not None
        if boosted:
            result = apply_point_booster(result)
            player = use_item_rule(player, ItemType.POINT_MULTIPLIER)

        updated = apply_score_change(player, result.score_change)
        updated = update_player_streak(updated, result.new_streak)
        updated = award_coins(updated, result.coin_reward)

        self._commit(
            players=self._with_player(updated),
            math_problem=None,
            pending_item_use=self._clear_math_prompt(),
            message=GameMessage(
                text=result.message,
                type=MessageType.SUCCESS if result.correct else MessageType.ERROR,
                streak=result.new_streak,
                celebrate=result.correct and should_celebrate(result.new_streak),
            ),
        )

        self._log_event(
            EventType.ANSWER,
            player_id=player.player_id,
            details={
                "question": problem.question,
                "user_answer": user_answer,
                "correct_answer": problem.answer,
                "correct": result.correct,
                "score_change": result.score_change,
                "coins": result.coin_reward,
                "streak": result.new_streak,
                "boosted": boosted,
            },
        )
        return result.correct

    def submit_answer_timeout(self) -> None:
        """Score an unanswered problem whose time ran out."""
        state = self._state
        problem = state.math_problem
        if problem is None:
            self._reject("submit_answer_timeout", "no math problem is open")
            return

        player = state.get_current_player()
        if player is None:
            return

        result = calculate_timeout_result(
            problem.answer, problem.points, state.config.negative_points_enabled
        )
        updated = update_player_streak(apply_score_change(player, result.score_change), 0)

        self._commit(
            players=self._with_player(updated),
            math_problem=None,
            pending_item_use=self._clear_math_prompt(),
            message=GameMessage(result.message, MessageType.ERROR, streak=0),
        )
        self._log_event(
            EventType.TIMEOUT,
            player_id=player.player_id,
            details={"question": problem.question, "score_change": result.score_change},
        )

    def toggle_pause(self) -> None:
        self._commit(is_paused=not self._state.is_paused)

    def set_time_left(self, time_left: int) -> None:
        self._commit(time_left=time_left)

    # ===== TURN MANAGEMENT =====

    def next_turn(self) -> None:
        """
        Advance to the next player.

        Past the last round the screen switches to GameOver and nothing
        else changes.
        """
        state = self._state
        if state.screen != GameScreen.PLAYING or not state.players:
            self._reject("next_turn", "game is not running")
            return

        result = next_turn_rule(
            state.current_player,
            state.round,
            state.moves_in_round,
            len(state.players),
            state.config.max_rounds,
        )

        if result.should_end_game:
            self._commit(screen=GameScreen.GAME_OVER)
            winner = max(state.players, key=lambda p: p.score)
            self._log_event(
                EventType.GAME_END,
                player_id=winner.player_id,
                details={
                    "rounds": state.config.max_rounds,
                    "final_scores": {p.player_id: p.score for p in state.players},
                },
            )
            logger.info("Game over: %s wins with %d points", winner.name, winner.score)
            return

        turn = result.new_state
        self._commit(
            current_player=turn.current_player,
            round=turn.round,
            moves_in_round=turn.moves_in_round,
            dice_value=0,
            dice_choices=(),
            message=None,
            shop_open=False,
            pending_item_use=None,
            teleporter=TeleporterState(),
            declined_items=frozenset(),
        )
        self._log_event(
            EventType.TURN_START,
            player_id=turn.current_player,
            details={"round": turn.round, "round_completed": result.round_completed},
        )

    # ===== MESSAGES =====

    def close_message(self) -> None:
        self._commit(message=None)

    def set_banner_message(self, text: str, message_type: MessageType) -> None:
        self._commit(banner_message=BannerMessage(text, message_type))

    def clear_banner_message(self) -> None:
        self._commit(banner_message=None)

    # ===== SHOP & ITEMS =====

    def open_shop(self) -> bool:
        if self._state.screen != GameScreen.PLAYING:
            self._reject("open_shop", "game is not running")
            return False
        self._commit(shop_open=True)
        self._log_event(EventType.SHOP_OPEN, player_id=self._state.current_player)
        return True

    def close_shop(self) -> None:
        if not self._state.shop_open:
            return
        self._commit(shop_open=False)
        self._log_event(EventType.SHOP_CLOSE, player_id=self._state.current_player)

    def purchase_item(self, item_type: ItemType, player_id: Optional[int] = None) -> bool:
        """
        Buy an item for the current player while the shop is open.

        Returns:
            True on success. Unaffordable items and repeat purchases of
            non-stackable items fail without changing anything.
        """
        state = self._state
        if not state.shop_open:
            self._reject("purchase_item", "shop is closed")
            return False

        player = state.get_current_player()
        if player is None or (player_id is not None and player_id != player.player_id):
            self._reject("purchase_item", f"player {player_id} is not the current player")
            return False

        updated = purchase_item_rule(player, item_type)
        if updated is player:
            self._reject("purchase_item", f"{player.name} cannot buy {item_type.value}")
            return False

        self._commit(players=self._with_player(updated))
        self._log_event(
            EventType.PURCHASE,
            player_id=player.player_id,
            details={
                "item": item_type.value,
                "price": player.coins - updated.coins,
                "coins_left": updated.coins,
            },
        )
        return True

    def award_coins(self, player_id: int, amount: int) -> bool:
        player = self._get_player(player_id)
        if player is None:
            return False
        self._commit(players=self._with_player(award_coins(player, amount)))
        return True

    def prompt_item_use(self, item_type: ItemType, context: ItemContext) -> bool:
        """Ask the current player whether to use an owned item. One prompt at a time."""
        state = self._state
        if state.pending_item_use is not None:
            self._reject("prompt_item_use", "a prompt is already open")
            return False

        player = state.get_current_player()
        if player is None or not has_item(player, item_type):
            self._reject("prompt_item_use", f"current player has no {item_type.value}")
            return False
        if item_type == ItemType.SHIELD:
            self._reject("prompt_item_use", "Shield is passive")
            return False

        self._commit(pending_item_use=PendingItemUse(item_type, context, player.player_id))
        self._log_event(
            EventType.ITEM_PROMPT,
            player_id=player.player_id,
            details={"item": item_type.value, "context": context.value},
        )
        return True

    def decline_item_use(self) -> bool:
        """
        Close the open prompt without using the item.

        The item is not offered again this turn. Declining Lucky Dice drops
        the candidate rolls so the next roll_dice rolls normally.
        """
        pending = self._state.pending_item_use
        if pending is None:
            self._reject("decline_item_use", "no prompt is open")
            return False

        self._commit(
            pending_item_use=None,
            dice_choices=(),
            declined_items=self._state.declined_items | {pending.item_type},
        )
        self._log_event(
            EventType.ITEM_DECLINED,
            player_id=pending.player_id,
            details={"item": pending.item_type.value, "context": pending.context.value},
        )
        return True

    def use_item(self, item_type: ItemType) -> bool:
        """
        Use an item the current player holds.

        Point Booster is activated and spent on later correct answers.
        Teleporter starts tile selection. Lucky Dice rolls its two
        candidates. Shield is passive and cannot be used directly.
        """
        state = self._state
        player = state.get_current_player()
        if state.screen != GameScreen.PLAYING or player is None:
            self._reject("use_item", "game is not running")
            return False
        if not has_item(player, item_type):
            self._reject("use_item", f"{player.name} has no {item_type.value}")
            return False

        if item_type == ItemType.POINT_MULTIPLIER:
            return self._activate_booster(player)
        if item_type == ItemType.TELEPORT:
            return self.activate_teleporter()
        if item_type == ItemType.EXTRA_DICE_ROLL:
            if state.dice_choices:
                self._reject("use_item", "Lucky Dice candidates are already rolled")
                return False
            pending = state.pending_item_use
            accepting = (
                pending is not None
                and pending.item_type == ItemType.EXTRA_DICE_ROLL
                and pending.player_id == player.player_id
            )
            reason = self._roll_guard(accepting_prompt=accepting)
            if reason:
                self._reject("use_item", reason)
                return False
            self._commit(**self._lucky_dice_changes(player))
            return True

        self._reject("use_item", f"{item_type.value} is passive")
        return False

    def _activate_booster(self, player: PlayerState) -> bool:
        if get_active_item(player, ItemType.POINT_MULTIPLIER) is not None:
            self._reject("use_item", "Point Booster is already active")
            return False

        updated = activate_item(player, ItemType.POINT_MULTIPLIER)
        self._commit(
            players=self._with_player(updated),
            pending_item_use=self._clear_math_prompt(),
        )
        self._log_event(
            EventType.ITEM_USED,
            player_id=player.player_id,
            details={"item": ItemType.POINT_MULTIPLIER.value, "activated": True},
        )
        return True

    # ===== TELEPORTER =====

    def activate_teleporter(self) -> bool:
        """Enter tile selection for the current player's Teleporter."""
        state = self._state
        player = state.get_current_player()
        if player is None or not has_item(player, ItemType.TELEPORT):
            self._reject("activate_teleporter", "current player has no Teleporter")
            return False
        if state.math_problem is not None or state.moving_player is not None:
            self._reject("activate_teleporter", "a move or problem is in progress")
            return False
        if state.teleporter.active:
            return False

        pending = state.pending_item_use
        if pending is not None and pending.context == ItemContext.TELEPORT:
            pending = None
        self._commit(teleporter=TeleporterState(active=True), pending_item_use=pending)
        return True

    def select_teleport_tile(self, tile_index: int) -> bool:
        """Stage a destination. The player does not move yet."""
        state = self._state
        if not state.teleporter.active:
            self._reject("select_teleport_tile", "teleporter is not active")
            return False

        tile = get_tile_at(state.tiles, tile_index)
        player = state.get_current_player()
        if tile is None or player is None:
            return False
        if isinstance(tile, ObstacleTile) or tile_index == player.position:
            self._reject("select_teleport_tile", f"tile {tile_index} cannot be a destination")
            return False

        self._commit(teleporter=TeleporterState(active=True, selected_tile=tile_index))
        return True

    def confirm_teleport(self) -> bool:
        """
        Move to the staged tile and spend the Teleporter.

        No pass-START bonus is paid and the destination is not resolved;
        the caller may follow up with handle_tile_landing.
        """
        state = self._state
        target = state.teleporter.selected_tile
        if not state.teleporter.active or target is None:
            self._reject("confirm_teleport", "no tile selected")
            return False

        player = state.get_current_player()
        if player is None or not has_item(player, ItemType.TELEPORT):
            return False

        updated = use_item_rule(replace(player, position=target), ItemType.TELEPORT)
        self._commit(players=self._with_player(updated), teleporter=TeleporterState())
        self._log_event(
            EventType.TELEPORT,
            player_id=player.player_id,
            details={"from": player.position, "to": target},
        )
        return True

    def cancel_teleport(self) -> bool:
        if not self._state.teleporter.active:
            return False
        self._commit(teleporter=TeleporterState())
        return True
