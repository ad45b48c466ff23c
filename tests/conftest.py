"""Shared test fixtures for Math Quest tests."""

from dataclasses import replace

import pytest

from mathquest.config import GameConfig
from mathquest.engine import GameEngine
from mathquest.importer import ImportedProblem, ImportedProblemsData
from mathquest.items import ITEM_CATALOG, PlayerItem


def _stage(engine, **changes):
    """Put the engine into a specific state without going through commands."""
    engine._state = replace(engine.state, **changes)
    return engine.state


def _stage_player(engine, player_id, **changes):
    """Replace fields on one player in the engine's state."""
    players = tuple(
        replace(p, **changes) if p.player_id == player_id else p for p in engine.state.players
    )
    return _stage(engine, players=players)


def _give_item(engine, player_id, item_type, uses=None, active=False):
    """Put an item straight into a player's inventory."""
    player = engine.state.players[player_id]
    uses = uses if uses is not None else ITEM_CATALOG[item_type].max_uses
    inventory = player.inventory + (PlayerItem(item_type, uses, active),)
    return _stage_player(engine, player_id, inventory=inventory)


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def engine(game_config):
    """Engine on the setup screen."""
    return GameEngine(game_config)


@pytest.fixture
def playing_engine(engine):
    """Engine with a two-player game in progress."""
    engine.start_game(2)
    return engine


@pytest.fixture
def four_player_engine(engine):
    engine.start_game(4)
    return engine


@pytest.fixture
def three_problems():
    """Small imported problem set."""
    return ImportedProblemsData.from_problems(
        [
            ImportedProblem(id=1, question="2 + 2", answer="4"),
            ImportedProblem(id=2, question="10 - 3", answer="7"),
            ImportedProblem(id=3, question="1 000 + 55", answer="1 055"),
        ]
    )


@pytest.fixture
def stage():
    return _stage


@pytest.fixture
def stage_player():
    return _stage_player


@pytest.fixture
def give_item():
    return _give_item
