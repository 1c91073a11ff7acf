"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.core.config import Settings
from src.rules.game import apply_move, find_move
from src.rules.pieces import FEN_TO_PIECE
from src.rules.square import Square
from src.rules.state import GameState

PlayFn = Callable[..., GameState]


@pytest.fixture
def play() -> PlayFn:
    """Call the inner function with a state and any number of UCI moves ("e2e4", "a7a8q") to play them in order."""

    def _play(state: GameState, *uci_moves: str) -> GameState:
        for uci in uci_moves:
            move = find_move(
                state, Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4])
            )
            assert move is not None, f"{uci} is not a legal move in {state.position_key}"
            promotion = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
            state = apply_move(state, move, promotion).state
        return state

    return _play


@pytest.fixture
def settings_no_opponent() -> Settings:
    """Two humans on one session."""
    return Settings(opponent_enabled=False, opponent_seed=7)


@pytest.fixture
def settings_with_opponent() -> Settings:
    return Settings(opponent_enabled=True, opponent_seed=7)
