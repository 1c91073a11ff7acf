"""
Boundary layer data model(s).

The Service stores and retrieves sessions through the repository. A session is the long-lived
context around the (immutable) game state: who plays which side and whether the computer answers.
"""

from dataclasses import dataclass

from src.core.shared_types import Color
from src.rules.state import GameState


@dataclass
class GameSession:
    """One live game. `state` is replaced (never mutated) after every accepted move."""

    state: GameState
    human_color: Color = Color.WHITE
    opponent_enabled: bool = True

    @property
    def opponent_color(self) -> Color:
        return self.human_color.opponent

    def is_opponent_turn(self) -> bool:
        return (
            self.opponent_enabled
            and not self.state.is_over
            and self.state.pending_promotion is None
            and self.state.turn == self.opponent_color
        )
