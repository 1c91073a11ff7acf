"""Protocol repository (sessions live in memory, but the Service only relies on this interface)"""

from typing import Protocol
from uuid import UUID

from src.core.models import GameSession


class GameRepository(Protocol):
    """Session storage orchestration"""

    def get_game(self, game_id: UUID) -> GameSession | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameSession) -> tuple[GameSession, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameSession) -> GameSession | None:
        """Replace an existing record."""
        ...

    def delete_game(self, game_id: UUID) -> GameSession | None:
        """Remove a game's record."""
        ...
