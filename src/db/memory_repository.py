"""Implementation of (Game)Repository keeping the sessions in a dictionary"""

from uuid import UUID, uuid4

from src.core.models import GameSession


class InMemoryGameRepository:
    """
    Sessions live as long as the process.

    NOTE: Turns are processed one at a time, so there is no locking.
    """

    def __init__(self) -> None:
        self._games: dict[UUID, GameSession] = {}

    def get_game(self, game_id: UUID) -> GameSession | None:
        """Get game by ID, if record exists."""
        return self._games.get(game_id)

    def create_game(self, game: GameSession) -> tuple[GameSession, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        new_id = uuid4()
        self._games[new_id] = game
        return game, new_id

    def update_game(self, game_id: UUID, game: GameSession) -> GameSession | None:
        """Replace an existing record."""
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        return game

    def delete_game(self, game_id: UUID) -> GameSession | None:
        """Remove a game's record."""
        return self._games.pop(game_id, None)
