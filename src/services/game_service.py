"""Orchestration of communication from the API models to the rules engine and the session repository (and the reverse direction)."""

import logging
import random
from dataclasses import replace
from typing import Optional
from uuid import UUID

from src.api.models import (
    GameRequest,
    GameResponse,
    HintResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    NewGameRequest,
    PromotionRequest,
    ResignRequest,
)
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    ChessError,
    GameStateError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.models import GameSession
from src.core.shared_types import Color, MoveEffect
from src.db.repository import GameRepository
from src.rules.game import (
    apply_move,
    complete_promotion,
    find_move,
    legal_moves_from,
    new_game,
    resign,
)
from src.rules.moves import Move
from src.rules.opponent import select_move, suggest_move
from src.rules.square import Square

logger = logging.getLogger(__name__)


class GameService:
    """
    Orchestration of layers for a chess game against the computer (or between two humans on one session).

    Rules violations never escape this class: the request is rejected, the stored game stays as it was,
    and the response carries `accepted=False` plus the reason.
    """

    def __init__(
        self,
        repository: GameRepository,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.opponent_seed)

    # -- API logic ---
    def create_new_game(self, request: NewGameRequest) -> GameResponse:
        """Start a game from the standard position. If the computer plays White, it moves right away."""
        session = GameSession(
            state=new_game(),
            human_color=request.human_color or self.settings.human_color,
            opponent_enabled=(
                request.opponent_enabled
                if request.opponent_enabled is not None
                else self.settings.opponent_enabled
            ),
        )
        session, effects = self._play_opponent_if_due(session)
        stored_session, game_id = self.repo.create_game(session)
        logger.info("Created game %s (human plays %s)", game_id, session.human_color)
        return self._create_game_response(game_id, stored_session, effects)

    def get_game_state(self, request: GameRequest) -> GameResponse:
        session = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, session)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """
        The human selected a square: which destinations can be highlighted?

        Nothing for the computer's pieces, nor for an empty square.
        """
        session = self._fetch_game(request.game_id)
        destinations: list[str] = []
        if not session.is_opponent_turn():
            square = Square.from_algebraic(request.square)
            destinations = sorted(
                move.to_square.to_algebraic()
                for move in legal_moves_from(session.state, square)
            )
        return LegalMovesResponse(
            game_id=request.game_id, square=request.square, destinations=destinations
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. On success the computer answers before this returns."""
        session = self._fetch_game(request.game_id)
        from_square = Square.from_algebraic(request.from_square)
        to_square = Square.from_algebraic(request.to_square)

        try:
            self._assert_human_turn(session)
            # not found: let the move applier reject it (and report king captures)
            move = find_move(session.state, from_square, to_square) or Move(
                from_square, to_square
            )
            outcome = apply_move(session.state, move, request.promote_to)
        except ChessError as error:
            return self._reject(request.game_id, session, error)

        session = replace(session, state=outcome.state)
        effects = [outcome.effect] if outcome.effect else []
        return self._store_and_respond(request.game_id, session, effects)

    def promote(self, request: PromotionRequest) -> GameResponse:
        """The human picked the piece for the pawn waiting on the last rank."""
        session = self._fetch_game(request.game_id)
        try:
            outcome = complete_promotion(session.state, request.piece)
        except ChessError as error:
            return self._reject(request.game_id, session, error)

        session = replace(session, state=outcome.state)
        effects = [outcome.effect] if outcome.effect else []
        return self._store_and_respond(request.game_id, session, effects)

    def resign(self, request: ResignRequest) -> GameResponse:
        session = self._fetch_game(request.game_id)
        color = request.color or session.human_color
        try:
            state = resign(session.state, color)
        except ChessError as error:
            return self._reject(request.game_id, session, error)

        session = replace(session, state=state)
        self.repo.update_game(request.game_id, session)
        return self._create_game_response(request.game_id, session)

    def reset_game(self, request: GameRequest) -> GameResponse:
        """Same players, fresh board. History and captured pieces are cleared."""
        session = self._fetch_game(request.game_id)
        session = replace(session, state=new_game())
        logger.info("Reset game %s", request.game_id)
        session, effects = self._play_opponent_if_due(session)
        self.repo.update_game(request.game_id, session)
        return self._create_game_response(request.game_id, session, effects)

    def hint(self, request: GameRequest) -> HintResponse:
        """Suggest a move for the side to move. None when the game is over or waiting for a promotion choice."""
        session = self._fetch_game(request.game_id)
        state = session.state
        move = None
        if not state.is_over and state.pending_promotion is None:
            move = suggest_move(state.board, state.context, state.turn, self.rng)
        return HintResponse(
            game_id=request.game_id, move=move.to_uci() if move else None
        )

    def delete_game(self, request: GameRequest) -> None:
        """Handle a request to delete a Game record."""
        self.repo.delete_game(request.game_id)

    # -- Internal helpers --
    def _fetch_game(self, game_id: UUID) -> GameSession:
        """Attempt to find the game in the repository and raise error if it fails."""
        session = self.repo.get_game(game_id)
        if session is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return session

    def _assert_human_turn(self, session: GameSession) -> None:
        if session.state.is_over:
            raise GameStateError(f"Game is not in progress. status: {session.state.status}")
        if session.opponent_enabled and session.state.turn != session.human_color:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {session.opponent_color} to make a move first."
            )

    def _play_opponent_if_due(
        self, session: GameSession
    ) -> tuple[GameSession, list[MoveEffect]]:
        """The computer's reply runs to completion before the human may act again."""
        if not session.is_opponent_turn():
            return session, []

        state = session.state
        move = select_move(state.board, state.context, state.turn, self.rng)
        # the computer never leaves a promotion pending
        promotion = self.settings.opponent_promotion if move.is_promotion else None
        outcome = apply_move(state, move, promotion)
        logger.debug("Computer played %s", move.to_uci(promotion))
        assert outcome.effect is not None
        return replace(session, state=outcome.state), [outcome.effect]

    def _store_and_respond(
        self, game_id: UUID, session: GameSession, effects: list[MoveEffect]
    ) -> GameResponse:
        session, opponent_effects = self._play_opponent_if_due(session)
        self.repo.update_game(game_id, session)
        return self._create_game_response(game_id, session, effects + opponent_effects)

    def _reject(
        self, game_id: UUID, session: GameSession, error: ChessError
    ) -> GameResponse:
        """Nothing gets stored: the response shows the game exactly as it was."""
        logger.warning("Rejected request for game %s: %s", game_id, error)
        return self._create_game_response(
            game_id, session, accepted=False, error=str(error)
        )

    def _create_game_response(
        self,
        game_id: UUID,
        session: GameSession,
        effects: Optional[list[MoveEffect]] = None,
        accepted: bool = True,
        error: Optional[str] = None,
    ) -> GameResponse:
        """Convert the session's current state into a GameResponse."""
        state = session.state
        pending = state.pending_promotion
        return GameResponse(
            game_id=game_id,
            board={
                square.to_algebraic(): piece.to_fen()
                for square, piece in state.board.pieces()
            },
            turn=state.turn,
            status=state.status,
            termination=state.termination,
            winner=state.winner,
            in_check={color: state.in_check(color) for color in Color},
            captured={
                color: [piece.to_fen() for piece in state.captured_by(color)]
                for color in Color
            },
            material=state.board.count_material(),
            pending_promotion=(
                pending.move.to_square.to_algebraic() if pending else None
            ),
            moves=list(state.moves),
            position_key=state.position_key,
            effects=effects or [],
            accepted=accepted,
            error=error,
        )
