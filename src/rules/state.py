"""
Snapshot of a game in progress (or finished).

One GameState per accepted move. States are never changed in place: the move applier returns a new one.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.shared_types import Color, DrawReason, Status
from src.rules.attacks import is_in_check
from src.rules.board import Board
from src.rules.castling import CastlingRights
from src.rules.classifier import position_key
from src.rules.moves import Move, MoveContext
from src.rules.pieces import Piece
from src.rules.square import Square


@dataclass(frozen=True)
class PendingPromotion:
    """A pawn has reached the last rank. The move completes once a piece type is chosen."""

    move: Move
    pawn: Piece
    captured: Optional[Piece] = None


@dataclass(frozen=True)
class GameState:
    """
    Everything the rules need to know about a game
    ----

    * board, side to move, castling rights and en passant square decide the legal moves.
    * the half move clock counts the moves made since the last pawn move or capture (fifty-move rule).
    * history holds the position key after every completed move (threefold repetition).
    * moves holds every completed move in UCI notation.
    * captured pieces are listed per capturing side, in the order they were taken.
    """

    board: Board
    turn: Color = Color.WHITE
    castling_rights: CastlingRights = CastlingRights()
    en_passant: Optional[Square] = None
    half_move_clock: int = 0
    full_move_number: int = 1
    history: tuple[str, ...] = ()
    moves: tuple[str, ...] = ()
    captured_by_white: tuple[Piece, ...] = ()
    captured_by_black: tuple[Piece, ...] = ()
    pending_promotion: Optional[PendingPromotion] = None
    status: Status = Status.IN_PROGRESS
    draw_reason: Optional[DrawReason] = None
    winner: Optional[Color] = None

    @property
    def context(self) -> MoveContext:
        return MoveContext(self.castling_rights, self.en_passant)

    @property
    def is_over(self) -> bool:
        return self.status != Status.IN_PROGRESS

    @property
    def position_key(self) -> str:
        return position_key(
            self.board, self.turn, self.castling_rights, self.en_passant
        )

    @property
    def termination(self) -> Optional[str]:
        """Why the game ended: checkmate, stalemate, resignation or draw:<reason>. None while in progress."""
        if self.status == Status.IN_PROGRESS:
            return None
        if self.status == Status.DRAW:
            return f"draw:{self.draw_reason}"
        if self.status == Status.RESIGNED:
            return "resignation"
        return str(self.status)

    def in_check(self, color: Color) -> bool:
        return is_in_check(self.board, color)

    def captured_by(self, color: Color) -> tuple[Piece, ...]:
        return self.captured_by_white if color == Color.WHITE else self.captured_by_black
