"""
Checks for ending the game: checkmate, stalemate and the automatic draw rules.
"""

from collections.abc import Sequence
from typing import Optional

from src.core.shared_types import Color, PieceType
from src.rules.attacks import is_in_check
from src.rules.board import Board
from src.rules.castling import CastlingRights
from src.rules.legality import has_legal_move
from src.rules.moves import MoveContext
from src.rules.pieces import MINOR_PIECES
from src.rules.square import Square

FIFTY_MOVE_HALF_MOVES = 100
REPETITIONS_FOR_DRAW = 3


def is_checkmate(board: Board, context: MoveContext, color: Color) -> bool:
    return is_in_check(board, color) and not has_legal_move(board, context, color)


def is_stalemate(board: Board, context: MoveContext, color: Color) -> bool:
    return not is_in_check(board, color) and not has_legal_move(board, context, color)


def has_insufficient_material(board: Board) -> bool:
    """
    Material that can never force a mate
    ----

    * King vs King
    * King + a single minor piece (bishop or knight) vs King
    * King + Bishop vs King + Bishop, with both bishops on squares of the same color

    Any other combination is NOT a draw by material, even if no mate can be found in practice.
    """
    pieces = [
        (square, piece)
        for square, piece in board.pieces()
        if piece.type != PieceType.KING
    ]

    if not pieces:
        return True

    if len(pieces) == 1:
        _, piece = pieces[0]
        return piece.type in MINOR_PIECES

    if len(pieces) == 2:
        (square_1, piece_1), (square_2, piece_2) = pieces
        both_bishops = piece_1.type == piece_2.type == PieceType.BISHOP
        one_each = piece_1.color != piece_2.color
        return both_bishops and one_each and square_1.is_light == square_2.is_light

    return False


def position_key(
    board: Board,
    color_to_move: Color,
    castling_rights: CastlingRights,
    en_passant: Optional[Square],
) -> str:
    """
    Canonical encoding of a position for the repetition rule.

    The first four fields of a FEN string: <piece placement> <side to move> <castling rights> <en passant square>
    ex) the starting position: rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -
    Move counters are left out: they differ between otherwise identical positions.
    """
    active_color = "w" if color_to_move == Color.WHITE else "b"
    en_passant_algebraic = en_passant.to_algebraic() if en_passant else "-"
    return f"{board.to_fen()} {active_color} {castling_rights.to_fen()} {en_passant_algebraic}"


def is_threefold_repetition(history: Sequence[str], key: str) -> bool:
    """Check if the key occurs (at least) 3 times in the history"""
    return history.count(key) >= REPETITIONS_FOR_DRAW


def is_fifty_move_draw(half_move_clock: int) -> bool:
    """50 moves by each side (100 half-moves) without a pawn move or a capture"""
    return half_move_clock >= FIFTY_MOVE_HALF_MOVES
