"""
The single definition of a legal move.

A candidate move is legal if it does not capture a king and does not leave (or put) the mover's king in check.
Checkmate/stalemate detection, the human's move selection and the opponent all go through here.
"""

from src.core.shared_types import Color, PieceType
from src.rules.attacks import is_in_check
from src.rules.board import Board
from src.rules.castling import CASTLING_RULES
from src.rules.moves import (
    Move,
    MoveContext,
    en_passant_capture_square,
    pseudo_legal_moves,
)
from src.rules.square import Square


def simulate_move(board: Board, move: Move) -> Board:
    """
    Board after the move, for king safety checks only.

    Takes the pawn captured en passant off the board and moves the rook along when castling.
    Promotion is ignored: the promoted piece cannot change whether the own king is attacked.
    """
    if move.is_en_passant:
        board = board.remove_piece(en_passant_capture_square(move))
    if move.castling is not None:
        rook = CASTLING_RULES[move.castling]
        board = board.move_piece(rook.rook_from, rook.rook_to)
    return board.move_piece(move.from_square, move.to_square)


def is_king_capture(move: Move, board: Board) -> bool:
    target = board.piece(move.to_square)
    return target is not None and target.type == PieceType.KING


def is_putting_yourself_in_check(move: Move, board: Board) -> bool:
    """Return True if the move leaves the mover's king under attack"""
    mover = board.piece(move.from_square)
    assert mover is not None
    return is_in_check(simulate_move(board, move), mover.color)


def is_legal(move: Move, board: Board) -> bool:
    # King capture is never legal. The game ends by checkmate before it could happen.
    if is_king_capture(move, board):
        return False
    return not is_putting_yourself_in_check(move, board)


def legal_moves(square: Square, board: Board, context: MoveContext) -> set[Move]:
    """Legal moves of whatever piece stands on `square`."""
    return {
        move
        for move in pseudo_legal_moves(square, board, context)
        if is_legal(move, board)
    }


def all_legal_moves(board: Board, context: MoveContext, color: Color) -> list[Move]:
    """
    Union of the legal moves of every piece of `color`.

    Returned as a list in board order (a8 to h1), so a seeded random choice among them is reproducible.
    """
    moves: list[Move] = []
    for square in board.locate_color(color):
        moves.extend(
            sorted(
                legal_moves(square, board, context),
                key=lambda move: (move.to_square, move.castling is not None),
            )
        )
    return moves


def has_legal_move(board: Board, context: MoveContext, color: Color) -> bool:
    return any(legal_moves(square, board, context) for square in board.locate_color(color))
