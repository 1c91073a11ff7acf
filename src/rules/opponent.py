"""
A very simple computer opponent (and the hint for the human player).

No search: a shallow preference order over the legal moves, ties broken at random.
"""

import random
from typing import Optional

from src.core.exceptions import NoLegalMovesError
from src.core.shared_types import Color, PieceType
from src.rules.attacks import is_in_check
from src.rules.board import Board
from src.rules.legality import all_legal_moves, simulate_move
from src.rules.moves import Move, MoveContext

CAPTURE_BONUS = 10
CHECK_BONUS = 5


def is_capture(move: Move, board: Board) -> bool:
    return move.is_en_passant or board.piece(move.to_square) is not None


def is_king_move(move: Move, board: Board) -> bool:
    piece = board.piece(move.from_square)
    return piece is not None and piece.type == PieceType.KING


def select_move(
    board: Board,
    context: MoveContext,
    color: Color,
    rng: Optional[random.Random] = None,
) -> Move:
    """
    Pick the opponent's move
    ----

    When in check:
    1. move the king, if it can go anywhere
    2. otherwise take whatever stands on a destination square (hopefully the attacker)
    3. otherwise any legal move. Every legal move gets the king out of check, so this one blocks.

    When not in check: any legal move.

    Raises NoLegalMovesError when there is nothing to pick: the caller should have declared checkmate or stalemate.
    """
    rng = rng or random.Random()
    moves = all_legal_moves(board, context, color)
    if not moves:
        raise NoLegalMovesError(f"{color} has no legal moves.")

    if is_in_check(board, color):
        king_moves = [move for move in moves if is_king_move(move, board)]
        if king_moves:
            return rng.choice(king_moves)
        captures = [move for move in moves if board.piece(move.to_square) is not None]
        if captures:
            return rng.choice(captures)
    return rng.choice(moves)


def score_move(move: Move, board: Board) -> int:
    """Captures first (worth more for more valuable pieces), then moves that give check."""
    score = 0
    if is_capture(move, board):
        captured = board.piece(move.to_square)
        score += CAPTURE_BONUS + (captured.points if captured else 1)

    mover = board.piece(move.from_square)
    assert mover is not None
    if is_in_check(simulate_move(board, move), mover.color.opponent):
        score += CHECK_BONUS
    return score


def suggest_move(
    board: Board,
    context: MoveContext,
    color: Color,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Hint: one of the best scored legal moves, or None if there is no legal move."""
    rng = rng or random.Random()
    moves = all_legal_moves(board, context, color)
    if not moves:
        return None

    scores = [score_move(move, board) for move in moves]
    best = max(scores)
    return rng.choice([move for move, score in zip(moves, scores) if score == best])
