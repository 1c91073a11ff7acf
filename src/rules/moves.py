"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define candidate (pseudo-legal) move sets for each piece type.

Nothing generated here is guaranteed to keep the mover's own king safe. Legality is checked later (see legality.py).
"""

from dataclasses import dataclass
from typing import Callable, Optional

from src.core.shared_types import Color, PieceType
from src.rules.attacks import (
    DIAGONALS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHTS,
    is_any_under_attack,
    is_in_check,
    pawn_direction,
)
from src.rules.board import Board
from src.rules.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_directions,
)
from src.rules.pieces import PIECE_TO_FEN, Piece
from src.rules.square import BOARD_SIZE, Square, Vector


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made. Only meaningful relative to the Board it was generated from."""

    from_square: Square
    to_square: Square
    castling: Optional[CastlingDirection] = None
    is_en_passant: bool = False
    is_promotion: bool = False

    def to_uci(self, promote_to: Optional[PieceType] = None) -> str:
        """
        Universal Chess Interface notation

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        piece_char = PIECE_TO_FEN[promote_to] if promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


@dataclass(frozen=True)
class MoveContext:
    """The parts of the game state (besides the board) that decide which moves exist."""

    castling_rights: CastlingRights = CastlingRights()
    en_passant: Optional[Square] = None


def promotion_row(color: Color) -> int:
    return 0 if color == Color.WHITE else BOARD_SIZE - 1


def pawn_home_row(color: Color) -> int:
    return BOARD_SIZE - 2 if color == Color.WHITE else 1


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    We define move directions and move along them until we hit another piece or
    the edge of the board. The first occupied square is included only if it holds an opponent's piece.
    """
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for direction in directions:
        target_square = square.offset(direction)
        while target_square.is_within_bounds():
            target = board.piece(target_square)
            if target is not None:
                if target.color != mover.color:
                    moves.append(Move(square, target_square))
                break
            moves.append(Move(square, target_square))
            target_square = target_square.offset(direction)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just take a single step"""
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for delta in deltas:
        target_square = square.offset(delta)
        if not target_square.is_within_bounds():
            continue
        target = board.piece(target_square)
        if target is None or target.color != mover.color:
            moves.append(Move(square, target_square))
    return moves


def candidate_pawn_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - can move by two from its home row, if both squares in front of it are empty.
    - takes diagonally, onto an opponent's piece
    - or onto the en passant square, when an opponent's pawn just skipped over it.
    """
    pawn = board.piece(square)
    assert pawn is not None
    direction = pawn_direction(pawn.color)
    last_row = promotion_row(pawn.color)

    def _pawn_move(to_square: Square, is_en_passant: bool = False) -> Move:
        return Move(
            square,
            to_square,
            is_en_passant=is_en_passant,
            is_promotion=to_square.row == last_row,
        )

    moves: list[Move] = []
    one_step = square.offset((direction, 0))
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.append(_pawn_move(one_step))
        two_steps = one_step.offset((direction, 0))
        if square.row == pawn_home_row(pawn.color) and board.is_empty(two_steps):
            moves.append(_pawn_move(two_steps))

    for side in (-1, 1):
        target_square = square.offset((direction, side))
        if not target_square.is_within_bounds():
            continue
        target = board.piece(target_square)
        if target is not None:
            if target.color != pawn.color:
                moves.append(_pawn_move(target_square))
        elif target_square == context.en_passant and _can_take_en_passant(
            square, target_square, board
        ):
            moves.append(_pawn_move(target_square, is_en_passant=True))
    return moves


def en_passant_capture_square(move: Move) -> Square:
    """The pawn taken en passant stands beside the moving pawn: on the row it left, on the file it arrives."""
    return Square(move.from_square.row, move.to_square.col)


def _can_take_en_passant(square: Square, target_square: Square, board: Board) -> bool:
    pawn = board.piece(square)
    victim = board.piece(Square(square.row, target_square.col))
    return (
        pawn is not None
        and victim is not None
        and victim.type == PieceType.PAWN
        and victim.color != pawn.color
    )


def candidate_knight_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(
    square: Square, board: Board, context: MoveContext
) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: the king's two-square jump. The rook follows when the move is applied.
    """
    return single_step_move(square, board, KING_DELTAS) + candidate_castling_moves(
        square, board, context.castling_rights
    )


def candidate_castling_moves(
    square: Square, board: Board, castling_rights: CastlingRights
) -> list[Move]:
    """
    **you are allowed to castle if**

    * Castling rights are not yet revoked.
    * King and rook still stand on their home squares.
    * All squares between king and rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * Neither the square the king crosses nor the one it lands on is under attack.
    """
    king = board.piece(square)
    assert king is not None
    opponent_color = king.color.opponent

    moves: list[Move] = []
    for direction in castling_directions(king.color):
        if not castling_rights.has(direction):
            continue

        squares = CASTLING_RULES[direction]
        if square != squares.king_from:
            continue

        if board.piece(squares.rook_from) != Piece(PieceType.ROOK, king.color):
            continue

        if board.is_any_occupied(squares.path):
            continue

        if is_in_check(board, king.color):
            return []

        if is_any_under_attack(squares.king_path, board, opponent_color):
            continue

        moves.append(Move(squares.king_from, squares.king_to, castling=direction))
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board, MoveContext], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_legal_moves(square: Square, board: Board, context: MoveContext) -> set[Move]:
    """Candidate moves of whatever piece stands on `square`. An empty square has none."""
    piece = board.piece(square)
    if piece is None:
        return set()
    movement_rule = MOVEMENT_RULES[piece.type]
    return set(movement_rule(square, board, context))
