"""
Attacking rules: is a square under attack by a given color?

Computed directly from the square outward (five independent checks), without generating move lists.
Used for check detection and for the castling rule that the king may not cross attacked squares.
"""

from src.core.shared_types import Color, PieceType
from src.rules.board import Board
from src.rules.square import Square, Vector

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), Black moves DOWN."""
    return -1 if color == Color.WHITE else 1


def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: frozenset[PieceType],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Walk away from the square along each direction until we hit a piece or the edge of the board.
    Only the first occupied square along a ray can attack: anything behind it is blocked.

    ---
    Returns TRUE if that first piece is of the given color and one of the given types.
    """
    for direction in directions:
        target_square = square.offset(direction)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if (piece_found.color == by_color) and (
                    piece_found.type in by_piece_types
                ):
                    return True
                break
            target_square = target_square.offset(direction)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that attack a single step away.
    """
    for delta in deltas:
        target_square = square.offset(delta)
        if not target_square.is_within_bounds():
            continue
        piece_found = board.piece(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square, look one row
    DOWN the board (a white pawn moves UP). Hence the vectors are exactly opposite to the pawn's own capture direction.
    """
    behind = -pawn_direction(by_color)
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(behind, 1), (behind, -1)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


def is_attacked_on_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square,
        by_color,
        frozenset({PieceType.BISHOP, PieceType.QUEEN}),
        board,
        DIAGONALS,
    )


def is_attacked_on_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square,
        by_color,
        frozenset({PieceType.ROOK, PieceType.QUEEN}),
        board,
        STRAIGHTS,
    )


ATTACK_CHECKS = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_by_king,
    is_attacked_on_diagonal,
    is_attacked_on_straight,
)


def is_attacked(square: Square, board: Board, by_color: Color) -> bool:
    """Is any piece of `by_color` able to capture on `square`?"""
    return any(check(square, by_color, board) for check in ATTACK_CHECKS)


def is_any_under_attack(squares: list[Square], board: Board, by_color: Color) -> bool:
    return any(is_attacked(square, board, by_color) for square in squares)


def is_in_check(board: Board, color: Color) -> bool:
    """Locate the king of `color` and ask if the opponent attacks it. No king, no check."""
    king_square = board.king_square(color)
    if king_square is None:
        return False
    return is_attacked(king_square, board, color.opponent)
