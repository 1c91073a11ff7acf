"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Self

from src.core.shared_types import Color, PieceType
from src.rules.board import Board
from src.rules.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


def squares_between_on_row(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares strictly in between the two squares specified that are on the same row

    Needed for checking if you can still castle (the Board will check which of those are empty etc.)
    """
    if from_square.row != to_square.row:
        raise ValueError(
            f"squares_between_on_row requires both squares to lie on the same row. \n from: {from_square}\n to:{to_square}"
        )
    step = 1 if to_square.col > from_square.col else -1
    return [
        Square(from_square.row, col)
        for col in range(from_square.col + step, to_square.col, step)
    ]


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def path(self) -> list[Square]:
        """All squares between king and rook. These must be empty."""
        return squares_between_on_row(self.king_from, self.rook_from)

    @property
    def king_path(self) -> list[Square]:
        """Squares the king crosses or lands on. These may not be attacked.

        NOTE: On the queen side the b-file square only has to be empty, the king never crosses it.
        """
        return squares_between_on_row(self.king_from, self.king_to) + [self.king_to]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


@dataclass(frozen=True)
class CastlingRights:
    """
    Rights only ever get revoked during the game, never restored.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> Self:
        return cls(False, False, False, False)

    @classmethod
    def from_board(cls, board: Board) -> Self:
        """Grant a right only when king and rook are still on their home squares."""
        rights: dict[CastlingDirection, bool] = {}
        for direction, squares in CASTLING_RULES.items():
            color = direction.color
            king = board.piece(squares.king_from)
            rook = board.piece(squares.rook_from)
            rights[direction] = (
                king is not None
                and king.type == PieceType.KING
                and king.color == color
                and rook is not None
                and rook.type == PieceType.ROOK
                and rook.color == color
            )
        return cls(*(rights[direction] for direction in CASTLING_ORDER))

    def has(self, direction: CastlingDirection) -> bool:
        return getattr(self, _FIELD_NAMES[direction])

    def revoke(self, *directions: CastlingDirection) -> "CastlingRights":
        return replace(self, **{_FIELD_NAMES[direction]: False for direction in directions})

    def revoke_all(self, color: Color) -> "CastlingRights":
        return self.revoke(*castling_directions(color))

    def to_fen(self) -> str:
        """create the part of the FEN string that encodes castling rights"""
        castling_chars = "".join(
            direction.value for direction in CASTLING_ORDER if self.has(direction)
        )
        return castling_chars or "-"


_FIELD_NAMES: dict[CastlingDirection, str] = {
    CastlingDirection.WHITE_KING_SIDE: "white_kingside",
    CastlingDirection.WHITE_QUEEN_SIDE: "white_queenside",
    CastlingDirection.BLACK_KING_SIDE: "black_kingside",
    CastlingDirection.BLACK_QUEEN_SIDE: "black_queenside",
}
