"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"
    RESIGNED = "resigned"


class DrawReason(StrEnum):
    FIFTY_MOVE = "fifty-move"
    THREEFOLD_REPETITION = "threefold-repetition"
    INSUFFICIENT_MATERIAL = "insufficient-material"


class MoveEffect(StrEnum):
    """Side effect of an applied move, for sound / captured-piece displays."""

    MOVE = "move"
    CAPTURE = "capture"
    CASTLE = "castle"
    CHECKMATE = "checkmate"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
