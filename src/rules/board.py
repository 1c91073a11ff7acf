"""The Board is a snapshot of the `position` (in chess: the configuration of pieces on the board).

Boards are never changed in place. Every update returns a new Board, so any component can hold on to
a Board without having it change underneath it.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Optional, Self

from src.core.shared_types import Color, PieceType
from src.rules.pieces import Piece
from src.rules.square import ALL_SQUARES, BOARD_SIZE, Square

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_POSITION = "/".join(["8"] * BOARD_SIZE)

Cells = tuple[Optional[Piece], ...]


def _index(square: Square) -> int:
    return square.row * BOARD_SIZE + square.col


@dataclass(frozen=True)
class Board:
    cells: Cells = (None,) * (BOARD_SIZE * BOARD_SIZE)

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board from the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with a rook on a8, a knight on b8, etc.
        * pawns cover the 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.
        """
        cells: list[Optional[Piece]] = []
        for fen_one_rank in fen_str.split("/"):
            for character in fen_one_rank:
                if character.isalpha():
                    cells.append(Piece.from_fen(character))
                else:
                    # A number denotes the amount of empty squares after each other
                    cells.extend([None] * int(character))
        return cls(tuple(cells))

    @classmethod
    def from_pieces(cls, pieces: Mapping[str, str]) -> Self:
        """Convenience constructor: {"e1": "K", "e8": "k"}"""
        board = cls.empty()
        for square_name, symbol in pieces.items():
            board = board.place_piece(
                Piece.from_fen(symbol), Square.from_algebraic(square_name)
            )
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_SIZE))

    def _row_to_fen(self, row: int) -> str:
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_SIZE):
            piece = self.piece(Square(row, col))
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.cells[_index(square)]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def pieces(self) -> Iterator[tuple[Square, Piece]]:
        for square in ALL_SQUARES:
            piece = self.piece(square)
            if piece is not None:
                yield square, piece

    def locate_color(self, color: Color) -> list[Square]:
        return [square for square, piece in self.pieces() if piece.color == color]

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        return [
            square
            for square, piece in self.pieces()
            if piece.type == piece_type and piece.color == color
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    # --- UPDATES (return a new Board) ---
    def place_piece(self, piece: Piece, square: Square) -> "Board":
        cells = list(self.cells)
        cells[_index(square)] = piece
        return Board(tuple(cells))

    def remove_piece(self, square: Square) -> "Board":
        cells = list(self.cells)
        cells[_index(square)] = None
        return Board(tuple(cells))

    def move_piece(self, from_square: Square, to_square: Square) -> "Board":
        """Relocate whatever stands on from_square. Anything on to_square is replaced."""
        cells = list(self.cells)
        cells[_index(to_square)] = cells[_index(from_square)]
        cells[_index(from_square)] = None
        return Board(tuple(cells))

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {
            color: sum(
                piece.points for _, piece in self.pieces() if piece.color == color
            )
            for color in Color
        }
