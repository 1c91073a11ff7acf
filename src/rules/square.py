"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

BOARD_SIZE = 8

Vector = tuple[int, int]


@dataclass(frozen=True, order=True)
class Square:
    """
    (row, col) coordinates.

    Row 0 is Black's back rank (the 8th rank), row 7 is White's back rank (the 1st rank).
    Col 0 is the a-file.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' is (0, 0), 'h1' is (7, 7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_SIZE - int(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_SIZE - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def offset(self, delta: Vector) -> Square:
        dr, dc = delta
        return Square(self.row + dr, self.col + dc)

    @property
    def is_light(self) -> bool:
        """a8 (0, 0) is a light square, so light squares have an even coordinate sum."""
        return (self.row + self.col) % 2 == 0


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)
)


def is_algebraic(value: str) -> bool:
    """'a1' through 'h8'"""
    return (
        len(value) == 2
        and "a" <= value[0] <= chr(ord("a") + BOARD_SIZE - 1)
        and value[1] in "12345678"
    )
