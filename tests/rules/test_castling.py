"""Unit tests for /src/rules/castling.py"""

import pytest

from src.core.shared_types import Color
from src.rules.board import Board
from src.rules.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_directions,
    squares_between_on_row,
)
from src.rules.square import Square


def _squares(*names: str) -> list[Square]:
    return [Square.from_algebraic(name) for name in names]


def test_squares_between_on_row() -> None:
    e1, a1, h1 = _squares("e1", "a1", "h1")
    assert squares_between_on_row(e1, h1) == _squares("f1", "g1")
    assert squares_between_on_row(e1, a1) == _squares("d1", "c1", "b1")
    assert squares_between_on_row(e1, Square.from_algebraic("f1")) == []


def test_squares_between_requires_same_row() -> None:
    with pytest.raises(ValueError):
        squares_between_on_row(Square.from_algebraic("e1"), Square.from_algebraic("e8"))


@pytest.mark.parametrize(
    "direction, path, king_path",
    [
        (CastlingDirection.WHITE_KING_SIDE, ["f1", "g1"], ["f1", "g1"]),
        (CastlingDirection.WHITE_QUEEN_SIDE, ["d1", "c1", "b1"], ["d1", "c1"]),
        (CastlingDirection.BLACK_KING_SIDE, ["f8", "g8"], ["f8", "g8"]),
        (CastlingDirection.BLACK_QUEEN_SIDE, ["d8", "c8", "b8"], ["d8", "c8"]),
    ],
)
def test_castling_paths(direction: CastlingDirection, path: list[str], king_path: list[str]) -> None:
    """The b-file square has to be empty on the queen side, but the king never crosses it."""
    squares = CASTLING_RULES[direction]
    assert squares.path == _squares(*path)
    assert squares.king_path == _squares(*king_path)


def test_castling_directions_per_color() -> None:
    assert castling_directions(Color.WHITE) == [
        CastlingDirection.WHITE_KING_SIDE,
        CastlingDirection.WHITE_QUEEN_SIDE,
    ]
    assert all(direction.color == Color.BLACK for direction in castling_directions(Color.BLACK))


# -- RIGHTS --
def test_rights_to_fen() -> None:
    assert CastlingRights().to_fen() == "KQkq"
    assert CastlingRights.none().to_fen() == "-"
    assert CastlingRights().revoke(CastlingDirection.WHITE_QUEEN_SIDE).to_fen() == "Kkq"
    assert CastlingRights().revoke_all(Color.BLACK).to_fen() == "KQ"


def test_rights_are_only_revoked() -> None:
    rights = CastlingRights().revoke(CastlingDirection.BLACK_KING_SIDE)
    # revoking twice does not restore anything
    rights = rights.revoke(CastlingDirection.BLACK_KING_SIDE)

    assert not rights.has(CastlingDirection.BLACK_KING_SIDE)
    assert rights.has(CastlingDirection.BLACK_QUEEN_SIDE)
    assert rights.to_fen() == "KQq"


def test_revoke_returns_new_rights() -> None:
    rights = CastlingRights()
    rights.revoke_all(Color.WHITE)
    assert rights == CastlingRights()


@pytest.mark.parametrize(
    "placement, fen",
    [
        ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR", "KQkq"),
        ("r3k3/8/8/8/8/8/8/4K2R", "Kq"),
        ("4k3/8/8/8/8/8/8/R2K3R", "-"),
        ("R3k2r/8/8/8/8/8/8/4K3", "k"),
    ],
)
def test_rights_from_board(placement: str, fen: str) -> None:
    """A right exists only with king AND the own rook on their home squares."""
    assert CastlingRights.from_board(Board.from_fen(placement)).to_fen() == fen
