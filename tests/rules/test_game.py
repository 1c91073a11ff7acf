"""Unit tests for /src/rules/game.py"""

import logging
from string import ascii_lowercase

import pytest

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidPositionError,
    KingCaptureError,
    PromotionChoiceError,
    PromotionPendingError,
)
from src.core.shared_types import Color, DrawReason, MoveEffect, PieceType, Status
from src.rules.board import STARTING_POSITION, Board
from src.rules.castling import CastlingDirection, CastlingRights
from src.rules.game import (
    apply_move,
    complete_promotion,
    find_move,
    legal_moves_from,
    new_game,
    resign,
)
from src.rules.moves import Move
from src.rules.pieces import Piece
from src.rules.square import Square
from src.rules.state import GameState

STARTING_KEY = f"{STARTING_POSITION} w KQkq -"


def _sq(name: str) -> Square:
    return Square.from_algebraic(name)


def _move(state: GameState, from_square: str, to_square: str) -> Move:
    move = find_move(state, _sq(from_square), _sq(to_square))
    assert move is not None
    return move


@pytest.fixture
def starting_state() -> GameState:
    return new_game()


# -- CREATION --
def test_new_game(starting_state: GameState) -> None:
    assert starting_state.board == Board.starting_position()
    assert starting_state.turn == Color.WHITE
    assert starting_state.castling_rights == CastlingRights()
    assert starting_state.en_passant is None
    assert starting_state.half_move_clock == 0
    assert starting_state.full_move_number == 1
    assert starting_state.history == ()
    assert starting_state.status == Status.IN_PROGRESS
    assert starting_state.termination is None
    assert starting_state.position_key == STARTING_KEY


@pytest.mark.parametrize(
    "pieces, turn",
    [
        ({"e1": "K"}, Color.WHITE),
        ({"e1": "K", "e8": "k", "a1": "K"}, Color.WHITE),
        ({"e8": "k", "h8": "k", "e1": "K"}, Color.BLACK),
        # the side that just moved cannot be in check
        ({"e1": "K", "e8": "k", "e4": "R"}, Color.WHITE),
    ],
)
def test_new_game_rejects_impossible_positions(pieces: dict[str, str], turn: Color) -> None:
    with pytest.raises(InvalidPositionError):
        new_game(board=Board.from_pieces(pieces), turn=turn)


def test_new_game_from_custom_board() -> None:
    state = new_game(board=Board.from_pieces({"e1": "K", "h1": "R", "e8": "k"}), turn=Color.BLACK)
    assert state.turn == Color.BLACK
    assert state.castling_rights.to_fen() == "K"


# -- QUERIES --
def test_legal_moves_only_for_side_to_move(starting_state: GameState) -> None:
    assert {move.to_square for move in legal_moves_from(starting_state, _sq("g1"))} == {_sq("f3"), _sq("h3")}
    assert legal_moves_from(starting_state, _sq("g8")) == set()
    assert legal_moves_from(starting_state, _sq("e4")) == set()


def test_find_move(starting_state: GameState) -> None:
    assert find_move(starting_state, _sq("e2"), _sq("e4")) == Move(_sq("e2"), _sq("e4"))
    assert find_move(starting_state, _sq("e2"), _sq("e5")) is None


# -- APPLYING MOVES --
def test_apply_move_updates_state(starting_state: GameState) -> None:
    outcome = apply_move(starting_state, _move(starting_state, "e2", "e4"))
    state = outcome.state

    assert outcome.effect == MoveEffect.MOVE
    assert outcome.captured is None
    assert not outcome.gives_check
    assert state.turn == Color.BLACK
    assert state.en_passant == _sq("e3")
    assert state.half_move_clock == 0
    assert state.full_move_number == 1
    assert state.moves == ("e2e4",)
    assert state.history == ("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3",)
    # the original state is untouched
    assert starting_state.board == Board.starting_position()
    assert starting_state.history == ()


def test_move_counters(starting_state: GameState, play) -> None:
    state = play(starting_state, "g1f3")
    assert state.half_move_clock == 1
    assert state.full_move_number == 1
    state = play(state, "b8c6")
    assert state.half_move_clock == 2
    assert state.full_move_number == 2
    # pawn move resets the clock
    state = play(state, "e2e4")
    assert state.half_move_clock == 0
    state = play(state, "c6d4")
    assert state.half_move_clock == 1
    # capture resets the clock
    outcome = apply_move(state, _move(state, "f3", "d4"))
    assert outcome.effect == MoveEffect.CAPTURE
    assert outcome.captured == Piece(PieceType.KNIGHT, Color.BLACK)
    assert outcome.state.half_move_clock == 0
    assert outcome.state.captured_by_white == (Piece(PieceType.KNIGHT, Color.BLACK),)
    assert outcome.state.captured_by_black == ()


def test_history_grows_by_one_key_per_move(starting_state: GameState, play) -> None:
    state = play(starting_state, "e2e4", "e7e5", "g1f3")
    assert len(state.history) == 3
    assert state.history[-1] == state.position_key


def test_illegal_move_rejected(starting_state: GameState) -> None:
    with pytest.raises(IllegalMoveError):
        apply_move(starting_state, Move(_sq("e2"), _sq("e5")))
    with pytest.raises(IllegalMoveError):
        apply_move(starting_state, Move(_sq("e7"), _sq("e5")))
    assert starting_state.board == Board.starting_position()


def test_king_capture_rejected(caplog: pytest.LogCaptureFixture) -> None:
    """A position where the king could be taken never arises in a game. Build it by hand."""
    state = GameState(
        board=Board.from_pieces({"a1": "K", "e4": "Q", "e8": "k"}),
        castling_rights=CastlingRights.none(),
    )
    with caplog.at_level(logging.ERROR), pytest.raises(KingCaptureError):
        apply_move(state, Move(_sq("e4"), _sq("e8")))
    assert "king capture" in caplog.text


# -- SCENARIO A: CHECKMATE --
def test_scholars_mate(starting_state: GameState, play) -> None:
    state = play(starting_state, "e2e4", "e7e5", "f1c4", "b8c6", "d1h5", "g8f6")
    outcome = apply_move(state, _move(state, "h5", "f7"))
    state = outcome.state

    assert outcome.effect == MoveEffect.CHECKMATE
    assert outcome.gives_check
    assert outcome.captured == Piece(PieceType.PAWN, Color.BLACK)
    assert state.status == Status.CHECKMATE
    assert state.winner == Color.WHITE
    assert state.draw_reason is None
    assert state.termination == "checkmate"
    assert state.in_check(Color.BLACK)


def test_no_moves_after_game_over(starting_state: GameState, play) -> None:
    state = play(starting_state, "f2f3", "e7e5", "g2g4", "d8h4")
    assert state.status == Status.CHECKMATE
    assert state.winner == Color.BLACK
    assert legal_moves_from(state, _sq("a2")) == set()
    with pytest.raises(GameStateError):
        apply_move(state, Move(_sq("a2"), _sq("a3")))


# -- SCENARIO B: EN PASSANT --
@pytest.fixture
def en_passant_state(starting_state: GameState, play) -> GameState:
    """A white pawn double-steps right beside the black pawn on d4."""
    return play(starting_state, "a2a3", "d7d5", "a3a4", "d5d4", "e2e4")


def test_en_passant_capture(en_passant_state: GameState) -> None:
    assert en_passant_state.en_passant == _sq("e3")
    move = _move(en_passant_state, "d4", "e3")
    assert move.is_en_passant

    outcome = apply_move(en_passant_state, move)
    board = outcome.state.board
    assert outcome.effect == MoveEffect.CAPTURE
    assert board.piece(_sq("e3")) == Piece(PieceType.PAWN, Color.BLACK)
    # the captured pawn is removed from its own square, not the destination
    assert board.is_empty(_sq("e4"))
    assert board.is_empty(_sq("d4"))
    assert outcome.state.captured_by_black == (Piece(PieceType.PAWN, Color.WHITE),)
    assert outcome.state.en_passant is None


def test_en_passant_expires_after_one_move(en_passant_state: GameState, play) -> None:
    state = play(en_passant_state, "h7h6", "h2h3")
    assert state.en_passant is None
    assert {move.to_square for move in legal_moves_from(state, _sq("d4"))} == {_sq("d3")}


# -- SCENARIO C: CASTLING --
@pytest.fixture
def castling_state() -> GameState:
    """The black rook on f8 watches f1, the square the white king has to cross."""
    board = Board.from_pieces({"e1": "K", "a1": "R", "h1": "R", "d4": "N", "e8": "k", "f8": "r"})
    return new_game(board=board)


def _castling_directions(state: GameState) -> set[CastlingDirection]:
    return {move.castling for move in legal_moves_from(state, _sq("e1")) if move.castling is not None}


def test_castling_through_attacked_square(castling_state: GameState, play) -> None:
    assert _castling_directions(castling_state) == {CastlingDirection.WHITE_QUEEN_SIDE}

    # the knight closes the f-file
    state = play(castling_state, "d4f3", "e8d8")
    assert _castling_directions(state) == {
        CastlingDirection.WHITE_KING_SIDE,
        CastlingDirection.WHITE_QUEEN_SIDE,
    }


def test_castling_relocates_rook(castling_state: GameState, play) -> None:
    state = play(castling_state, "d4f3", "e8d8")
    outcome = apply_move(state, _move(state, "e1", "g1"))
    board = outcome.state.board

    assert outcome.effect == MoveEffect.CASTLE
    assert board.piece(_sq("g1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.piece(_sq("f1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert board.is_empty(_sq("e1"))
    assert board.is_empty(_sq("h1"))
    assert outcome.state.castling_rights.to_fen() == "-"
    assert outcome.state.moves[-1] == "e1g1"


def test_rook_move_revokes_one_direction(castling_state: GameState, play) -> None:
    state = play(castling_state, "a1a2")
    assert not state.castling_rights.has(CastlingDirection.WHITE_QUEEN_SIDE)
    assert state.castling_rights.has(CastlingDirection.WHITE_KING_SIDE)


def test_rook_captured_on_home_square_revokes_right(starting_state: GameState, play) -> None:
    state = play(starting_state, "b2b3", "e7e6", "c1b2", "e6e5", "b2e5", "g7g6", "e5h8")
    assert not state.castling_rights.has(CastlingDirection.BLACK_KING_SIDE)
    assert state.castling_rights.has(CastlingDirection.BLACK_QUEEN_SIDE)
    assert state.castling_rights.to_fen() == "KQq"


# -- PROMOTION --
@pytest.fixture
def promotion_state() -> GameState:
    return new_game(board=Board.from_pieces({"a7": "P", "e1": "K", "h1": "k", "b8": "n"}))


def test_promotion_waits_for_choice(promotion_state: GameState) -> None:
    outcome = apply_move(promotion_state, _move(promotion_state, "a7", "a8"))
    state = outcome.state

    assert outcome.effect is None
    assert state.pending_promotion is not None
    assert state.turn == Color.WHITE
    assert state.history == ()
    assert state.board.piece(_sq("a8")) == Piece(PieceType.PAWN, Color.WHITE)

    # nothing else may happen first
    assert legal_moves_from(state, _sq("e1")) == set()
    with pytest.raises(PromotionPendingError):
        apply_move(state, Move(_sq("e1"), _sq("e2")))

    outcome = complete_promotion(state, PieceType.QUEEN)
    state = outcome.state
    assert outcome.effect == MoveEffect.MOVE
    assert outcome.gives_check
    assert state.board.piece(_sq("a8")) == Piece(PieceType.QUEEN, Color.WHITE)
    assert state.pending_promotion is None
    assert state.turn == Color.BLACK
    assert state.moves == ("a7a8q",)
    assert len(state.history) == 1


def test_promotion_with_capture(promotion_state: GameState) -> None:
    outcome = apply_move(promotion_state, _move(promotion_state, "a7", "b8"), PieceType.KNIGHT)
    assert outcome.effect == MoveEffect.CAPTURE
    assert outcome.captured == Piece(PieceType.KNIGHT, Color.BLACK)
    assert outcome.state.board.piece(_sq("b8")) == Piece(PieceType.KNIGHT, Color.WHITE)
    assert outcome.state.moves == ("a7b8n",)


@pytest.mark.parametrize("choice", [PieceType.KING, PieceType.PAWN])
def test_invalid_promotion_choice(promotion_state: GameState, choice: PieceType) -> None:
    move = _move(promotion_state, "a7", "a8")
    with pytest.raises(PromotionChoiceError):
        apply_move(promotion_state, move, choice)

    pending = apply_move(promotion_state, move).state
    with pytest.raises(PromotionChoiceError):
        complete_promotion(pending, choice)


def test_promotion_choice_without_pending(promotion_state: GameState) -> None:
    with pytest.raises(PromotionChoiceError):
        complete_promotion(promotion_state, PieceType.QUEEN)
    with pytest.raises(PromotionChoiceError):
        apply_move(promotion_state, _move(promotion_state, "e1", "e2"), PieceType.QUEEN)


# -- STALEMATE AND DRAWS --
def test_stalemate() -> None:
    state = new_game(board=Board.from_pieces({"a8": "k", "c5": "Q", "h1": "K"}))
    outcome = apply_move(state, _move(state, "c5", "b6"))

    assert outcome.state.status == Status.STALEMATE
    assert outcome.state.winner is None
    assert outcome.state.draw_reason is None
    assert outcome.state.termination == "stalemate"


def test_insufficient_material_after_capture() -> None:
    state = new_game(board=Board.from_pieces({"d1": "K", "e2": "n", "e8": "k"}))
    outcome = apply_move(state, _move(state, "d1", "e2"))

    assert outcome.effect == MoveEffect.CAPTURE
    assert outcome.state.status == Status.DRAW
    assert outcome.state.draw_reason == DrawReason.INSUFFICIENT_MATERIAL
    assert outcome.state.termination == "draw:insufficient-material"
    assert outcome.state.winner is None


def test_threefold_repetition(starting_state: GameState, play) -> None:
    """The position after 1. Nf3 occurs for the third time on the 9th half-move."""
    shuffle = ("g1f3", "g8f6", "f3g1", "f6g8")
    state = play(starting_state, *shuffle, *shuffle)
    assert state.status == Status.IN_PROGRESS
    assert state.history.count(STARTING_KEY) == 2

    state = play(state, "g1f3")
    assert state.history.count(state.position_key) == 3
    assert state.status == Status.DRAW
    assert state.draw_reason == DrawReason.THREEFOLD_REPETITION
    assert state.termination == "draw:threefold-repetition"


def test_repetition_needs_same_rights(starting_state: GameState, play) -> None:
    """King walks forth and back: same placement, but castling rights are gone."""
    state = play(starting_state, "e2e4", "e7e5", "e1e2", "e8e7", "e2e1", "e7e8")
    state = play(state, "e1e2", "e8e7", "e2e1", "e7e8")
    # the placement after 1... e5 has now occurred three times, the first time with castling rights
    assert state.status == Status.IN_PROGRESS

    # the first time white's king stood on e2, black could still castle
    state = play(state, "e1e2")
    assert state.history.count(state.position_key) == 2
    assert state.status == Status.IN_PROGRESS

    state = play(state, "e8e7")
    assert state.history.count(state.position_key) == 3
    assert state.status == Status.DRAW
    assert state.draw_reason == DrawReason.THREEFOLD_REPETITION


@pytest.fixture
def rook_endgame() -> Board:
    """Rooks on the 4th and 5th rank that can shuffle along without giving check."""
    return Board.from_fen("4k3/pppppppp/8/5r2/7R/8/PPPPPPPP/4K3")


@pytest.mark.parametrize("clock, status", [(98, Status.IN_PROGRESS), (99, Status.DRAW)])
def test_fifty_move_rule_from_clock(rook_endgame: Board, clock: int, status: Status) -> None:
    state = new_game(board=rook_endgame, half_move_clock=clock)
    state = apply_move(state, _move(state, "h4", "a4")).state
    assert state.half_move_clock == clock + 1
    assert state.status == status
    if status == Status.DRAW:
        assert state.draw_reason == DrawReason.FIFTY_MOVE


def test_fifty_move_rule_after_hundred_half_moves(rook_endgame: Board, play) -> None:
    """Both rooks wander over their ranks. No position occurs three times."""
    state = new_game(board=rook_endgame)
    white_file, black_file = 7, 5
    for i in range(50):
        next_white_file = i % 8
        next_black_file = (i + i // 8) % 8
        white_move = f"{ascii_lowercase[white_file]}4{ascii_lowercase[next_white_file]}4"
        black_move = f"{ascii_lowercase[black_file]}5{ascii_lowercase[next_black_file]}5"
        white_file, black_file = next_white_file, next_black_file

        state = play(state, white_move)
        assert state.status == Status.IN_PROGRESS
        state = play(state, black_move)
        if i < 49:
            assert state.status == Status.IN_PROGRESS

    assert state.half_move_clock == 100
    assert state.status == Status.DRAW
    assert state.draw_reason == DrawReason.FIFTY_MOVE
    assert state.termination == "draw:fifty-move"


def test_checkmate_beats_fifty_move_rule() -> None:
    state = new_game(
        board=Board.from_pieces({"g8": "k", "f7": "p", "g7": "p", "h7": "p", "a1": "R", "e1": "K"}),
        half_move_clock=99,
    )
    outcome = apply_move(state, _move(state, "a1", "a8"))
    assert outcome.state.status == Status.CHECKMATE
    assert outcome.state.draw_reason is None


# -- RESIGNATION --
def test_resign(starting_state: GameState) -> None:
    state = resign(starting_state, Color.WHITE)
    assert state.status == Status.RESIGNED
    assert state.winner == Color.BLACK
    assert state.termination == "resignation"

    with pytest.raises(GameStateError):
        resign(state, Color.BLACK)
    with pytest.raises(GameStateError):
        apply_move(state, Move(_sq("e2"), _sq("e4")))


def test_resign_clears_pending_promotion(promotion_state: GameState) -> None:
    pending = apply_move(promotion_state, _move(promotion_state, "a7", "a8")).state
    state = resign(pending, Color.BLACK)
    assert state.pending_promotion is None
    assert state.winner == Color.WHITE
