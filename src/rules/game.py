"""
Move applier: the entrypoint into the rules for the service layer.

It is responsible for committing a legal move to the game state, updating the bookkeeping
(castling rights, en passant square, move counters, position history) and deciding whether the game has ended.
Every operation returns a new GameState. A rejected request raises and leaves the given state untouched.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidPositionError,
    KingCaptureError,
    PromotionChoiceError,
    PromotionPendingError,
)
from src.core.shared_types import Color, DrawReason, MoveEffect, PieceType, Status
from src.rules.attacks import is_in_check
from src.rules.board import Board
from src.rules.castling import CASTLING_RULES, CastlingRights
from src.rules.classifier import (
    has_insufficient_material,
    is_checkmate,
    is_fifty_move_draw,
    is_stalemate,
    is_threefold_repetition,
    position_key,
)
from src.rules.legality import is_king_capture, legal_moves
from src.rules.moves import Move, en_passant_capture_square
from src.rules.pieces import PROMOTION_OPTIONS, Piece
from src.rules.square import Square
from src.rules.state import GameState, PendingPromotion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveOutcome:
    """
    Result of applying a move.

    `effect` is None while a promotion is pending: the move is not complete yet.
    """

    state: GameState
    move: Move
    effect: Optional[MoveEffect] = None
    captured: Optional[Piece] = None
    gives_check: bool = False


# --- CREATION ---
def new_game(
    board: Optional[Board] = None,
    turn: Color = Color.WHITE,
    castling_rights: Optional[CastlingRights] = None,
    en_passant: Optional[Square] = None,
    half_move_clock: int = 0,
) -> GameState:
    """
    Start a game from the standard starting position, or from a custom board.

    For a custom board, castling rights default to whatever the king/rook placement still allows.
    """
    if board is None:
        board = Board.starting_position()
    _validate_position(board, turn)
    return GameState(
        board=board,
        turn=turn,
        castling_rights=(
            castling_rights
            if castling_rights is not None
            else CastlingRights.from_board(board)
        ),
        en_passant=en_passant,
        half_move_clock=half_move_clock,
    )


def _validate_position(board: Board, turn: Color) -> None:
    """Exactly one king each, and the side that just moved cannot be left in check."""
    for color in Color:
        num_kings = len(board.locate_pieces(PieceType.KING, color))
        if num_kings != 1:
            raise InvalidPositionError(
                f"Expected exactly one {color} king, found {num_kings}."
            )
    if is_in_check(board, turn.opponent):
        raise InvalidPositionError(
            f"{turn.opponent} is in check while it is {turn}'s turn to move."
        )


# --- QUERIES ---
def legal_moves_from(state: GameState, square: Square) -> set[Move]:
    """
    Legal moves for the piece the side to move selected.

    Empty when the game is over, a promotion is pending, or the square does not hold a piece of the side to move.
    """
    if state.is_over or state.pending_promotion is not None:
        return set()
    piece = state.board.piece(square)
    if piece is None or piece.color != state.turn:
        return set()
    return legal_moves(square, state.board, state.context)


def find_move(
    state: GameState, from_square: Square, to_square: Square
) -> Optional[Move]:
    """Look up the legal move (with its castling / en passant / promotion tags) between two squares."""
    return next(
        (
            move
            for move in legal_moves_from(state, from_square)
            if move.to_square == to_square
        ),
        None,
    )


# --- MOVES ---
def apply_move(
    state: GameState, move: Move, promotion: Optional[PieceType] = None
) -> MoveOutcome:
    """
    Commit a legal move
    -----

    1. remove the captured piece (en passant: from beside the destination, not the destination itself)
    2. relocate the rook when castling
    3. place the moved (or promoted) piece
    4. update castling rights, en passant square and move counters
    5. append the new position key to the history
    6. check for the end of the game, from the point of view of the side now to move

    A pawn reaching the last rank without a promotion choice stops after step 3: the returned state
    holds a pending promotion and the move is completed by `complete_promotion()`.
    """
    _assert_accepting_moves(state)

    if is_king_capture(move, state.board):
        logger.error(
            "Rejected king capture %s. The legality filter should never offer it.",
            move.to_uci(),
        )
        raise KingCaptureError(f"A king cannot be captured: {move.to_uci()}")

    if move not in legal_moves_from(state, move.from_square):
        raise IllegalMoveError(f"Move not allowed: {move.to_uci()}")

    if promotion is not None:
        _assert_valid_promotion(move, promotion)

    mover = state.board.piece(move.from_square)
    assert mover is not None

    board = state.board
    captured = board.piece(move.to_square)
    if move.is_en_passant:
        taken_square = en_passant_capture_square(move)
        captured = board.piece(taken_square)
        board = board.remove_piece(taken_square)

    if move.castling is not None:
        rook = CASTLING_RULES[move.castling]
        board = board.move_piece(rook.rook_from, rook.rook_to)

    board = board.move_piece(move.from_square, move.to_square)

    if move.is_promotion:
        if promotion is None:
            pending = PendingPromotion(move=move, pawn=mover, captured=captured)
            logger.debug("Waiting for promotion choice on %s", move.to_square.to_algebraic())
            return MoveOutcome(
                state=replace(state, board=board, pending_promotion=pending),
                move=move,
                captured=captured,
            )
        board = board.place_piece(mover.promoted_to(promotion), move.to_square)

    return _complete_move(state, board, move, mover, captured, promotion)


def complete_promotion(state: GameState, promotion: PieceType) -> MoveOutcome:
    """Finish the move that is waiting for the promotion piece."""
    if state.is_over:
        raise GameStateError(f"Game is not in progress. status: {state.status}")

    pending = state.pending_promotion
    if pending is None:
        raise PromotionChoiceError("There is no pawn waiting to be promoted.")
    _assert_valid_promotion(pending.move, promotion)

    board = state.board.place_piece(
        pending.pawn.promoted_to(promotion), pending.move.to_square
    )
    return _complete_move(
        state, board, pending.move, pending.pawn, pending.captured, promotion
    )


def resign(state: GameState, color: Color) -> GameState:
    """Direct transition to the end of the game. Not a move: no legality involved."""
    if state.is_over:
        raise GameStateError(f"Game is not in progress. status: {state.status}")
    logger.info("%s resigned", color)
    return replace(
        state,
        status=Status.RESIGNED,
        winner=color.opponent,
        pending_promotion=None,
    )


# -- PRIVATE HELPERS ---
def _assert_accepting_moves(state: GameState) -> None:
    if state.is_over:
        raise GameStateError(f"Game is not in progress. status: {state.status}")
    if state.pending_promotion is not None:
        raise PromotionPendingError(
            f"Choose a promotion piece for the pawn on {state.pending_promotion.move.to_square.to_algebraic()} first."
        )


def _assert_valid_promotion(move: Move, promotion: PieceType) -> None:
    if not move.is_promotion:
        raise PromotionChoiceError(f"{move.to_uci()} is not a promotion.")
    if promotion not in PROMOTION_OPTIONS:
        raise PromotionChoiceError(
            f"Cannot promote into a {promotion}. Pick one from {', '.join(PROMOTION_OPTIONS)}."
        )


def _complete_move(
    state: GameState,
    board: Board,
    move: Move,
    mover: Piece,
    captured: Optional[Piece],
    promotion: Optional[PieceType],
) -> MoveOutcome:
    """Bookkeeping once the pieces stand where they should."""
    castling_rights = _revoke_castling_rights_if_needed(state.castling_rights, move)
    en_passant = _determine_en_passant_square(move, mover)

    is_capture = captured is not None
    half_move_clock = (
        0 if (mover.type == PieceType.PAWN or is_capture) else state.half_move_clock + 1
    )
    full_move_number = state.full_move_number + (1 if mover.color == Color.BLACK else 0)

    # NOTE update color to move AFTER everything that depends on the side that just moved
    turn = mover.color.opponent
    key = position_key(board, turn, castling_rights, en_passant)

    captured_by_white = state.captured_by_white
    captured_by_black = state.captured_by_black
    if captured is not None:
        if mover.color == Color.WHITE:
            captured_by_white += (captured,)
        else:
            captured_by_black += (captured,)

    next_state = replace(
        state,
        board=board,
        turn=turn,
        castling_rights=castling_rights,
        en_passant=en_passant,
        half_move_clock=half_move_clock,
        full_move_number=full_move_number,
        history=state.history + (key,),
        moves=state.moves + (move.to_uci(promotion),),
        captured_by_white=captured_by_white,
        captured_by_black=captured_by_black,
        pending_promotion=None,
    )
    next_state = _update_game_status(next_state)

    if next_state.status == Status.CHECKMATE:
        effect = MoveEffect.CHECKMATE
    elif move.castling is not None:
        effect = MoveEffect.CASTLE
    elif is_capture:
        effect = MoveEffect.CAPTURE
    else:
        effect = MoveEffect.MOVE

    logger.debug("%s played %s (%s)", mover.color, move.to_uci(promotion), effect)
    return MoveOutcome(
        state=next_state,
        move=move,
        effect=effect,
        captured=captured,
        gives_check=is_in_check(board, turn),
    )


def _revoke_castling_rights_if_needed(
    castling_rights: CastlingRights, move: Move
) -> CastlingRights:
    """
    Checks which rights should get revoked
    ----

    A move from or onto a castling home square ends the right that depends on it:
    1. the king leaves its home square (this includes castling) --> revoke both directions
    2. a rook leaves its home square --> revoke the right in the direction of that rook
    3. the opponent's rook gets taken on its home square --> revoke the opponent's right in that direction
    """
    touched = {move.from_square, move.to_square}
    revoked = [
        direction
        for direction, squares in CASTLING_RULES.items()
        if castling_rights.has(direction)
        and touched & {squares.king_from, squares.rook_from}
    ]
    return castling_rights.revoke(*revoked) if revoked else castling_rights


def _determine_en_passant_square(move: Move, mover: Piece) -> Optional[Square]:
    """A pawn that moved two squares leaves the square it skipped as en passant square, for one move only."""
    rows_moved = abs(move.from_square.row - move.to_square.row)
    if mover.type == PieceType.PAWN and rows_moved == 2:
        return Square(
            (move.from_square.row + move.to_square.row) // 2, move.from_square.col
        )
    return None


def _update_game_status(state: GameState) -> GameState:
    """Performs checks to see if game has ended and changes status accordingly.

    NOTE the side to move has already been updated: the checks are done for the opponent of whoever just moved.
    """
    color = state.turn

    if is_checkmate(state.board, state.context, color):
        logger.info("Checkmate. %s wins", color.opponent)
        return replace(state, status=Status.CHECKMATE, winner=color.opponent)

    if is_stalemate(state.board, state.context, color):
        logger.info("Stalemate. %s has no legal move", color)
        return replace(state, status=Status.STALEMATE)

    draw_reason: Optional[DrawReason] = None
    if has_insufficient_material(state.board):
        draw_reason = DrawReason.INSUFFICIENT_MATERIAL
    elif is_threefold_repetition(state.history, state.history[-1]):
        draw_reason = DrawReason.THREEFOLD_REPETITION
    elif is_fifty_move_draw(state.half_move_clock):
        draw_reason = DrawReason.FIFTY_MOVE

    if draw_reason is not None:
        logger.info("Draw: %s", draw_reason)
        return replace(state, status=Status.DRAW, draw_reason=draw_reason)
    return state
