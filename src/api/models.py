"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, MoveEffect, PieceType, Status
from src.rules.pieces import PROMOTION_OPTIONS
from src.rules.square import is_algebraic

SquareName = str
PieceSymbol = str


def _validate_square(value: str) -> str:
    if not is_algebraic(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


def _validate_promotion(value: Optional[PieceType]) -> Optional[PieceType]:
    if value is not None and value not in PROMOTION_OPTIONS:
        raise InvalidRequestError(
            f"Cannot promote into a {value}. Pick one from {', '.join(PROMOTION_OPTIONS)}."
        )
    return value


# --- REQUEST MODELS ---
class NewGameRequest(BaseModel):
    # None: use the configured defaults
    human_color: Optional[Color] = None
    opponent_enabled: Optional[bool] = None


class GameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promote_to(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        return _validate_promotion(value)


class PromotionRequest(BaseModel):
    game_id: UUID
    piece: PieceType

    @field_validator("piece")
    @classmethod
    def validate_piece(cls, value: PieceType) -> PieceType:
        _validate_promotion(value)
        return value


class ResignRequest(BaseModel):
    game_id: UUID
    # None: the human player of the session resigns
    color: Optional[Color] = None


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    board: dict[SquareName, PieceSymbol]
    turn: Color
    status: Status
    termination: Optional[str]
    winner: Optional[Color]
    in_check: dict[Color, bool]
    captured: dict[Color, list[PieceSymbol]]
    material: dict[Color, int]
    pending_promotion: Optional[SquareName]
    moves: list[str]
    position_key: str
    # side effects of the move(s) made by this request, in order: the human's, then the opponent's reply
    effects: list[MoveEffect] = []
    accepted: bool = True
    error: Optional[str] = None


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: SquareName
    destinations: list[SquareName]


class HintResponse(BaseModel):
    game_id: UUID
    move: Optional[str]
