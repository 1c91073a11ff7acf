"""
Errors raised by the domain and service layers.

Everything derives from ChessError so the service boundary can reject a request without touching the stored game.
"""


class ChessError(Exception):
    """Base class for all errors of this application."""


# --- RULES VIOLATIONS ---
class IllegalMoveError(ChessError):
    """Destination is not in the legal move set of the selected square."""


class KingCaptureError(IllegalMoveError):
    """A move tried to take a king. The legality filter should make this unreachable."""


class PromotionPendingError(ChessError):
    """A pawn waits on the last rank for its promotion piece. Nothing else may happen first."""


class PromotionChoiceError(ChessError):
    """Invalid promotion piece, or no promotion is pending."""


class GameStateError(ChessError):
    """The game is not in a state that accepts the request (ex. it already ended)."""


class NotYourTurnError(ChessError):
    """The requesting side is not the side to move."""


class NoLegalMovesError(ChessError):
    """Asked to pick a move for a side that has none (checkmate or stalemate)."""


class InvalidPositionError(ChessError):
    """A board that can never occur in a game, ex. a missing king."""


# --- BOUNDARY ---
class InvalidRequestError(ChessError):
    """Request data could not be interpreted."""


class RepositoryError(ChessError):
    """Game session could not be found or stored."""
