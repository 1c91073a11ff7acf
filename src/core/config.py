"""Application settings.

All settings can be overridden with environment variables prefixed with CHESS_ (or a .env file),
ex. CHESS_OPPONENT_ENABLED=false to let two humans play on the same session.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.shared_types import Color, PieceType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Opponent
    opponent_enabled: bool = True
    human_color: Color = Color.WHITE
    opponent_promotion: PieceType = PieceType.QUEEN
    opponent_seed: Optional[int] = None

    # Logging
    log_level: str = "INFO"

    @field_validator("opponent_promotion")
    @classmethod
    def validate_opponent_promotion(cls, value: PieceType) -> PieceType:
        if value in (PieceType.PAWN, PieceType.KING):
            raise ValueError(f"A pawn cannot promote into a {value}.")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def opponent_color(self) -> Color:
        return self.human_color.opponent


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    """For hosts embedding the engine. The library itself never installs handlers."""
    logging.basicConfig(level=settings.log_level)
