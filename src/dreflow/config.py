"""Configuration management for dreflow.

Settings come from environment variables; the CLI options of the same names
override them.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dreflow.domain.classifier import DEFAULT_MIN_SCORE
from dreflow.domain.errors import ValidationError

DB_PATH_ENV = "DREFLOW_DB_PATH"
LOG_LEVEL_ENV = "DREFLOW_LOG_LEVEL"
MIN_CONFIDENCE_ENV = "DREFLOW_MIN_CONFIDENCE"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    db_path: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    min_confidence: float = DEFAULT_MIN_SCORE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Raises:
            ValidationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        log_level = env.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
        if log_level not in LOG_LEVELS:
            raise ValidationError(
                f"{LOG_LEVEL_ENV} must be one of {', '.join(LOG_LEVELS)}, got '{log_level}'"
            )

        raw_confidence = env.get(MIN_CONFIDENCE_ENV)
        min_confidence = DEFAULT_MIN_SCORE
        if raw_confidence:
            try:
                min_confidence = float(raw_confidence)
            except ValueError as e:
                raise ValidationError(f"{MIN_CONFIDENCE_ENV} must be a number, got '{raw_confidence}'") from e
            if not 0.0 <= min_confidence <= 1.0:
                raise ValidationError(f"{MIN_CONFIDENCE_ENV} must be within [0, 1], got {min_confidence}")

        return cls(
            db_path=env.get(DB_PATH_ENV) or None,
            log_level=log_level,
            min_confidence=min_confidence,
        )
