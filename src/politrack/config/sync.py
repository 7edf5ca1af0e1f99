"""Tuning defaults for reconciliation jobs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_BIRTH_DATE_TOLERANCE_DAYS = 5
DEFAULT_DUPLICATE_DATE_TOLERANCE_DAYS = 30
DEFAULT_DUPLICATE_SCORE_FLOOR = 0.4
DEFAULT_CHECKPOINT_INTERVAL = 100
DEFAULT_ERROR_SAMPLE_SIZE = 10
DEFAULT_MANDATE_WINDOW_DAYS = 30


@dataclass(frozen=True, slots=True)
class SyncConfig:
    birth_date_tolerance_days: int = DEFAULT_BIRTH_DATE_TOLERANCE_DAYS
    duplicate_date_tolerance_days: int = DEFAULT_DUPLICATE_DATE_TOLERANCE_DAYS
    duplicate_score_floor: float = DEFAULT_DUPLICATE_SCORE_FLOOR
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL
    error_sample_size: int = DEFAULT_ERROR_SAMPLE_SIZE
    mandate_window_days: int = DEFAULT_MANDATE_WINDOW_DAYS

    def __post_init__(self) -> None:
        if self.checkpoint_interval < 1:
            raise ConfigurationError("checkpoint interval must be at least 1")
        if self.error_sample_size < 0:
            raise ConfigurationError("error sample size must not be negative")
        if not 0.0 <= self.duplicate_score_floor <= 1.0:
            raise ConfigurationError("duplicate score floor must lie in [0, 1]")


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        birth_date_tolerance_days=env_int(
            "POLITRACK_BIRTH_DATE_TOLERANCE_DAYS", DEFAULT_BIRTH_DATE_TOLERANCE_DAYS
        ),
        duplicate_date_tolerance_days=env_int(
            "POLITRACK_DUPLICATE_DATE_TOLERANCE_DAYS", DEFAULT_DUPLICATE_DATE_TOLERANCE_DAYS
        ),
        duplicate_score_floor=env_float(
            "POLITRACK_DUPLICATE_SCORE_FLOOR", DEFAULT_DUPLICATE_SCORE_FLOOR
        ),
        checkpoint_interval=env_int("POLITRACK_CHECKPOINT_INTERVAL", DEFAULT_CHECKPOINT_INTERVAL),
        error_sample_size=env_int("POLITRACK_ERROR_SAMPLE_SIZE", DEFAULT_ERROR_SAMPLE_SIZE),
        mandate_window_days=env_int("POLITRACK_MANDATE_WINDOW_DAYS", DEFAULT_MANDATE_WINDOW_DAYS),
    )
