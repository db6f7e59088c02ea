"""
tokenvault configuration

Values are read from environment variables with safe defaults. Durations are
configured in days and exposed in seconds.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from exc


# Deposits may require a longer lock than this, never a shorter one
MIN_LOCK_FLOOR = 180 * SECONDS_PER_DAY
MIN_LOCK_DURATION = _get_int("TOKENVAULT_MIN_LOCK_DAYS", 180) * SECONDS_PER_DAY

# Every proposal is open for exactly this long
VOTING_PERIOD = 7 * SECONDS_PER_DAY
WEIGHT_SCALE = 10**18

# Address that holds custodied tokens on each asset ledger
CUSTODY_ADDRESS = os.getenv("TOKENVAULT_CUSTODY_ADDRESS", "tokenvault-custody")


@dataclass(frozen=True)
class VaultConfig:
    """Runtime settings for a vault instance."""

    min_lock_duration: int = MIN_LOCK_DURATION
    weight_scale: int = WEIGHT_SCALE
    custody_address: str = CUSTODY_ADDRESS
    state_path: str | None = None
    log_level: str = "INFO"
    log_file: str | None = None
    environment: str = "development"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.min_lock_duration < MIN_LOCK_FLOOR:
            raise ConfigurationError(
                f"min_lock_duration must be at least {MIN_LOCK_FLOOR}s (180 days), "
                f"got {self.min_lock_duration}s"
            )
        if self.weight_scale <= 0:
            raise ConfigurationError("weight_scale must be positive")
        if not self.custody_address:
            raise ConfigurationError("custody_address cannot be empty")
        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Build a config from TOKENVAULT_* environment variables."""
        config = cls(
            min_lock_duration=_get_int("TOKENVAULT_MIN_LOCK_DAYS", 180) * SECONDS_PER_DAY,
            weight_scale=_get_int("TOKENVAULT_WEIGHT_SCALE", WEIGHT_SCALE),
            custody_address=os.getenv("TOKENVAULT_CUSTODY_ADDRESS", CUSTODY_ADDRESS).strip(),
            state_path=os.getenv("TOKENVAULT_STATE_PATH") or None,
            log_level=os.getenv("TOKENVAULT_LOG_LEVEL", "INFO").strip(),
            log_file=os.getenv("TOKENVAULT_LOG_FILE") or None,
            environment=os.getenv("TOKENVAULT_ENVIRONMENT", "development").strip(),
        )
        logger.debug(
            "Loaded vault configuration",
            extra={
                "event": "config.loaded",
                "environment": config.environment,
                "min_lock_duration": config.min_lock_duration,
            },
        )
        return config
