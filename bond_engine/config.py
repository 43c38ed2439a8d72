"""
Engine configuration.

Settings are read from environment variables prefixed with ``BOND_ENGINE_``.
Every setting has a default, so nothing needs to be exported for normal use.

Environment Variables
---------------------
BOND_ENGINE_DEFAULT_CURRENCY : str
    ISO 4217 code used when a face value is given as a plain number.
BOND_ENGINE_DEFAULT_DAY_COUNT : str
    Day count label used when none is given (default "ACTUAL/365").
BOND_ENGINE_YTM_MAX_ITERATIONS : int
    Newton-Raphson iteration cap.
BOND_ENGINE_LOG_LEVEL : str
    Level installed by ``Settings.configure_logging``.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any


def _get_env(key: str, default: Any, value_type: type = str) -> Any:
    env_value = os.environ.get(f"BOND_ENGINE_{key.upper()}")
    if env_value is None:
        return default

    try:
        if value_type == bool:
            return env_value.lower() in ("true", "1", "yes", "on")
        if value_type == int:
            return int(env_value)
        if value_type == float:
            return float(env_value)
        return env_value
    except (ValueError, TypeError):
        return default


class Settings:
    """Engine defaults loaded from the environment."""

    def __init__(self) -> None:
        # Bond defaults
        self.default_currency: str = _get_env("DEFAULT_CURRENCY", "USD", str).upper()
        self.default_face_value: float = _get_env("DEFAULT_FACE_VALUE", 5000.0, float)
        self.default_coupon_rate: float = _get_env("DEFAULT_COUPON_RATE", 0.05, float)
        self.default_maturity_years: int = _get_env("DEFAULT_MATURITY_YEARS", 5, int)
        self.default_frequency: int = _get_env("DEFAULT_FREQUENCY", 2, int)
        self.default_day_count: str = _get_env("DEFAULT_DAY_COUNT", "ACTUAL/365", str)

        # Solver
        self.ytm_max_iterations: int = _get_env("YTM_MAX_ITERATIONS", 100, int)
        self.ytm_tolerance: float = _get_env("YTM_TOLERANCE", 1e-10, float)
        self.yield_curve_points: int = _get_env("YIELD_CURVE_POINTS", 10, int)

        # Logging
        self.log_level: str = _get_env("LOG_LEVEL", "WARNING", str)
        self.log_format: str = _get_env("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s", str)

    @property
    def log_level_int(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.WARNING)

    def configure_logging(self) -> None:
        """Install a root handler with the configured level and format."""
        logging.basicConfig(level=self.log_level_int, format=self.log_format)


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
