"""Application settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from catalogkeeper.persistence.config import DatabaseConfig

DEFAULT_MIN_PRICE = 99
DEFAULT_LOG_LEVEL = "WARNING"

# Name of the persisted setting read by the minimal price validator
MIN_PRICE_SETTING = "minimalPrice"


@dataclass
class Settings:
    """Runtime settings.

    Environment variables:
        DATABASE_URL / CATALOGKEEPER_DB_PATH: see DatabaseConfig.from_env
        CATALOGKEEPER_MIN_PRICE: seed for the minimalPrice setting
        CATALOGKEEPER_LOG_LEVEL: logging level name
    """

    database: DatabaseConfig = field(
        default_factory=lambda: DatabaseConfig(url="sqlite:///catalogkeeper.db")
    )
    minimal_price: int = DEFAULT_MIN_PRICE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        raw_price = os.environ.get("CATALOGKEEPER_MIN_PRICE")
        try:
            minimal_price = int(raw_price) if raw_price else DEFAULT_MIN_PRICE
        except ValueError:
            raise ValueError(
                f"CATALOGKEEPER_MIN_PRICE must be an integer, got '{raw_price}'"
            ) from None

        return cls(
            database=DatabaseConfig.from_env(base_path),
            minimal_price=minimal_price,
            log_level=os.environ.get("CATALOGKEEPER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
