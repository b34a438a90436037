"""Settings for stockroom runs.

Resolved once per CLI invocation from options and the environment.
Self-contained: reads os.environ (or a supplied mapping) and nothing else.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DB_ENV = "STOCKROOM_DB"
LOW_STOCK_ENV = "STOCKROOM_LOW_STOCK"

DEFAULT_LOW_STOCK = 5


def default_db_path() -> Path:
    """~/.stockroom/inventory.json"""
    return Path.home() / ".stockroom" / "inventory.json"


@dataclass(frozen=True)
class Settings:
    db: str
    low_stock_threshold: int = DEFAULT_LOW_STOCK

    @classmethod
    def from_env(
        cls,
        db: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """Build settings. An explicit `db` wins over STOCKROOM_DB.

        Raises ValueError if STOCKROOM_LOW_STOCK is not a non-negative integer.
        """
        env = os.environ if env is None else env
        location = db or env.get(DB_ENV) or str(default_db_path())

        raw = env.get(LOW_STOCK_ENV, "").strip()
        threshold = DEFAULT_LOW_STOCK
        if raw:
            try:
                threshold = int(raw)
            except ValueError:
                raise ValueError(f"{LOW_STOCK_ENV} must be an integer, got {raw!r}") from None
            if threshold < 0:
                raise ValueError(f"{LOW_STOCK_ENV} must be >= 0, got {threshold}")

        return cls(db=location, low_stock_threshold=threshold)
