"""
League Settings

Tunable league rules read from environment variables.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from constants import (
    DEFAULT_BUDGET_LIMIT, DEFAULT_TRANSFER_COST, DEFAULT_FREE_TRANSFERS,
    DEFAULT_LOCK_MINUTES, PRICE_UNIT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeagueSettings:
    """League rules shared by the engine, the service layer and the scheduler."""
    budget_limit: float = DEFAULT_BUDGET_LIMIT
    transfer_cost: int = DEFAULT_TRANSFER_COST
    free_transfers: int = DEFAULT_FREE_TRANSFERS
    lock_minutes: int = DEFAULT_LOCK_MINUTES
    database_url: str = "sqlite:///fantasy_league.db"
    stats_feed_url: Optional[str] = None
    scoring_interval_minutes: int = 5

    @property
    def budget_cap(self) -> int:
        """Budget cap in price units (tenths of a million)."""
        return int(round(self.budget_limit * PRICE_UNIT))

    @classmethod
    def from_env(cls) -> "LeagueSettings":
        """Build settings from the environment, falling back to defaults."""
        settings = cls(
            budget_limit=float(os.getenv("BUDGET_LIMIT", DEFAULT_BUDGET_LIMIT)),
            transfer_cost=int(os.getenv("TRANSFER_COST_POINTS", DEFAULT_TRANSFER_COST)),
            free_transfers=int(os.getenv("DEFAULT_FREE_TRANSFERS", DEFAULT_FREE_TRANSFERS)),
            lock_minutes=int(os.getenv("LOCK_MINUTES", DEFAULT_LOCK_MINUTES)),
            database_url=os.getenv("DATABASE_URL", "sqlite:///fantasy_league.db"),
            stats_feed_url=os.getenv("STATS_FEED_URL") or None,
            scoring_interval_minutes=int(os.getenv("SCORING_INTERVAL_MINUTES", "5")),
        )
        logger.debug(
            f"League settings: budget={settings.budget_limit}, "
            f"transfer_cost={settings.transfer_cost}, lock={settings.lock_minutes}min"
        )
        return settings
