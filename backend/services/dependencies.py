"""
Shared dependencies for the application.

This module holds initialized services that are shared across routes.
Initialized once at app startup and accessed via get_dependencies().
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class Dependencies:
    """Container for all shared dependencies."""
    settings: any
    db_manager: any
    clock: any
    league_service: any
    stats_feed: any = None


# Global dependencies instance - initialized by init_dependencies()
_deps: Optional[Dependencies] = None


def init_dependencies(settings=None, now: Optional[Callable[[], datetime]] = None):
    """
    Initialize all dependencies. Called once at app startup.

    Args:
        settings: LeagueSettings (defaults to LeagueSettings.from_env())
        now: Optional clock function for the gameweek clock
    """
    global _deps

    if _deps is not None:
        return _deps

    # Import here to avoid circular imports
    from settings import LeagueSettings
    from database.crud import DatabaseManager
    from feeds.client import StatsFeedClient
    from .gameweek_clock import GameweekClock
    from .league_service import LeagueService

    logger.info("Initializing application dependencies...")

    settings = settings or LeagueSettings.from_env()

    # Initialize database manager
    db_manager = DatabaseManager(settings.database_url)

    clock = GameweekClock(db_manager, lock_minutes=settings.lock_minutes, now=now)

    stats_feed = None
    if settings.stats_feed_url:
        stats_feed = StatsFeedClient(settings.stats_feed_url)
        logger.info(f"Stats feed: {settings.stats_feed_url}")
    else:
        logger.info("Stats feed not configured - stats must be posted to /api/gameweek/stats")

    league_service = LeagueService(db_manager, settings=settings, clock=clock, stats_feed=stats_feed)

    _deps = Dependencies(
        settings=settings,
        db_manager=db_manager,
        clock=clock,
        league_service=league_service,
        stats_feed=stats_feed,
    )

    logger.info("All dependencies initialized successfully")
    return _deps


def get_dependencies() -> Dependencies:
    """Get initialized dependencies. Raises if not initialized."""
    if _deps is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")
    return _deps


def reset_dependencies() -> None:
    """Drop the shared instance so the next init_dependencies() builds a fresh one."""
    global _deps
    _deps = None
