"""
League Scheduler

Automated gameweek jobs.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from constants import GameweekStatus

logger = logging.getLogger(__name__)


class LeagueScheduler:
    """
    Scheduler for gameweek lifecycle tasks.

    Jobs:
    - Lock: fires at the current gameweek's lock time
    - Scoring tick: pulls stats and scores every roster until the round is complete
    """

    def __init__(self, league_service, scoring_interval_minutes: int = 5):
        """
        Initialize the scheduler.

        Args:
            league_service: LeagueService instance
            scoring_interval_minutes: Minutes between scoring ticks
        """
        self.scheduler = BackgroundScheduler()
        self.service = league_service
        self.scoring_interval_minutes = scoring_interval_minutes
        self._scheduled_lock: Optional[int] = None

        self._setup_jobs()

    def _setup_jobs(self) -> None:
        """Set up scheduled jobs."""
        self.scheduler.add_job(
            self.run_scoring_tick,
            CronTrigger(minute=f"*/{self.scoring_interval_minutes}"),
            id="scoring_tick",
            name="Scoring Tick",
            replace_existing=True
        )

        logger.info("Scheduler jobs set up")

    def start(self) -> None:
        """Start the scheduler."""
        if not self.scheduler.running:
            self.scheduler.start()
            self.schedule_lock()
            logger.info("League Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("League Scheduler stopped")

    def schedule_lock(self) -> Optional[datetime]:
        """Schedule the lock job for the current open gameweek."""
        gameweek = self.service.clock.current()
        if gameweek is None or gameweek.status != GameweekStatus.OPEN:
            return None
        if self._scheduled_lock == gameweek.number:
            return gameweek.lock_at

        try:
            self.scheduler.remove_job("gameweek_lock")
        except JobLookupError:
            pass

        self.scheduler.add_job(
            self.run_lock,
            DateTrigger(run_date=gameweek.lock_at),
            id="gameweek_lock",
            name=f"Lock Gameweek {gameweek.number}",
            replace_existing=True
        )
        self._scheduled_lock = gameweek.number
        logger.info(f"Scheduled lock for Gameweek {gameweek.number} at {gameweek.lock_at}")
        return gameweek.lock_at

    def run_lock(self) -> None:
        """Lock the current gameweek if its lock time has passed."""
        try:
            gameweek = self.service.clock.lock_if_due()
            if gameweek:
                logger.info(f"Gameweek {gameweek.number} locked by scheduler")
        except Exception as e:
            logger.error(f"Failed to lock gameweek: {e}", exc_info=True)

    def run_scoring_tick(self) -> Optional[Dict[str, Any]]:
        """Pull stats and score the locked gameweek; picks up newly opened rounds."""
        try:
            summary = self.service.score_all()
            self.schedule_lock()
            return summary
        except Exception as e:
            logger.error(f"Scoring tick failed: {e}", exc_info=True)
            return None
