"""
Gameweek Clock

Single source of truth for the current round and whether it is locked.
Roster edits and the scoring batch both read it.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from constants import GameweekStatus, DEFAULT_LOCK_MINUTES
from engine.errors import TransferWindowLocked
from engine.models import Gameweek

logger = logging.getLogger(__name__)


class GameweekClock:
    """
    Gameweek provider backed by the gameweeks table.

    Lifecycle: open -> locked -> scored -> archived (next round opens).
    """

    def __init__(
        self,
        db,
        lock_minutes: int = DEFAULT_LOCK_MINUTES,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            db: DatabaseManager
            lock_minutes: Minutes before the deadline at which the round locks
            now: Clock function (defaults to datetime.utcnow)
        """
        self.db = db
        self.lock_minutes = lock_minutes
        self._now = now or datetime.utcnow

    def now(self) -> datetime:
        return self._now()

    def lock_time(self, deadline: datetime) -> datetime:
        return deadline - timedelta(minutes=self.lock_minutes)

    def current(self) -> Optional[Gameweek]:
        return self.db.get_current_gameweek()

    def open_gameweek(self, deadline: datetime) -> Gameweek:
        """Open the next round with the given first-kickoff deadline."""
        number = self.db.get_latest_gameweek_number() + 1
        return self.db.create_gameweek(number, deadline, self.lock_time(deadline))

    def ensure_open(self) -> Optional[Gameweek]:
        """
        Get the current gameweek, rejecting edits once it has locked.

        An edit after lock time is rejected even if the status has not
        been flipped yet. Returns None before the first round is opened.

        Raises:
            TransferWindowLocked
        """
        gameweek = self.current()
        if gameweek is None:
            return None
        if gameweek.is_locked(self.now()):
            raise TransferWindowLocked(
                f"Gameweek {gameweek.number} is locked. Changes reopen when the next gameweek starts."
            )
        return gameweek

    def lock_if_due(self) -> Optional[Gameweek]:
        """Lock the current gameweek if its lock time has passed."""
        gameweek = self.current()
        if gameweek is None or gameweek.status != GameweekStatus.OPEN:
            return None
        if self.now() < gameweek.lock_at:
            return None
        return self.lock(gameweek.number)

    def lock(self, number: int) -> Optional[Gameweek]:
        if self.db.set_gameweek_status(number, GameweekStatus.LOCKED, expected=GameweekStatus.OPEN):
            logger.info(f"Gameweek {number} locked")
        return self.db.get_gameweek(number)

    def mark_scored(self, number: int) -> bool:
        done = self.db.set_gameweek_status(number, GameweekStatus.SCORED, expected=GameweekStatus.LOCKED)
        if done:
            logger.info(f"Gameweek {number} scored")
        return done

    def archive(self, number: int) -> bool:
        return self.db.set_gameweek_status(number, GameweekStatus.ARCHIVED, expected=GameweekStatus.SCORED)

    def status(self) -> Dict[str, Any]:
        """Current round info with time until lock, for display."""
        gameweek = self.current()
        if gameweek is None:
            return {"current": None}

        now = self.now()
        locked = gameweek.is_locked(now)
        remaining = max(timedelta(0), gameweek.lock_at - now)
        hours, rem = divmod(int(remaining.total_seconds()), 3600)
        minutes = rem // 60

        return {
            "current": {
                "number": gameweek.number,
                "status": gameweek.status,
                "deadline": gameweek.deadline.isoformat(),
                "lock_at": gameweek.lock_at.isoformat(),
                "locked": locked,
            },
            "time_until_lock": None if locked else {
                "hours": hours,
                "minutes": minutes,
                "message": f"Deadline in {hours}h {minutes}m",
            },
        }
