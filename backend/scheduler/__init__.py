"""Background gameweek jobs."""

from .jobs import LeagueScheduler

__all__ = ["LeagueScheduler"]
