"""
Services layer for business logic.
"""

from .dependencies import get_dependencies, Dependencies, init_dependencies, reset_dependencies
from .gameweek_clock import GameweekClock
from .league_service import LeagueService

__all__ = [
    'get_dependencies',
    'Dependencies',
    'init_dependencies',
    'reset_dependencies',
    'GameweekClock',
    'LeagueService',
]
