"""
API Routes Package

All route modules are aggregated here for easy importing into main.py.
"""

from .health import router as health_router
from .rosters import router as rosters_router
from .chips import router as chips_router
from .gameweek import router as gameweek_router
from .players import router as players_router
from .leaderboard import router as leaderboard_router

__all__ = [
    'health_router',
    'rosters_router',
    'chips_router',
    'gameweek_router',
    'players_router',
    'leaderboard_router',
]
