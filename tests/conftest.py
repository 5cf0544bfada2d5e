"""
Pytest Fixtures for League Tests

Provides shared fixtures:
- Temporary SQLite database per test
- Seeded player catalogue
- Gameweek clock with a controllable "now"
- LeagueService and a ready-made roster
"""

import os
import sys
from datetime import datetime, timedelta

import pytest

# Add backend to path for imports
backend_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "backend")
if backend_path not in sys.path:
    sys.path.insert(0, backend_path)

from database.crud import DatabaseManager
from engine.models import StatLine
from services.gameweek_clock import GameweekClock
from services.league_service import LeagueService
from settings import LeagueSettings


# ============================================================================
# CATALOGUE
# ============================================================================

# name -> (position, price in millions)
CATALOGUE = {
    "Alisson": ("GK", 12.0),
    "Raya": ("GK", 9.0),
    "Ederson": ("GK", 11.0),
    "Rice": ("CDM", 14.0),
    "Caicedo": ("CDM", 12.5),
    "Rodri": ("CDM", 15.0),
    "Kante": ("CDM", 10.0),
    "Martinelli": ("LW", 15.0),
    "Son": ("LW", 20.0),
    "Vinicius": ("LW", 25.0),
    "Bowen": ("RW", 14.0),
    "Saka": ("RW", 22.0),
    "Salah": ("RW", 28.0),
    "Pickford": ("GK", 8.0),
    "Mainoo": ("CDM", 9.0),
    "Garnacho": ("LW", 11.0),
    "Kudus": ("RW", 13.0),
}

START_TIME = datetime(2026, 8, 1, 12, 0, 0)


class FakeNow:
    """Mutable clock for tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def played(goals=0, assists=0, saves=0, clean_sheet=False, own_goals=0) -> StatLine:
    """Stat line for a player who appeared."""
    return StatLine(
        goals=goals, assists=assists, saves=saves,
        clean_sheet=clean_sheet, own_goals=own_goals, played=True
    )


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'league.db'}"


@pytest.fixture
def db(db_url):
    manager = DatabaseManager(db_url)
    yield manager
    manager.engine.dispose()


@pytest.fixture
def players(db):
    """Seed the catalogue. Returns name -> player id."""
    return {
        name: db.add_player(name, position, int(round(price * 10)))
        for name, (position, price) in CATALOGUE.items()
    }


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def now():
    return FakeNow(START_TIME)


@pytest.fixture
def settings(db_url):
    return LeagueSettings(database_url=db_url)


@pytest.fixture
def clock(db, now):
    return GameweekClock(db, lock_minutes=60, now=now)


@pytest.fixture
def service(db, settings, clock, players):
    return LeagueService(db, settings=settings, clock=clock)


@pytest.fixture
def lineup(players):
    """A valid lineup worth 96.5m (starters 67.5m, subs 29.0m)."""
    return {
        "starters": [
            players["Alisson"], players["Rice"], players["Caicedo"],
            players["Martinelli"], players["Bowen"],
        ],
        "subs": [players["Raya"], players["Son"]],
        "captain_id": players["Martinelli"],
        "vice_captain_id": players["Bowen"],
    }


@pytest.fixture
def roster(service, lineup):
    return service.create_roster(user_id=1, name="Test Eleven", **lineup)


@pytest.fixture
def gameweek(service, now):
    """Gameweek 1 with its deadline one day out (locks 60 minutes before)."""
    return service.advance_gameweek(now.now + timedelta(days=1))


def lock_round(service, now):
    """Move the clock past the lock time and lock the current gameweek."""
    gameweek = service.clock.current()
    now.now = gameweek.lock_at + timedelta(minutes=1)
    return service.lock_gameweek()


def ingest_quiet(service, gameweek_number, player_ids, overrides=None):
    """Ingest a stat line for every player: played, nothing else unless overridden."""
    lines = {pid: played() for pid in player_ids}
    lines.update(overrides or {})
    return service.ingest_stats(gameweek_number, lines)


@pytest.fixture
def rival_lineup(players):
    """A second valid lineup with no overlap with `lineup` (102.0m)."""
    return {
        "starters": [
            players["Ederson"], players["Rodri"], players["Kante"],
            players["Vinicius"], players["Saka"],
        ],
        "subs": [players["Pickford"], players["Garnacho"]],
        "captain_id": players["Vinicius"],
        "vice_captain_id": players["Saka"],
    }
