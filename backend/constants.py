"""
Constants for the Fantasy League

Centralized constants to avoid magic numbers and strings throughout the codebase.
"""


class PlayerPosition:
    """Player position codes."""
    GK = "GK"    # Goalkeeper
    CDM = "CDM"  # Holding midfielder
    LW = "LW"    # Left wing
    RW = "RW"    # Right wing

    ALL = (GK, CDM, LW, RW)
    DEFENSIVE = (GK, CDM)
    ATTACKING = (LW, RW)


class ChipType:
    """Chip identifiers as used by the API and the database."""
    WILDCARD = "wildcard"
    TRIPLE_CAPTAIN = "tripleCaptain"
    BENCH_BOOST = "benchBoost"
    FREE_HIT = "freeHit"

    ALL = (WILDCARD, TRIPLE_CAPTAIN, BENCH_BOOST, FREE_HIT)


class GameweekStatus:
    """Gameweek lifecycle states."""
    OPEN = "open"
    LOCKED = "locked"
    SCORED = "scored"
    ARCHIVED = "archived"


class ScoreStatus:
    """Outcome of scoring a single roster."""
    SCORED = "scored"
    PENDING = "pending"


# Lineup shape
STARTERS_SIZE = 5
SUBS_SIZE = 2
STARTER_FORMATION = {
    PlayerPosition.GK: 1,
    PlayerPosition.CDM: 2,
    PlayerPosition.LW: 1,
    PlayerPosition.RW: 1,
}

# Roster name limits
MIN_ROSTER_NAME = 3
MAX_ROSTER_NAME = 30

# Defaults (overridable through LeagueSettings)
DEFAULT_BUDGET_LIMIT = 150.0  # millions
DEFAULT_TRANSFER_COST = 4     # points per extra transfer
DEFAULT_FREE_TRANSFERS = 1
DEFAULT_LOCK_MINUTES = 60

# Prices are stored in tenths of a million (e.g. 125 = 12.5m)
PRICE_UNIT = 10
