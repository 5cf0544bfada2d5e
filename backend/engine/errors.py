"""
League Errors

Every rule violation raised by the engine or the service layer. All of them are
raised before anything is written.
"""

from typing import Optional


class LeagueError(Exception):
    """Base class for rejected league operations."""
    code = "league_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormationInvalid(LeagueError):
    """Lineup does not have the required positional shape."""
    code = "formation_invalid"

    def __init__(self, scope: str, message: str):
        super().__init__(message)
        self.scope = scope  # "starters" or "subs"


class BudgetExceeded(LeagueError):
    code = "budget_exceeded"


class PlayerAlreadyOwned(LeagueError):
    code = "player_already_owned"

    def __init__(self, message: str, player_ids: Optional[list] = None):
        super().__init__(message)
        self.player_ids = player_ids or []


class ChipAlreadyUsed(LeagueError):
    code = "chip_already_used"


class ChipConflict(LeagueError):
    """Another chip is already active this gameweek."""
    code = "chip_conflict"


class ChipNotAllowed(LeagueError):
    """Chip preconditions (captain set, full bench) are not met."""
    code = "chip_not_allowed"


class NoActiveChip(LeagueError):
    code = "no_active_chip"


class TransferWindowLocked(LeagueError):
    code = "transfer_window_locked"


class RosterAlreadyExists(LeagueError):
    code = "roster_already_exists"


class InvalidRoster(LeagueError):
    """Malformed roster request (name, duplicates, unknown slots)."""
    code = "invalid_roster"


class InvalidCaptaincy(LeagueError):
    code = "invalid_captaincy"


class RosterNotFound(LeagueError):
    code = "roster_not_found"


class PlayerNotFound(LeagueError):
    code = "player_not_found"


class GameweekStateError(LeagueError):
    """Lifecycle step requested out of order (e.g. advancing an unscored round)."""
    code = "gameweek_state"


class ConcurrentModification(LeagueError):
    """Optimistic version check failed; the caller may retry."""
    code = "concurrent_modification"


class InvalidPlayer(LeagueError):
    """Catalogue entry with an unknown position or a bad price."""
    code = "invalid_player"
