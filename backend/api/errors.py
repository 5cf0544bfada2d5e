"""
Mapping from league errors to HTTP responses.
"""

from fastapi import HTTPException

from engine.errors import (
    LeagueError, FormationInvalid, PlayerAlreadyOwned, TransferWindowLocked,
    RosterNotFound, PlayerNotFound, RosterAlreadyExists, ChipAlreadyUsed,
    ChipConflict, ConcurrentModification, GameweekStateError
)

STATUS_CODES = {
    RosterNotFound: 404,
    PlayerNotFound: 404,
    TransferWindowLocked: 423,
    PlayerAlreadyOwned: 409,
    RosterAlreadyExists: 409,
    ChipAlreadyUsed: 409,
    ChipConflict: 409,
    ConcurrentModification: 409,
    GameweekStateError: 409,
}


def to_http_exception(error: LeagueError) -> HTTPException:
    """Build the HTTPException for a rejected league operation (400 unless mapped)."""
    status_code = 400
    for error_type, code in STATUS_CODES.items():
        if isinstance(error, error_type):
            status_code = code
            break

    detail = {"code": error.code, "message": error.message}
    if isinstance(error, FormationInvalid):
        detail["scope"] = error.scope
    if isinstance(error, PlayerAlreadyOwned):
        detail["player_ids"] = error.player_ids
    return HTTPException(status_code=status_code, detail=detail)
