"""
Roster endpoints: create, view, swap players, set captaincy.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.errors import to_http_exception
from api.models import CreateRosterRequest, SwapRequest, CaptaincyRequest
from engine.errors import LeagueError
from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/rosters", status_code=201)
async def create_roster(request: CreateRosterRequest):
    """Create the user's roster (one per user)."""
    try:
        service = get_dependencies().league_service
        roster = service.create_roster(
            user_id=request.user_id,
            name=request.name,
            starters=request.starters,
            subs=request.subs,
            captain_id=request.captain_id,
            vice_captain_id=request.vice_captain_id,
        )
        return {
            "success": True,
            "message": "Team created successfully",
            "team": service.get_roster(roster.id),
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating roster: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create team: {str(e)}")


@router.get("/rosters/{roster_id}")
async def get_roster(roster_id: int):
    """Roster dashboard: lineup, bank, points, chips and transfer counters."""
    try:
        return {"team": get_dependencies().league_service.get_roster(roster_id)}
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting roster {roster_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/rosters/{roster_id}/swap")
async def swap_player(roster_id: int, request: SwapRequest):
    """Sell one player and buy another in the same slot."""
    try:
        service = get_dependencies().league_service
        roster = service.propose_swap(roster_id, request.player_out_id, request.player_in_id)
        return {
            "success": True,
            "message": "Transfer completed successfully",
            "team": service.get_roster(roster.id),
            "transfer_cost": roster.transfers.cost,
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error processing transfer for roster {roster_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process transfer: {str(e)}")


@router.get("/rosters/{roster_id}/transfers")
async def get_transfers(roster_id: int, gameweek: Optional[int] = Query(None, ge=0)):
    try:
        transfers = get_dependencies().league_service.get_transfer_history(roster_id, gameweek)
        return {"transfers": transfers, "count": len(transfers)}
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting transfers for roster {roster_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/rosters/{roster_id}/captaincy")
async def set_captaincy(roster_id: int, request: CaptaincyRequest):
    try:
        service = get_dependencies().league_service
        roster = service.set_captaincy(roster_id, request.captain_id, request.vice_captain_id)
        return {
            "success": True,
            "captain_id": roster.captain_id,
            "vice_captain_id": roster.vice_captain_id,
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error setting captaincy for roster {roster_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
