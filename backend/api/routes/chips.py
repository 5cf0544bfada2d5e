"""
Chip API endpoints.

Wildcard, Triple Captain, Bench Boost and Free Hit: status, history, use and cancel.
"""

import logging
from fastapi import APIRouter, HTTPException

from api.errors import to_http_exception
from api.models import UseChipRequest
from engine.errors import LeagueError
from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/chips/{roster_id}")
async def get_chip_status(roster_id: int):
    """Which chips are used, active and playable right now."""
    try:
        return get_dependencies().league_service.get_chip_status(roster_id)
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting chip status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/chips/{roster_id}/history")
async def get_chip_history(roster_id: int):
    try:
        return get_dependencies().league_service.get_chip_history(roster_id)
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting chip history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/chips/{roster_id}/use")
async def use_chip(roster_id: int, request: UseChipRequest):
    """Play a chip for the current gameweek."""
    try:
        service = get_dependencies().league_service
        roster = service.use_chip(roster_id, request.chip_type)
        return {
            "success": True,
            "message": f"{request.chip_type} activated",
            "active_chip": roster.chips.active,
            "chips": service.get_chip_status(roster_id)["chips"],
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error using chip: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to use chip: {str(e)}")


@router.post("/chips/{roster_id}/cancel")
async def cancel_chip(roster_id: int):
    """Cancel the active chip before the gameweek locks."""
    try:
        service = get_dependencies().league_service
        service.cancel_chip(roster_id)
        return {
            "success": True,
            "message": "Chip cancelled",
            "chips": service.get_chip_status(roster_id)["chips"],
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error cancelling chip: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to cancel chip: {str(e)}")
