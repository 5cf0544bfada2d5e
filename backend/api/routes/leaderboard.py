"""
Leaderboard endpoint.
"""

import logging
from fastapi import APIRouter, HTTPException, Query

from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/leaderboard")
async def get_leaderboard(
    limit: int = Query(50, ge=1, le=200),
    page: int = Query(1, ge=1)
):
    """Rosters ranked by total points, then this week's points, then creation time."""
    try:
        return get_dependencies().league_service.get_leaderboard(limit=limit, page=page)
    except Exception as e:
        logger.error(f"Error getting leaderboard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
