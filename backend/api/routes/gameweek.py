"""
Gameweek lifecycle endpoints: status, lock, stats ingestion, scoring, advance.
"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException

from api.errors import to_http_exception
from api.models import StatsIngestRequest, ScoreRequest, AdvanceRequest
from engine.errors import LeagueError
from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


def _gameweek_dict(gameweek):
    if gameweek is None:
        return None
    return {
        "number": gameweek.number,
        "status": gameweek.status,
        "deadline": gameweek.deadline.isoformat(),
        "lock_at": gameweek.lock_at.isoformat(),
    }


@router.get("/gameweek")
async def get_gameweek():
    """Get current gameweek info and time until lock."""
    try:
        return get_dependencies().clock.status()
    except Exception as e:
        logger.error(f"Error getting gameweek: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/gameweek/lock")
async def lock_gameweek():
    """Lock the current gameweek now."""
    try:
        gameweek = get_dependencies().league_service.lock_gameweek()
        return {"success": True, "gameweek": _gameweek_dict(gameweek)}
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error locking gameweek: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/gameweek/stats")
async def ingest_stats(request: StatsIngestRequest):
    """Store tabulated player stats for a gameweek."""
    try:
        lines = {p.player_id: p.to_stat_line() for p in request.players}
        written = get_dependencies().league_service.ingest_stats(request.gameweek, lines)
        return {"success": True, "gameweek": request.gameweek, "players": written}
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error ingesting stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/gameweek/score")
async def score_gameweek(request: Optional[ScoreRequest] = None):
    """Score one roster, or run the scoring batch for every roster."""
    try:
        service = get_dependencies().league_service
        if request is None or request.roster_id is None:
            return service.score_all()

        result = service.score_gameweek(request.roster_id)
        return {
            "roster_id": result.roster_id,
            "gameweek": result.gameweek,
            "status": result.status,
            "weekly_points": result.weekly_points,
            "total_points": result.total_points,
            "missing_player_ids": result.missing_player_ids,
        }
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error scoring gameweek: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/gameweek/advance")
async def advance_gameweek(request: AdvanceRequest):
    """Archive the scored gameweek and open the next one."""
    try:
        gameweek = get_dependencies().league_service.advance_gameweek(request.deadline)
        return {"success": True, "gameweek": _gameweek_dict(gameweek)}
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error advancing gameweek: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
