"""
Player catalogue endpoints.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.errors import to_http_exception
from api.models import PlayerCreateRequest, PlayerResponse
from engine.errors import LeagueError
from services.dependencies import get_dependencies

logger = logging.getLogger(__name__)

router = APIRouter()


def _player_response(player) -> PlayerResponse:
    return PlayerResponse(
        id=player.id,
        name=player.name,
        position=player.position,
        price=player.price,
        overall=player.overall,
        owner_id=player.owner_id,
        season=asdict(player.season),
    )


@router.get("/players")
async def get_players(
    position: Optional[str] = Query(None, description="GK, CDM, LW or RW"),
    max_price: Optional[float] = Query(None, gt=0),
    available: bool = Query(False, description="Only players nobody owns"),
    sort_by: str = Query("overall", pattern="^(overall|price|points|name)$"),
    limit: int = Query(100, ge=1, le=500)
):
    """List players, filterable by position, price and availability."""
    try:
        players = get_dependencies().league_service.list_players(
            position=position.upper() if position else None,
            max_price=max_price,
            available_only=available,
            sort_by=sort_by,
            limit=limit,
        )
        return {"players": [_player_response(p) for p in players], "total": len(players)}
    except Exception as e:
        logger.error(f"Error listing players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: int):
    try:
        return _player_response(get_dependencies().league_service.get_player(player_id))
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/players", status_code=201, response_model=PlayerResponse)
async def create_player(request: PlayerCreateRequest):
    """Add a player to the catalogue."""
    try:
        player = get_dependencies().league_service.add_player(
            request.name, request.position, request.price, request.overall
        )
        return _player_response(player)
    except LeagueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
