"""
Shared API request/response models.

These are Pydantic models used across multiple routes.
"""

from datetime import datetime
from typing import List, Dict, Optional
from pydantic import BaseModel, Field

from feeds.models import PlayerStatPayload


class CreateRosterRequest(BaseModel):
    """Request to create a user's roster."""
    user_id: int
    name: str
    starters: List[int]  # 1 GK, 2 CDM, 1 LW, 1 RW
    subs: List[int]  # 1 GK/CDM, 1 LW/RW
    captain_id: int
    vice_captain_id: int


class SwapRequest(BaseModel):
    """Sell one player and buy another."""
    player_out_id: int
    player_in_id: int


class CaptaincyRequest(BaseModel):
    captain_id: int
    vice_captain_id: int


class UseChipRequest(BaseModel):
    chip_type: str  # wildcard, tripleCaptain, benchBoost, freeHit


class StatsIngestRequest(BaseModel):
    """Tabulated stats for one gameweek."""
    gameweek: int
    players: List[PlayerStatPayload]


class ScoreRequest(BaseModel):
    """Score one roster, or every roster when roster_id is omitted."""
    roster_id: Optional[int] = None


class AdvanceRequest(BaseModel):
    """Start the next gameweek with its first-kickoff deadline."""
    deadline: datetime


class PlayerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    position: str  # GK, CDM, LW, RW
    price: float = Field(gt=0)  # In millions
    overall: int = Field(75, ge=0, le=100)


class PlayerResponse(BaseModel):
    id: int
    name: str
    position: str
    price: float
    overall: int
    owner_id: Optional[int] = None
    season: Dict[str, float] = {}
