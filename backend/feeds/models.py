"""
Stats Feed Models

Pydantic models for the external player-stats feed.
"""

from typing import List
from pydantic import BaseModel, Field

from engine.models import StatLine


class PlayerStatPayload(BaseModel):
    """One player's tabulated gameweek stats as published by the feed."""

    player_id: int = Field(alias="playerId")
    goals: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    saves: int = Field(0, ge=0)
    clean_sheet: bool = Field(False, alias="cleanSheet")
    own_goals: int = Field(0, ge=0, alias="ownGoals")
    played: bool = False

    class Config:
        populate_by_name = True

    def to_stat_line(self) -> StatLine:
        return StatLine(
            goals=self.goals,
            assists=self.assists,
            saves=self.saves,
            clean_sheet=self.clean_sheet,
            own_goals=self.own_goals,
            played=self.played,
        )


class GameweekStatsPayload(BaseModel):
    """Feed response for one gameweek."""
    gameweek: int
    finalized: bool = False
    players: List[PlayerStatPayload] = []
