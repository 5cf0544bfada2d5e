"""
League Domain Models

Plain dataclasses shared by the engine, the service layer and persistence.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from constants import ChipType, GameweekStatus, PRICE_UNIT


@dataclass
class StatLine:
    """One player's tabulated performance for a gameweek."""
    goals: int = 0
    assists: int = 0
    saves: int = 0
    clean_sheet: bool = False
    own_goals: int = 0
    played: bool = False


@dataclass
class SeasonTotals:
    """Season-accumulated player statistics."""
    appearances: int = 0
    goals: int = 0
    assists: int = 0
    saves: int = 0
    clean_sheets: int = 0
    own_goals: int = 0
    total_points: float = 0.0


@dataclass
class Player:
    """Catalogue player."""
    id: int
    name: str
    position: str  # GK, CDM, LW, RW
    now_cost: int  # Price in 0.1m units (e.g., 125 = 12.5m)
    overall: int = 75
    owner_id: Optional[int] = None
    season: SeasonTotals = field(default_factory=SeasonTotals)
    version: int = 0

    @property
    def price(self) -> float:
        """Get price in millions."""
        return self.now_cost / PRICE_UNIT


@dataclass
class TransferState:
    """Per-gameweek transfer counters."""
    free_transfers: int = 1
    made: int = 0
    cost: int = 0


@dataclass
class ChipState:
    """Season chip flags plus the chip active this gameweek."""
    used: Dict[str, bool] = field(
        default_factory=lambda: {chip: False for chip in ChipType.ALL}
    )
    active: Optional[str] = None

    def remaining(self) -> List[str]:
        return [chip for chip in ChipType.ALL if not self.used.get(chip)]


@dataclass
class LineupSnapshot:
    """Roster state captured when Free Hit is played."""
    starters: List[int]
    subs: List[int]
    captain_id: int
    vice_captain_id: int
    bank: int
    transfers_made: int = 0


@dataclass
class Roster:
    """A user's squad: five starters and two substitutes."""
    id: Optional[int]
    user_id: int
    name: str
    bank: int  # Budget remaining in 0.1m units
    starters: List[int]
    subs: List[int]
    captain_id: int
    vice_captain_id: int
    points: float = 0.0
    weekly_points: float = 0.0
    chips: ChipState = field(default_factory=ChipState)
    transfers: TransferState = field(default_factory=TransferState)
    free_hit_snapshot: Optional[LineupSnapshot] = None
    highest_weekly_score: float = 0.0
    total_transfers: int = 0
    version: int = 0
    created_at: Optional[datetime] = None

    @property
    def player_ids(self) -> List[int]:
        """Starters followed by substitutes."""
        return list(self.starters) + list(self.subs)

    @property
    def budget(self) -> float:
        """Get money in the bank in millions."""
        return self.bank / PRICE_UNIT

    def reserved_ids(self) -> List[int]:
        """Players held back for a Free Hit restore but not in the lineup."""
        if self.free_hit_snapshot is None:
            return []
        current = set(self.player_ids)
        snapshot = self.free_hit_snapshot.starters + self.free_hit_snapshot.subs
        return [pid for pid in snapshot if pid not in current]


@dataclass
class Gameweek:
    """A scoring round and its lock window."""
    number: int
    deadline: datetime
    lock_at: datetime
    status: str = GameweekStatus.OPEN

    def is_locked(self, now: datetime) -> bool:
        return self.status != GameweekStatus.OPEN or now >= self.lock_at


@dataclass
class ScoreBreakdown:
    """Points for one roster in one gameweek."""
    starter_points: Dict[int, float]
    bench_points: Dict[int, float]
    captain_points: float
    bench_total: float
    transfer_cost: int
    total: float
    chip: Optional[str] = None


@dataclass
class ScoreResult:
    """Result handed to the scoring batch and leaderboard collaborators."""
    roster_id: int
    gameweek: int
    status: str
    weekly_points: float = 0.0
    total_points: float = 0.0
    missing_player_ids: List[int] = field(default_factory=list)
    breakdown: Optional[ScoreBreakdown] = None
