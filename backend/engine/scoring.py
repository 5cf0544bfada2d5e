"""
Scoring Engine

Convert tabulated weekly stats into gameweek points.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Mapping, Tuple

from constants import PlayerPosition
from .chips import ChipEffect, chip_effect
from .models import Roster, ScoreBreakdown, StatLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    """Points per event for one position."""
    goal: float
    assist: float
    save: float = 0.0
    clean_sheet: float = 0.0
    own_goal: float = -2.0


# Saves and clean sheets only count for the defensive positions
SCORING_TABLE: Dict[str, ScoringWeights] = {
    PlayerPosition.GK: ScoringWeights(goal=5, assist=3, save=0.5, clean_sheet=5),
    PlayerPosition.CDM: ScoringWeights(goal=5, assist=3, save=1, clean_sheet=4),
    PlayerPosition.LW: ScoringWeights(goal=4, assist=2),
    PlayerPosition.RW: ScoringWeights(goal=4, assist=2),
}


def _round1(value: float) -> float:
    """Round to one decimal place, ties toward positive infinity."""
    tenths = (Decimal(str(value)) * 10 + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    return float(tenths / 10)


def player_points(position: str, stats: StatLine) -> float:
    """Raw (unmultiplied) points for one player's gameweek."""
    if not stats.played:
        return 0.0

    weights = SCORING_TABLE[position]
    points = (
        stats.goals * weights.goal
        + stats.assists * weights.assist
        + stats.saves * weights.save
        + stats.own_goals * weights.own_goal
    )
    if stats.clean_sheet:
        points += weights.clean_sheet
    return _round1(points)


def captaincy_multipliers(
    captain_played: bool,
    vice_played: bool,
    effect: ChipEffect
) -> Tuple[float, float]:
    """
    Multipliers for (captain, vice-captain).

    The vice-captain only earns a bonus when standing in for an absent captain.
    When both play the captain is scaled by 1.5 instead of 2.
    """
    if captain_played:
        if effect.captain_multiplier is not None:
            return effect.captain_multiplier, 1.0
        if vice_played:
            return 1.5, 1.0
        return 2.0, 1.0
    if vice_played:
        return 1.0, 2.0
    return 1.0, 1.0


class ScoringEngine:
    """Score a roster as it stood when the gameweek locked."""

    def score(
        self,
        roster: Roster,
        positions: Mapping[int, str],
        stats: Mapping[int, StatLine]
    ) -> ScoreBreakdown:
        """
        Compute one roster's gameweek points.

        Args:
            roster: Roster at lock time
            positions: player_id -> position
            stats: player_id -> stat line (must cover every rostered player)

        Returns:
            ScoreBreakdown with per-player and total points
        """
        effect = chip_effect(roster.chips.active)
        captain_mult, vice_mult = captaincy_multipliers(
            stats[roster.captain_id].played,
            stats[roster.vice_captain_id].played,
            effect,
        )

        starter_points: Dict[int, float] = {}
        captain_points = 0.0
        for pid in roster.starters:
            points = player_points(positions[pid], stats[pid])
            if pid == roster.captain_id:
                points = _round1(points * captain_mult)
                captain_points = points
            elif pid == roster.vice_captain_id:
                points = _round1(points * vice_mult)
                if vice_mult > 1:
                    captain_points = points
            starter_points[pid] = points

        bench_points = {
            pid: player_points(positions[pid], stats[pid]) for pid in roster.subs
        }
        bench_total = _round1(sum(bench_points.values())) if effect.bench_counts else 0.0

        cost = roster.transfers.cost
        total = _round1(sum(starter_points.values()) + bench_total - cost)

        logger.debug(
            f"Roster {roster.id}: starters={sum(starter_points.values())}, "
            f"bench={bench_total}, cost=-{cost}, total={total}"
        )

        return ScoreBreakdown(
            starter_points=starter_points,
            bench_points=bench_points,
            captain_points=captain_points,
            bench_total=bench_total,
            transfer_cost=cost,
            total=total,
            chip=roster.chips.active,
        )
