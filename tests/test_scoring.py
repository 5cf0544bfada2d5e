"""
Tests for the scoring table and captaincy rules.
"""

import pytest

from constants import ChipType
from engine.chips import chip_effect
from engine.models import Roster, StatLine
from engine.scoring import ScoringEngine, captaincy_multipliers, player_points

from conftest import played

POSITIONS = {1: "GK", 2: "CDM", 3: "CDM", 4: "LW", 5: "RW", 6: "GK", 7: "LW"}


@pytest.fixture
def roster():
    return Roster(
        id=1, user_id=1, name="Test Eleven", bank=0,
        starters=[1, 2, 3, 4, 5], subs=[6, 7],
        captain_id=4, vice_captain_id=5,
    )


def quiet_week(overrides=None):
    """Everyone played and did nothing, with overrides per player id."""
    stats = {pid: played() for pid in POSITIONS}
    stats.update(overrides or {})
    return stats


class TestPlayerPoints:

    def test_goalkeeper(self):
        assert player_points("GK", played(goals=1, assists=1, saves=3, clean_sheet=True)) == 14.5

    def test_holding_midfielder(self):
        assert player_points("CDM", played(goals=1, saves=2, clean_sheet=True)) == 11

    def test_wings_ignore_saves_and_clean_sheets(self):
        assert player_points("LW", played(goals=1, assists=1, saves=5, clean_sheet=True)) == 6
        assert player_points("RW", played(assists=2)) == 4

    def test_own_goal(self):
        assert player_points("CDM", played(own_goals=1)) == -2

    def test_did_not_play(self):
        assert player_points("LW", StatLine(goals=3)) == 0


class TestCaptaincyMultipliers:

    @pytest.mark.parametrize("captain,vice,chip,expected", [
        (True, False, None, (2.0, 1.0)),
        (True, True, None, (1.5, 1.0)),
        (False, True, None, (1.0, 2.0)),
        (False, False, None, (1.0, 1.0)),
        (True, True, ChipType.TRIPLE_CAPTAIN, (3.0, 1.0)),
        (False, True, ChipType.TRIPLE_CAPTAIN, (1.0, 2.0)),
    ])
    def test_multipliers(self, captain, vice, chip, expected):
        assert captaincy_multipliers(captain, vice, chip_effect(chip)) == expected


class TestScoringEngine:

    def test_captain_plays_vice_absent(self, roster):
        """Captain 10 points, vice did not play: 20."""
        stats = quiet_week({4: played(goals=2, assists=1), 5: StatLine()})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.starter_points[4] == 20
        assert result.captain_points == 20
        assert result.total == 20

    def test_triple_captain(self, roster):
        roster.chips.active = ChipType.TRIPLE_CAPTAIN
        stats = quiet_week({4: played(goals=2, assists=1), 5: StatLine()})
        assert ScoringEngine().score(roster, POSITIONS, stats).starter_points[4] == 30

    def test_vice_stands_in(self, roster):
        """Captain absent, vice 6 points: 12."""
        stats = quiet_week({4: StatLine(), 5: played(goals=1, assists=1)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.starter_points[4] == 0
        assert result.starter_points[5] == 12
        assert result.captain_points == 12

    def test_both_play(self, roster):
        """Captain 10 and vice 6 both play: 15 and 6."""
        stats = quiet_week({4: played(goals=2, assists=1), 5: played(goals=1, assists=1)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.starter_points[4] == 15
        assert result.starter_points[5] == 6
        assert result.total == 21

    def test_bench_ignored_without_boost(self, roster):
        stats = quiet_week({7: played(goals=2)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.bench_points[7] == 8
        assert result.bench_total == 0
        assert result.total == 0

    def test_bench_boost(self, roster):
        roster.chips.active = ChipType.BENCH_BOOST
        stats = quiet_week({6: played(saves=4, clean_sheet=True), 7: played(goals=2)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.bench_total == 15
        assert result.total == 15
        assert result.chip == ChipType.BENCH_BOOST

    def test_transfer_cost_deducted(self, roster):
        roster.transfers.made = 3
        roster.transfers.cost = 8
        stats = quiet_week({2: played(goals=1)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.transfer_cost == 8
        assert result.total == -3

    def test_half_point_rounds_up(self, roster):
        """Goalkeeper captain with 3 saves, vice plays: 1.5 x 1.5 = 2.25 -> 2.3."""
        roster.captain_id = 1
        stats = quiet_week({1: played(saves=3)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.starter_points[1] == 2.3
        assert result.captain_points == 2.3
        assert result.total == 2.3

    def test_negative_half_point_rounds_toward_zero(self, roster):
        """Goalkeeper captain at -2.5, vice plays: -3.75 -> -3.7."""
        roster.captain_id = 1
        stats = quiet_week({1: played(saves=3, own_goals=2)})
        result = ScoringEngine().score(roster, POSITIONS, stats)
        assert result.starter_points[1] == -3.7
        assert result.total == -3.7
