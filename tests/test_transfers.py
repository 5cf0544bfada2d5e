"""
Tests for TransferProcessor and the transfer cost formula.
"""

import pytest

from constants import ChipType
from engine.budget import BudgetLedger
from engine.errors import (
    BudgetExceeded, FormationInvalid, InvalidRoster, PlayerAlreadyOwned, PlayerNotFound
)
from engine.models import Player, Roster, TransferState
from engine.transfers import TransferProcessor, transfer_cost


def make(pid, position, cost, owner_id=None):
    return Player(id=pid, name=f"P{pid}", position=position, now_cost=cost, owner_id=owner_id)


@pytest.fixture
def players():
    return {
        1: make(1, "GK", 120, 10),
        2: make(2, "CDM", 140, 10),
        3: make(3, "CDM", 125, 10),
        4: make(4, "LW", 150, 10),
        5: make(5, "RW", 140, 10),
        6: make(6, "GK", 90, 10),
        7: make(7, "LW", 200, 10),
        8: make(8, "RW", 220),
        9: make(9, "RW", 280, 99),
        10: make(10, "CDM", 100),
    }


@pytest.fixture
def roster():
    return Roster(
        id=10, user_id=1, name="Test Eleven", bank=535,
        starters=[1, 2, 3, 4, 5], subs=[6, 7],
        captain_id=4, vice_captain_id=5,
    )


@pytest.fixture
def processor():
    return TransferProcessor(BudgetLedger(1500), penalty=4, free_transfers=1)


class TestTransferCost:
    """Points deducted for a week's transfers."""

    @pytest.mark.parametrize("made,free,expected", [
        (0, 1, 0),
        (1, 1, 0),
        (2, 1, 4),
        (3, 1, 8),
        (3, 2, 4),
    ])
    def test_formula(self, made, free, expected):
        assert transfer_cost(made, free, 4) == expected

    def test_waived(self):
        assert transfer_cost(5, 1, 4, waived=True) == 0

    def test_three_swaps_with_one_free(self, processor):
        state = TransferState(free_transfers=1)
        added = [processor.record_transfer(state) for _ in range(3)]
        assert added == [0, 4, 4]
        assert state.cost == 8
        assert state.cost == transfer_cost(state.made, state.free_transfers, 4)

    def test_recompute_after_waiver_lifted(self, processor):
        state = TransferState(free_transfers=1)
        for _ in range(3):
            processor.record_transfer(state, waived=True)
        assert state.cost == 0
        assert processor.recompute_cost(state, waived=False) == 8

    def test_reset_week(self, processor):
        state = TransferState(free_transfers=1, made=3, cost=8)
        processor.reset_week(state)
        assert (state.free_transfers, state.made, state.cost) == (1, 0, 0)


class TestPlanSwap:
    """Swap validation."""

    def test_same_slot_swap(self, processor, roster, players):
        plan = processor.plan_swap(roster, players, 5, 8)
        assert plan.starters == [1, 2, 3, 4, 8]
        assert plan.bank == 535 + 140 - 220
        assert plan.vice_captain_id == 8
        assert plan.claim_incoming and plan.release_outgoing
        assert not plan.is_hit

    def test_second_swap_is_hit(self, processor, roster, players):
        roster.transfers.made = 1
        assert processor.plan_swap(roster, players, 5, 8).is_hit

    def test_wildcard_waives_hit(self, processor, roster, players):
        roster.transfers.made = 1
        roster.chips.active = ChipType.WILDCARD
        assert not processor.plan_swap(roster, players, 5, 8).is_hit

    def test_apply_does_not_mutate_input(self, processor, roster, players):
        plan = processor.plan_swap(roster, players, 5, 8)
        updated = processor.apply(roster, plan)
        assert roster.starters == [1, 2, 3, 4, 5]
        assert updated.starters == [1, 2, 3, 4, 8]
        assert updated.transfers.made == 1
        assert updated.total_transfers == 1

    def test_wrong_position_rejected(self, processor, roster, players):
        with pytest.raises(FormationInvalid):
            processor.plan_swap(roster, players, 2, 8)

    def test_bench_defender_can_change_position(self, processor, roster, players):
        """Bench GK out, CDM in: the bench still has one defender and one attacker."""
        plan = processor.plan_swap(roster, players, 6, 10)
        assert plan.subs == [10, 7]
        assert plan.starters == [1, 2, 3, 4, 5]
        assert plan.bank == 535 + 90 - 100

    def test_seller_must_be_in_squad(self, processor, roster, players):
        with pytest.raises(InvalidRoster):
            processor.plan_swap(roster, players, 10, 8)

    def test_buyer_already_in_squad(self, processor, roster, players):
        with pytest.raises(InvalidRoster):
            processor.plan_swap(roster, players, 5, 7)

    def test_unknown_player(self, processor, roster, players):
        with pytest.raises(PlayerNotFound):
            processor.plan_swap(roster, players, 5, 404)

    def test_owned_elsewhere(self, processor, roster, players):
        with pytest.raises(PlayerAlreadyOwned) as exc:
            processor.plan_swap(roster, players, 5, 9)
        assert exc.value.player_ids == [9]

    def test_over_budget(self, roster, players):
        processor = TransferProcessor(BudgetLedger(1000))
        roster.bank = 35
        with pytest.raises(BudgetExceeded):
            processor.plan_swap(roster, players, 5, 8)


class TestFreeHitSnapshot:

    def test_restore_returns_released_players(self, processor, roster, players):
        roster.free_hit_snapshot = processor.take_snapshot(roster)
        plan = processor.plan_swap(roster, players, 5, 8)
        assert not plan.release_outgoing
        updated = processor.apply(roster, plan)

        assert updated.reserved_ids() == [5]
        released, reclaimed = processor.restore_snapshot(updated)
        assert released == [8]
        assert reclaimed == [5]
        assert updated.starters == [1, 2, 3, 4, 5]
        assert updated.bank == 535
        assert updated.free_hit_snapshot is None

    def test_rebuy_reserved_player(self, processor, roster, players):
        """A snapshot player sold during Free Hit can be bought back."""
        roster.free_hit_snapshot = processor.take_snapshot(roster)
        updated = processor.apply(roster, processor.plan_swap(roster, players, 5, 8))
        players[8].owner_id = 10

        plan = processor.plan_swap(updated, players, 8, 5)
        assert not plan.claim_incoming
        assert plan.release_outgoing
