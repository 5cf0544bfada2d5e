"""
Transfer Processor

Validate swaps and keep the per-gameweek transfer accounting.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from constants import DEFAULT_FREE_TRANSFERS, DEFAULT_TRANSFER_COST
from .budget import BudgetLedger
from .chips import chip_effect
from .errors import InvalidRoster, PlayerAlreadyOwned, PlayerNotFound
from .formation import FormationValidator
from .models import LineupSnapshot, Player, Roster, TransferState

logger = logging.getLogger(__name__)


def transfer_cost(made: int, free_transfers: int, penalty: int, waived: bool = False) -> int:
    """Points deducted for a week's transfers."""
    if waived:
        return 0
    return max(0, made - free_transfers) * penalty


@dataclass
class SwapPlan:
    """A validated swap, ready to be committed."""
    player_out_id: int
    player_in_id: int
    sale_price: int
    purchase_price: int
    starters: List[int]
    subs: List[int]
    captain_id: int
    vice_captain_id: int
    bank: int
    is_hit: bool
    release_outgoing: bool
    claim_incoming: bool


class TransferProcessor:
    """
    Processor for buy/sell swaps.

    Considers:
    - Formation after the swap
    - Squad value and money in the bank
    - Free transfers and the points penalty
    - Wildcard / Free Hit waivers
    """

    def __init__(
        self,
        ledger: BudgetLedger,
        validator: FormationValidator = None,
        penalty: int = DEFAULT_TRANSFER_COST,
        free_transfers: int = DEFAULT_FREE_TRANSFERS
    ):
        self.ledger = ledger
        self.validator = validator or FormationValidator()
        self.penalty = penalty
        self.free_transfers = free_transfers

    def plan_swap(
        self,
        roster: Roster,
        players: Dict[int, Player],
        player_out_id: int,
        player_in_id: int
    ) -> SwapPlan:
        """
        Validate selling one player and buying another in the same slot.

        Args:
            roster: Current roster
            players: Player lookup covering the lineup and the incoming player
            player_out_id: Player to sell
            player_in_id: Player to buy

        Returns:
            SwapPlan describing the committed state
        """
        if player_out_id not in roster.player_ids:
            raise InvalidRoster("Player to sell must be in your squad.")
        if player_in_id == player_out_id or player_in_id in roster.player_ids:
            raise InvalidRoster("Player to buy is already in your squad.")

        incoming = players.get(player_in_id)
        if incoming is None:
            raise PlayerNotFound(f"Player {player_in_id} does not exist.")
        outgoing = players[player_out_id]

        reserved = roster.reserved_ids()
        if incoming.owner_id is not None and incoming.owner_id != roster.id:
            raise PlayerAlreadyOwned(
                f"{incoming.name} is already owned by another team.", [incoming.id]
            )
        if incoming.owner_id == roster.id and player_in_id not in reserved:
            raise InvalidRoster("Player to buy is already in your squad.")

        starters = [player_in_id if pid == player_out_id else pid for pid in roster.starters]
        subs = [player_in_id if pid == player_out_id else pid for pid in roster.subs]
        self.validator.validate(
            [players[pid] for pid in starters],
            [players[pid] for pid in subs],
        )

        current_value = self.ledger.squad_value(players[pid].now_cost for pid in roster.player_ids)
        self.ledger.check_affordable(current_value, outgoing.now_cost, incoming.now_cost)
        bank = self.ledger.apply_swap(roster.bank, outgoing.now_cost, incoming.now_cost)

        captain_id = player_in_id if roster.captain_id == player_out_id else roster.captain_id
        vice_id = player_in_id if roster.vice_captain_id == player_out_id else roster.vice_captain_id

        waived = chip_effect(roster.chips.active).waives_transfers
        made = roster.transfers.made + 1
        is_hit = not waived and made > roster.transfers.free_transfers

        snapshot = roster.free_hit_snapshot
        snapshot_ids = set(snapshot.starters + snapshot.subs) if snapshot else set()

        return SwapPlan(
            player_out_id=player_out_id,
            player_in_id=player_in_id,
            sale_price=outgoing.now_cost,
            purchase_price=incoming.now_cost,
            starters=starters,
            subs=subs,
            captain_id=captain_id,
            vice_captain_id=vice_id,
            bank=bank,
            is_hit=is_hit,
            release_outgoing=player_out_id not in snapshot_ids,
            claim_incoming=incoming.owner_id is None,
        )

    def apply(self, roster: Roster, plan: SwapPlan) -> Roster:
        """Return a copy of the roster with the swap and its cost applied."""
        updated = copy.deepcopy(roster)
        updated.starters = plan.starters
        updated.subs = plan.subs
        updated.captain_id = plan.captain_id
        updated.vice_captain_id = plan.vice_captain_id
        updated.bank = plan.bank
        self.record_transfer(updated.transfers, chip_effect(roster.chips.active).waives_transfers)
        updated.total_transfers += 1
        return updated

    def record_transfer(self, state: TransferState, waived: bool = False) -> int:
        """
        Count one committed swap.

        Returns:
            Points added to this week's cost
        """
        state.made += 1
        if waived:
            state.cost = 0
            return 0
        if state.made > state.free_transfers:
            state.cost += self.penalty
            return self.penalty
        return 0

    def recompute_cost(self, state: TransferState, waived: bool = False) -> int:
        state.cost = transfer_cost(state.made, state.free_transfers, self.penalty, waived)
        return state.cost

    def reset_week(self, state: TransferState) -> None:
        """Gameweek rollover: unused free transfers do not carry over."""
        state.free_transfers = self.free_transfers
        state.made = 0
        state.cost = 0

    # ==================== Free Hit ====================

    def take_snapshot(self, roster: Roster) -> LineupSnapshot:
        return LineupSnapshot(
            starters=list(roster.starters),
            subs=list(roster.subs),
            captain_id=roster.captain_id,
            vice_captain_id=roster.vice_captain_id,
            bank=roster.bank,
            transfers_made=roster.transfers.made,
        )

    def restore_snapshot(self, roster: Roster) -> Tuple[List[int], List[int]]:
        """
        Put the roster back to its pre-Free Hit state.

        Returns:
            Tuple of (released player ids, reclaimed player ids)
        """
        snapshot = roster.free_hit_snapshot
        if snapshot is None:
            return [], []

        before = set(roster.player_ids)
        after = set(snapshot.starters + snapshot.subs)
        released = sorted(before - after)
        reclaimed = sorted(after - before)

        roster.starters = list(snapshot.starters)
        roster.subs = list(snapshot.subs)
        roster.captain_id = snapshot.captain_id
        roster.vice_captain_id = snapshot.vice_captain_id
        roster.bank = snapshot.bank
        roster.transfers.made = snapshot.transfers_made
        roster.free_hit_snapshot = None

        logger.info(
            f"Free Hit reverted for roster {roster.id}: "
            f"released {len(released)}, reclaimed {len(reclaimed)}"
        )
        return released, reclaimed
