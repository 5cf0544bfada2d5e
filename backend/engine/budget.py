"""
Budget Ledger

Squad value against the budget cap. All amounts are in price units
(tenths of a million) so credits and debits cancel exactly.
"""

import logging
from typing import Iterable

from constants import PRICE_UNIT
from .errors import BudgetExceeded

logger = logging.getLogger(__name__)


def _fmt(units: int) -> str:
    return f"€{units / PRICE_UNIT:.1f}M"


class BudgetLedger:
    """Authorise and apply price deltas for a roster."""

    def __init__(self, cap: int):
        """
        Args:
            cap: Maximum squad value in price units
        """
        self.cap = cap

    @staticmethod
    def squad_value(prices: Iterable[int]) -> int:
        return sum(prices)

    def check_affordable(
        self,
        current_value: int,
        outgoing_price: int = 0,
        incoming_price: int = 0,
        cap: int = None
    ) -> int:
        """
        Check that swapping one player for another keeps the squad under the cap.

        Returns:
            The squad value after the swap
        """
        cap = self.cap if cap is None else cap
        new_value = current_value - outgoing_price + incoming_price
        if new_value > cap:
            raise BudgetExceeded(
                f"Total cost ({_fmt(new_value)}) exceeds budget limit ({_fmt(cap)})"
            )
        return new_value

    def apply_swap(self, bank: int, outgoing_price: int, incoming_price: int) -> int:
        """
        Credit the sale and debit the purchase at current prices.

        Returns:
            New bank balance
        """
        available = bank + outgoing_price
        if incoming_price > available:
            raise BudgetExceeded(
                f"Player costs {_fmt(incoming_price)} but you only have {_fmt(available)} available"
            )
        return available - incoming_price

    def opening_bank(self, squad_value: int) -> int:
        """Bank left after buying the initial squad."""
        self.check_affordable(squad_value)
        return self.cap - squad_value
