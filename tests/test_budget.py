"""
Tests for BudgetLedger.
"""

import pytest

from engine.budget import BudgetLedger
from engine.errors import BudgetExceeded


@pytest.fixture
def ledger():
    return BudgetLedger(cap=1500)


class TestBudgetLedger:

    def test_squad_value(self, ledger):
        assert ledger.squad_value([120, 140, 125]) == 385

    def test_opening_bank(self, ledger):
        assert ledger.opening_bank(965) == 535

    def test_opening_bank_over_cap(self, ledger):
        with pytest.raises(BudgetExceeded) as exc:
            ledger.opening_bank(1501)
        assert "€150.1M" in exc.value.message

    def test_squad_exactly_at_cap_allowed(self, ledger):
        assert ledger.opening_bank(1500) == 0

    def test_swap_within_cap(self, ledger):
        assert ledger.check_affordable(1400, 100, 200) == 1500

    def test_swap_over_cap(self, ledger):
        with pytest.raises(BudgetExceeded):
            ledger.check_affordable(1400, 100, 201)

    def test_apply_swap_bank(self, ledger):
        assert ledger.apply_swap(35, 140, 175) == 0

    def test_apply_swap_insufficient_funds(self, ledger):
        with pytest.raises(BudgetExceeded):
            ledger.apply_swap(35, 140, 176)

    def test_sell_and_rebuy_restores_bank(self, ledger):
        """Integer price units make a round trip exact."""
        bank = ledger.apply_swap(535, 140, 225)
        assert ledger.apply_swap(bank, 225, 140) == 535
