"""Team composition, transfer and scoring engine."""

from .formation import FormationValidator
from .budget import BudgetLedger
from .transfers import TransferProcessor, transfer_cost
from .chips import ChipController, CHIP_EFFECTS, chip_effect
from .scoring import ScoringEngine, player_points, captaincy_multipliers

__all__ = [
    "FormationValidator",
    "BudgetLedger",
    "TransferProcessor",
    "transfer_cost",
    "ChipController",
    "CHIP_EFFECTS",
    "chip_effect",
    "ScoringEngine",
    "player_points",
    "captaincy_multipliers",
]
