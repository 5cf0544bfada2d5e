"""
Chip Controller

One-time-per-season chips. The controller only gates activation and
cancellation; transfer and scoring rules read the effects table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from constants import ChipType, SUBS_SIZE
from .errors import ChipAlreadyUsed, ChipConflict, ChipNotAllowed, NoActiveChip
from .models import ChipState, Roster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChipEffect:
    """What a chip changes while it is active."""
    name: str
    description: str
    waives_transfers: bool = False
    reverts_roster: bool = False
    captain_multiplier: Optional[float] = None
    bench_counts: bool = False


NO_CHIP = ChipEffect(name="None", description="No chip active.")

CHIP_EFFECTS: Dict[str, ChipEffect] = {
    ChipType.WILDCARD: ChipEffect(
        name="Wildcard",
        description="Make unlimited transfers for one gameweek with no point deductions.",
        waives_transfers=True,
    ),
    ChipType.FREE_HIT: ChipEffect(
        name="Free Hit",
        description="Make unlimited transfers for one gameweek, but your team reverts afterwards.",
        waives_transfers=True,
        reverts_roster=True,
    ),
    ChipType.TRIPLE_CAPTAIN: ChipEffect(
        name="Triple Captain",
        description="Your captain scores triple points instead of double for one gameweek.",
        captain_multiplier=3.0,
    ),
    ChipType.BENCH_BOOST: ChipEffect(
        name="Bench Boost",
        description="Points from your bench players are added to your total for one gameweek.",
        bench_counts=True,
    ),
}


def chip_effect(chip: Optional[str]) -> ChipEffect:
    """Effect for an active chip (or the neutral effect when none is active)."""
    if chip is None:
        return NO_CHIP
    try:
        return CHIP_EFFECTS[chip]
    except KeyError:
        raise ValueError(f"Unknown chip type: {chip}")


class ChipController:
    """Activate and cancel chips on a roster's chip state."""

    def check_can_use(self, roster: Roster, chip: str) -> None:
        """
        Raise if the chip cannot be played now.

        Raises:
            ChipAlreadyUsed: chip was already played this season
            ChipConflict: a different chip is active this gameweek
            ChipNotAllowed: chip-specific preconditions fail
        """
        if chip not in CHIP_EFFECTS:
            raise ChipNotAllowed(f"Invalid chip type: {chip}")
        state = roster.chips
        if state.used.get(chip):
            raise ChipAlreadyUsed(f"{chip} has already been used this season.")
        if state.active is not None:
            raise ChipConflict(f"{state.active} is already active this gameweek.")

        if chip == ChipType.TRIPLE_CAPTAIN and roster.captain_id is None:
            raise ChipNotAllowed("You must have a captain selected to use Triple Captain.")
        if chip == ChipType.BENCH_BOOST and len(roster.subs) != SUBS_SIZE:
            raise ChipNotAllowed(
                f"You must have a full bench ({SUBS_SIZE} players) to use Bench Boost."
            )

    def activate(self, state: ChipState, chip: str) -> None:
        state.used[chip] = True
        state.active = chip

    def cancel(self, state: ChipState) -> str:
        """
        Clear the active chip and hand it back.

        Returns:
            The chip that was cancelled
        """
        if state.active is None:
            raise NoActiveChip("No chip is currently active.")
        chip = state.active
        state.used[chip] = False
        state.active = None
        return chip

    def end_gameweek(self, state: ChipState) -> Optional[str]:
        """Expire the active chip at rollover. The used flag stays set."""
        chip = state.active
        state.active = None
        return chip

    def status(self, state: ChipState) -> List[Dict[str, Any]]:
        """Per-chip availability for display."""
        return [
            {
                "type": chip,
                "name": effect.name,
                "description": effect.description,
                "used": state.used.get(chip, False),
                "can_use": not state.used.get(chip, False) and state.active is None,
                "is_active": state.active == chip,
            }
            for chip, effect in CHIP_EFFECTS.items()
        ]
