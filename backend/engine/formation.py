"""
Formation Validator

Check that a lineup has the required positional shape.
"""

import logging
from collections import Counter
from typing import Optional, Sequence

from constants import PlayerPosition, STARTER_FORMATION, STARTERS_SIZE, SUBS_SIZE
from .errors import FormationInvalid, InvalidCaptaincy
from .models import Player

logger = logging.getLogger(__name__)


class FormationValidator:
    """
    Validate starters and substitutes.

    Rules:
    - Starters: exactly 1 GK, 2 CDM, 1 LW, 1 RW
    - Subs: 1 defender (GK/CDM) and 1 attacker (LW/RW)
    - A player appears at most once across the lineup
    """

    def validate(self, starters: Sequence[Player], subs: Sequence[Player]) -> None:
        """
        Validate a proposed lineup.

        Args:
            starters: Starting players
            subs: Substitute players

        Raises:
            FormationInvalid: with scope "starters" or "subs"
        """
        ids = [p.id for p in starters] + [p.id for p in subs]
        if len(set(ids)) != len(ids):
            raise FormationInvalid("starters", "Each player can only be selected once")

        starter_positions = Counter(p.position for p in starters)
        if len(starters) != STARTERS_SIZE or any(
            starter_positions.get(pos, 0) != count
            for pos, count in STARTER_FORMATION.items()
        ):
            raise FormationInvalid(
                "starters",
                "Invalid formation: Must have 1 GK, 2 CDM, 1 LW, 1 RW in starters"
            )

        defenders = sum(1 for p in subs if p.position in PlayerPosition.DEFENSIVE)
        attackers = sum(1 for p in subs if p.position in PlayerPosition.ATTACKING)
        if len(subs) != SUBS_SIZE or defenders != 1 or attackers != 1:
            raise FormationInvalid(
                "subs",
                "Invalid bench: Must have 1 defender (GK/CDM) and 1 attacker (LW/RW)"
            )

    def is_valid(self, starters: Sequence[Player], subs: Sequence[Player]) -> bool:
        try:
            self.validate(starters, subs)
        except FormationInvalid:
            return False
        return True

    def validate_captaincy(
        self,
        starter_ids: Sequence[int],
        captain_id: Optional[int],
        vice_captain_id: Optional[int]
    ) -> None:
        """Captain and vice-captain must be two different starters."""
        if captain_id is None or vice_captain_id is None:
            raise InvalidCaptaincy("Captain and vice-captain are required")
        if captain_id == vice_captain_id:
            raise InvalidCaptaincy("Captain and vice-captain must be different players")
        if captain_id not in starter_ids or vice_captain_id not in starter_ids:
            raise InvalidCaptaincy("Captain and vice-captain must be in the starting lineup")
