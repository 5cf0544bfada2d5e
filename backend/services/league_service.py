"""
League Service

Transactional seam around the engine: every roster mutation is validated,
serialised per roster and committed all-or-nothing.
"""

import copy
import logging
from contextlib import contextmanager
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional
from weakref import WeakValueDictionary

from constants import (
    ChipType, GameweekStatus, PlayerPosition, ScoreStatus,
    MIN_ROSTER_NAME, MAX_ROSTER_NAME, PRICE_UNIT
)
from engine.budget import BudgetLedger
from engine.chips import ChipController, chip_effect
from engine.errors import (
    GameweekStateError, InvalidPlayer, InvalidRoster, PlayerAlreadyOwned, PlayerNotFound,
    RosterAlreadyExists, RosterNotFound
)
from engine.formation import FormationValidator
from engine.models import Gameweek, Player, Roster, ScoreResult, StatLine
from engine.scoring import ScoringEngine, player_points
from engine.transfers import TransferProcessor
from settings import LeagueSettings
from .gameweek_clock import GameweekClock

logger = logging.getLogger(__name__)


class LeagueService:
    """
    Roster, chip and scoring operations.

    Mutations: create_roster, propose_swap, set_captaincy, use_chip, cancel_chip
    Lifecycle: lock_gameweek, ingest_stats, score_gameweek, score_all, advance_gameweek
    """

    def __init__(
        self,
        db,
        settings: Optional[LeagueSettings] = None,
        clock: Optional[GameweekClock] = None,
        stats_feed=None
    ):
        """
        Initialize the league service.

        Args:
            db: DatabaseManager
            settings: League rules (defaults to LeagueSettings())
            clock: Gameweek clock (defaults to one over the same database)
            stats_feed: Optional StatsFeedClient used by the scoring tick
        """
        self.db = db
        self.settings = settings or LeagueSettings()
        self.clock = clock or GameweekClock(db, lock_minutes=self.settings.lock_minutes)
        self.stats_feed = stats_feed

        self.validator = FormationValidator()
        self.ledger = BudgetLedger(self.settings.budget_cap)
        self.transfers = TransferProcessor(
            self.ledger,
            self.validator,
            penalty=self.settings.transfer_cost,
            free_transfers=self.settings.free_transfers,
        )
        self.chips = ChipController()
        self.scoring = ScoringEngine()

        self._locks_guard = Lock()
        # Entries vanish once no caller holds the lock
        self._locks: "WeakValueDictionary[str, Lock]" = WeakValueDictionary()

    @contextmanager
    def _locked(self, key: str):
        """Per-roster (or per-user) mutual exclusion."""
        with self._locks_guard:
            lock = self._locks.setdefault(key, Lock())
        with lock:
            yield

    def _load_roster(self, roster_id: int) -> Roster:
        roster = self.db.get_roster(roster_id)
        if roster is None:
            raise RosterNotFound(f"Roster {roster_id} not found.")
        return roster

    @staticmethod
    def _gameweek_number(gameweek: Optional[Gameweek]) -> int:
        return gameweek.number if gameweek else 0

    # ==================== Roster Mutations ====================

    def create_roster(
        self,
        user_id: int,
        name: str,
        starters: List[int],
        subs: List[int],
        captain_id: int,
        vice_captain_id: int
    ) -> Roster:
        """
        Create a user's one and only roster.

        Business Rules:
        - One roster per user
        - Exactly 5 starters (1 GK, 2 CDM, 1 LW, 1 RW) and 2 subs (1 GK/CDM, 1 LW/RW)
        - All players exist and are unowned
        - Captain and vice-captain are different starters
        - Total cost within the budget cap
        """
        with self._locked(f"user:{user_id}"):
            self.clock.ensure_open()

            name = (name or "").strip()
            if not MIN_ROSTER_NAME <= len(name) <= MAX_ROSTER_NAME:
                raise InvalidRoster(
                    f"Team name must be between {MIN_ROSTER_NAME} and {MAX_ROSTER_NAME} characters."
                )
            if self.db.get_roster_by_user(user_id) is not None:
                raise RosterAlreadyExists("You already have a team.")

            all_ids = list(starters) + list(subs)
            players = self.db.get_players(all_ids)
            missing = [pid for pid in all_ids if pid not in players]
            if missing:
                raise PlayerNotFound(f"One or more selected players do not exist: {missing}")

            owned = [players[pid] for pid in set(all_ids) if players[pid].owner_id is not None]
            if owned:
                raise PlayerAlreadyOwned(
                    f"These players are already owned: {', '.join(p.name for p in owned)}",
                    [p.id for p in owned],
                )

            self.validator.validate(
                [players[pid] for pid in starters],
                [players[pid] for pid in subs],
            )
            self.validator.validate_captaincy(starters, captain_id, vice_captain_id)

            value = self.ledger.squad_value(players[pid].now_cost for pid in all_ids)
            bank = self.ledger.opening_bank(value)

            roster = Roster(
                id=None,
                user_id=user_id,
                name=name,
                bank=bank,
                starters=list(starters),
                subs=list(subs),
                captain_id=captain_id,
                vice_captain_id=vice_captain_id,
            )
            roster.transfers.free_transfers = self.settings.free_transfers
            created = self.db.insert_roster(roster)

        logger.info(f"Team created: {created.name} (roster {created.id}) by user {user_id}")
        return created

    def propose_swap(self, roster_id: int, player_out_id: int, player_in_id: int) -> Roster:
        """
        Sell one player and buy another in the same lineup slot.

        Raises:
            TransferWindowLocked, FormationInvalid, BudgetExceeded,
            PlayerAlreadyOwned, PlayerNotFound, InvalidRoster
        """
        with self._locked(f"roster:{roster_id}"):
            gameweek = self.clock.ensure_open()
            roster = self._load_roster(roster_id)

            players = self.db.get_players(roster.player_ids + [player_in_id])
            plan = self.transfers.plan_swap(roster, players, player_out_id, player_in_id)
            updated = self.transfers.apply(roster, plan)

            committed = self.db.commit_roster(
                updated,
                claim_ids=[player_in_id] if plan.claim_incoming else [],
                release_ids=[player_out_id] if plan.release_outgoing else [],
                transfer={
                    "gameweek": self._gameweek_number(gameweek),
                    "player_out_id": player_out_id,
                    "player_in_id": player_in_id,
                    "selling_price": plan.sale_price,
                    "purchase_price": plan.purchase_price,
                    "is_hit": plan.is_hit,
                },
            )

        logger.info(
            f"Transfer: {committed.name} bought {players[player_in_id].name} "
            f"for {players[player_out_id].name} (cost this week: {committed.transfers.cost})"
        )
        return committed

    def set_captaincy(self, roster_id: int, captain_id: int, vice_captain_id: int) -> Roster:
        with self._locked(f"roster:{roster_id}"):
            self.clock.ensure_open()
            roster = self._load_roster(roster_id)
            self.validator.validate_captaincy(roster.starters, captain_id, vice_captain_id)

            updated = copy.deepcopy(roster)
            updated.captain_id = captain_id
            updated.vice_captain_id = vice_captain_id
            return self.db.commit_roster(updated)

    def use_chip(self, roster_id: int, chip: str) -> Roster:
        """
        Play a chip for the current gameweek.

        Raises:
            ChipAlreadyUsed, ChipConflict, ChipNotAllowed, TransferWindowLocked
        """
        with self._locked(f"roster:{roster_id}"):
            gameweek = self.clock.ensure_open()
            roster = self._load_roster(roster_id)
            self.chips.check_can_use(roster, chip)

            updated = copy.deepcopy(roster)
            self.chips.activate(updated.chips, chip)
            effect = chip_effect(chip)
            if effect.waives_transfers:
                self.transfers.recompute_cost(updated.transfers, waived=True)
            if effect.reverts_roster:
                updated.free_hit_snapshot = self.transfers.take_snapshot(roster)

            committed = self.db.commit_roster(
                updated,
                chip_event={"chip": chip, "gameweek": self._gameweek_number(gameweek)},
            )

        logger.info(f"Chip used: roster {roster_id} activated {chip}")
        return committed

    def cancel_chip(self, roster_id: int) -> Roster:
        """
        Cancel the active chip before the gameweek locks.

        The chip becomes available again. A cancelled Free Hit restores the
        pre-activation roster at once; a cancelled Wildcard charges the week's
        transfers as if it had never been played.
        """
        with self._locked(f"roster:{roster_id}"):
            self.clock.ensure_open()
            roster = self._load_roster(roster_id)

            updated = copy.deepcopy(roster)
            chip = self.chips.cancel(updated.chips)
            effect = chip_effect(chip)

            released: List[int] = []
            if effect.reverts_roster:
                released, _ = self.transfers.restore_snapshot(updated)
            if effect.waives_transfers:
                self.transfers.recompute_cost(updated.transfers, waived=False)

            committed = self.db.commit_roster(
                updated,
                release_ids=released,
                chip_event={"chip": chip, "cancelled": True},
            )

        logger.info(f"Chip cancelled: roster {roster_id} cancelled {chip}")
        return committed

    # ==================== Gameweek Lifecycle ====================

    def lock_gameweek(self) -> Optional[Gameweek]:
        """Lock the current gameweek now, regardless of its lock time."""
        gameweek = self.clock.current()
        if gameweek is None:
            raise GameweekStateError("No gameweek to lock.")
        if gameweek.status != GameweekStatus.OPEN:
            return gameweek
        return self.clock.lock(gameweek.number)

    def ingest_stats(self, gameweek_number: int, lines: Dict[int, StatLine]) -> int:
        """
        Store tabulated stats for a gameweek.

        Re-ingesting a player replaces the previous line until the round is scored.
        """
        gameweek = self.db.get_gameweek(gameweek_number)
        if gameweek is None:
            raise GameweekStateError(f"Gameweek {gameweek_number} does not exist.")
        if gameweek.status in (GameweekStatus.SCORED, GameweekStatus.ARCHIVED):
            raise GameweekStateError(f"Gameweek {gameweek_number} has already been scored.")

        players = self.db.get_players(lines.keys())
        points = {
            pid: player_points(players[pid].position, line)
            for pid, line in lines.items() if pid in players
        }
        written = self.db.save_stat_lines(gameweek_number, lines, points)
        logger.info(f"Ingested {written} stat lines for Gameweek {gameweek_number}")
        return written

    def pull_stats(self, gameweek_number: int) -> int:
        """Fetch stats from the configured feed. Returns lines written (0 if not ready)."""
        if self.stats_feed is None:
            return 0
        lines = self.stats_feed.fetch_gameweek(gameweek_number)
        if not lines:
            return 0
        return self.ingest_stats(gameweek_number, lines)

    def score_gameweek(self, roster_id: int) -> ScoreResult:
        """
        Score one roster for the current gameweek.

        Returns a PENDING result (not an error) while the round is still open
        or while any of the roster's players has no stat line yet.
        """
        self.clock.lock_if_due()
        gameweek = self.clock.current()
        if gameweek is None:
            raise GameweekStateError("No gameweek to score.")

        with self._locked(f"roster:{roster_id}"):
            roster = self._load_roster(roster_id)

            existing = self.db.get_score(roster_id, gameweek.number)
            if existing is not None:
                return ScoreResult(
                    roster_id=roster_id,
                    gameweek=gameweek.number,
                    status=ScoreStatus.SCORED,
                    weekly_points=existing["points"],
                    total_points=roster.points,
                )

            if gameweek.status != GameweekStatus.LOCKED:
                return ScoreResult(roster_id=roster_id, gameweek=gameweek.number,
                                   status=ScoreStatus.PENDING, total_points=roster.points)

            stats = self.db.get_stat_lines(gameweek.number, roster.player_ids)
            missing = [pid for pid in roster.player_ids if pid not in stats]
            if missing:
                logger.info(
                    f"Roster {roster_id}: waiting on stats for {len(missing)} player(s) in Gameweek {gameweek.number}"
                )
                return ScoreResult(roster_id=roster_id, gameweek=gameweek.number,
                                   status=ScoreStatus.PENDING, total_points=roster.points,
                                   missing_player_ids=missing)

            players = self.db.get_players(roster.player_ids)
            positions = {pid: p.position for pid, p in players.items()}
            breakdown = self.scoring.score(roster, positions, stats)

            updated = copy.deepcopy(roster)
            updated.weekly_points = breakdown.total
            updated.points = round(roster.points + breakdown.total, 1)
            updated.highest_weekly_score = max(roster.highest_weekly_score, breakdown.total)
            committed = self.db.commit_score(updated, gameweek.number, breakdown)

        logger.info(f"{committed.name}: {breakdown.total} points (Total: {committed.points})")
        return ScoreResult(
            roster_id=roster_id,
            gameweek=gameweek.number,
            status=ScoreStatus.SCORED,
            weekly_points=breakdown.total,
            total_points=committed.points,
            breakdown=breakdown,
        )

    def score_all(self) -> Dict[str, Any]:
        """
        Scoring batch for the current gameweek. Rosters are independent; the
        round is marked scored once no roster is left pending.
        """
        self.clock.lock_if_due()
        gameweek = self.clock.current()
        if gameweek is None or gameweek.status != GameweekStatus.LOCKED:
            return {"gameweek": self._gameweek_number(gameweek), "scored": 0, "pending": 0,
                    "failed": 0, "complete": False}

        if self.stats_feed is not None:
            try:
                self.pull_stats(gameweek.number)
            except Exception as e:
                logger.warning(f"Stats feed unavailable for Gameweek {gameweek.number}: {e}")

        scored, pending, failed = 0, 0, 0
        for roster_id in self.db.get_roster_ids():
            try:
                result = self.score_gameweek(roster_id)
            except Exception as e:
                logger.error(f"Error scoring roster {roster_id}: {e}", exc_info=True)
                failed += 1
                continue
            if result.status == ScoreStatus.SCORED:
                scored += 1
            else:
                pending += 1

        complete = pending == 0 and failed == 0
        if complete:
            self.clock.mark_scored(gameweek.number)
        logger.info(
            f"Gameweek {gameweek.number} scoring: {scored} scored, {pending} pending, {failed} failed"
        )
        return {"gameweek": gameweek.number, "scored": scored, "pending": pending,
                "failed": failed, "complete": complete}

    def advance_gameweek(self, next_deadline: datetime) -> Gameweek:
        """
        Archive the scored round, roll every roster over and open the next one.

        Rollover resets transfer counters, expires the active chip and reverts
        Free Hit rosters.
        """
        current = self.clock.current()
        if current is not None:
            if current.status != GameweekStatus.SCORED:
                raise GameweekStateError(
                    f"Gameweek {current.number} must be scored before the next one starts."
                )
            for roster_id in self.db.get_roster_ids():
                self._rollover(roster_id)
            self.clock.archive(current.number)

        opened = self.clock.open_gameweek(next_deadline)
        logger.info(f"Gameweek {opened.number} open until {opened.lock_at.isoformat()}")
        return opened

    def _rollover(self, roster_id: int) -> Roster:
        with self._locked(f"roster:{roster_id}"):
            roster = self._load_roster(roster_id)
            updated = copy.deepcopy(roster)

            released: List[int] = []
            if updated.free_hit_snapshot is not None:
                released, _ = self.transfers.restore_snapshot(updated)
            self.chips.end_gameweek(updated.chips)
            self.transfers.reset_week(updated.transfers)

            return self.db.commit_roster(updated, release_ids=released)

    # ==================== Read Models ====================

    def get_roster(self, roster_id: int) -> Dict[str, Any]:
        """Roster dashboard with player details."""
        roster = self._load_roster(roster_id)
        players = self.db.get_players(roster.player_ids)
        value = self.ledger.squad_value(players[pid].now_cost for pid in roster.player_ids)

        def player_view(pid: int) -> Dict[str, Any]:
            p = players[pid]
            return {
                "id": p.id,
                "name": p.name,
                "position": p.position,
                "price": p.price,
                "overall": p.overall,
                "is_captain": pid == roster.captain_id,
                "is_vice_captain": pid == roster.vice_captain_id,
            }

        return {
            "id": roster.id,
            "user_id": roster.user_id,
            "name": roster.name,
            "points": roster.points,
            "weekly_points": roster.weekly_points,
            "budget": roster.budget,
            "team_value": value / PRICE_UNIT,
            "starters": [player_view(pid) for pid in roster.starters],
            "subs": [player_view(pid) for pid in roster.subs],
            "captain_id": roster.captain_id,
            "vice_captain_id": roster.vice_captain_id,
            "chips": dict(roster.chips.used),
            "active_chip": roster.chips.active,
            "transfers": {
                "free": roster.transfers.free_transfers,
                "made": roster.transfers.made,
                "cost": roster.transfers.cost,
            },
            "season_stats": {
                "highest_weekly_score": roster.highest_weekly_score,
                "total_transfers": roster.total_transfers,
            },
        }

    def get_chip_status(self, roster_id: int) -> Dict[str, Any]:
        roster = self._load_roster(roster_id)
        chips = self.chips.status(roster.chips)
        return {
            "chips": chips,
            "active_chip": roster.chips.active,
            "available_count": len(roster.chips.remaining()),
        }

    def get_chip_history(self, roster_id: int) -> Dict[str, Any]:
        self._load_roster(roster_id)
        used = self.db.get_chip_history(roster_id)
        return {
            "used_chips": used,
            "total_used": len(used),
            "remaining": len(ChipType.ALL) - len(used),
        }

    def get_leaderboard(self, limit: int = 50, page: int = 1) -> Dict[str, Any]:
        return self.db.get_leaderboard(limit=limit, page=page)

    def list_players(
        self,
        position: Optional[str] = None,
        max_price: Optional[float] = None,
        available_only: bool = False,
        sort_by: str = "overall",
        limit: int = 100
    ) -> List[Player]:
        max_cost = int(round(max_price * PRICE_UNIT)) if max_price is not None else None
        return self.db.list_players(position, max_cost, available_only, sort_by, limit)

    def add_player(self, name: str, position: str, price: float, overall: int = 75) -> Player:
        """Add a catalogue player (price in millions)."""
        position = (position or "").upper()
        if position not in PlayerPosition.ALL:
            raise InvalidPlayer(f"Position must be one of {', '.join(PlayerPosition.ALL)}.")
        if price <= 0:
            raise InvalidPlayer("Price must be positive.")
        player_id = self.db.add_player(name.strip(), position, int(round(price * PRICE_UNIT)), overall)
        return self.db.get_player(player_id)

    def get_player(self, player_id: int) -> Player:
        player = self.db.get_player(player_id)
        if player is None:
            raise PlayerNotFound(f"Player {player_id} not found.")
        return player

    def get_transfer_history(self, roster_id: int, gameweek: Optional[int] = None) -> List[Dict[str, Any]]:
        self._load_roster(roster_id)
        return self.db.get_transfer_history(roster_id, gameweek)
