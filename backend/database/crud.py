"""
Database CRUD Operations

Create, Read, Update operations for the league database. Roster writes are
compare-and-swap on the `version` column; player ownership is claimed with a
conditional update in the same transaction.
"""

import os
import logging
from typing import List, Optional, Dict, Any, Iterable
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from constants import GameweekStatus
from engine.errors import ConcurrentModification, PlayerAlreadyOwned, RosterAlreadyExists
from engine.models import (
    Player, Roster, Gameweek, StatLine, SeasonTotals, ChipState,
    TransferState, LineupSnapshot, ScoreBreakdown
)
from .models import (
    PlayerRecord, RosterRecord, GameweekRecord, PlayerGameweekStat,
    GameweekScore, TransferHistory, ChipUsage, init_db
)

logger = logging.getLogger(__name__)


def _to_player(record: PlayerRecord) -> Player:
    return Player(
        id=record.id,
        name=record.name,
        position=record.position,
        now_cost=record.now_cost,
        overall=record.overall,
        owner_id=record.owner_id,
        season=SeasonTotals(
            appearances=record.appearances or 0,
            goals=record.goals or 0,
            assists=record.assists or 0,
            saves=record.saves or 0,
            clean_sheets=record.clean_sheets or 0,
            own_goals=record.own_goals or 0,
            total_points=record.total_points or 0.0,
        ),
        version=record.version,
    )


def _to_roster(record: RosterRecord) -> Roster:
    snapshot = None
    if record.free_hit_snapshot:
        snapshot = LineupSnapshot(**record.free_hit_snapshot)
    return Roster(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        bank=record.bank,
        starters=list(record.starters),
        subs=list(record.subs),
        captain_id=record.captain_id,
        vice_captain_id=record.vice_captain_id,
        points=record.points or 0.0,
        weekly_points=record.weekly_points or 0.0,
        chips=ChipState(used=dict(record.chips_used), active=record.active_chip),
        transfers=TransferState(
            free_transfers=record.free_transfers,
            made=record.transfers_made,
            cost=record.transfer_cost,
        ),
        free_hit_snapshot=snapshot,
        highest_weekly_score=record.highest_weekly_score or 0.0,
        total_transfers=record.total_transfers or 0,
        version=record.version,
        created_at=record.created_at,
    )


def _roster_values(roster: Roster) -> Dict[str, Any]:
    snapshot = roster.free_hit_snapshot
    return {
        "name": roster.name,
        "bank": roster.bank,
        "points": roster.points,
        "weekly_points": roster.weekly_points,
        "starters": list(roster.starters),
        "subs": list(roster.subs),
        "captain_id": roster.captain_id,
        "vice_captain_id": roster.vice_captain_id,
        "chips_used": dict(roster.chips.used),
        "active_chip": roster.chips.active,
        "free_hit_snapshot": {
            "starters": list(snapshot.starters),
            "subs": list(snapshot.subs),
            "captain_id": snapshot.captain_id,
            "vice_captain_id": snapshot.vice_captain_id,
            "bank": snapshot.bank,
            "transfers_made": snapshot.transfers_made,
        } if snapshot else None,
        "free_transfers": roster.transfers.free_transfers,
        "transfers_made": roster.transfers.made,
        "transfer_cost": roster.transfers.cost,
        "highest_weekly_score": roster.highest_weekly_score,
        "total_transfers": roster.total_transfers,
    }


def _to_gameweek(record: GameweekRecord) -> Gameweek:
    return Gameweek(
        number=record.number,
        deadline=record.deadline,
        lock_at=record.lock_at,
        status=record.status,
    )


class DatabaseManager:
    """Manager for database operations."""

    def __init__(self, db_url: Optional[str] = None):
        """
        Initialize database manager.

        Args:
            db_url: Database connection URL (defaults to DATABASE_URL env var or sqlite:///fantasy_league.db)
        """
        if db_url is None:
            db_url = os.getenv("DATABASE_URL", "sqlite:///fantasy_league.db")

        if db_url.startswith("sqlite"):
            logger.warning("Using SQLite database - use PostgreSQL for multi-process deployments.")
        else:
            logger.info(f"Using database: {db_url.split('://')[0] if '://' in db_url else 'unknown'}")

        self.engine, self.SessionLocal = init_db(db_url)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    # ==================== Players ====================

    def add_player(
        self,
        name: str,
        position: str,
        now_cost: int,
        overall: int = 75
    ) -> int:
        """Add a player to the catalogue, or return the existing id for name+position."""
        with self.get_session() as session:
            existing = session.query(PlayerRecord).filter(
                PlayerRecord.name == name,
                PlayerRecord.position == position
            ).first()
            if existing:
                return existing.id

            record = PlayerRecord(
                name=name, position=position, now_cost=now_cost, overall=overall
            )
            session.add(record)
            session.commit()
            logger.info(f"Created player: {name} ({position})")
            return record.id

    def get_player(self, player_id: int) -> Optional[Player]:
        with self.get_session() as session:
            record = session.get(PlayerRecord, player_id)
            return _to_player(record) if record else None

    def get_players(self, player_ids: Iterable[int]) -> Dict[int, Player]:
        """Get players by id as a dictionary. Unknown ids are left out."""
        ids = list(set(player_ids))
        if not ids:
            return {}
        with self.get_session() as session:
            records = session.query(PlayerRecord).filter(PlayerRecord.id.in_(ids)).all()
            return {r.id: _to_player(r) for r in records}

    def list_players(
        self,
        position: Optional[str] = None,
        max_cost: Optional[int] = None,
        available_only: bool = False,
        sort_by: str = "overall",
        limit: int = 100
    ) -> List[Player]:
        """List catalogue players, best first."""
        with self.get_session() as session:
            query = session.query(PlayerRecord)
            if position:
                query = query.filter(PlayerRecord.position == position)
            if max_cost is not None:
                query = query.filter(PlayerRecord.now_cost <= max_cost)
            if available_only:
                query = query.filter(PlayerRecord.owner_id.is_(None))

            if sort_by == "price":
                query = query.order_by(PlayerRecord.now_cost.desc())
            elif sort_by == "points":
                query = query.order_by(PlayerRecord.total_points.desc())
            elif sort_by == "name":
                query = query.order_by(PlayerRecord.name.asc())
            else:
                query = query.order_by(PlayerRecord.overall.desc(), PlayerRecord.now_cost.asc())

            return [_to_player(r) for r in query.limit(limit).all()]

    def get_owner_index(self) -> Dict[int, int]:
        """player_id -> owning roster id, for owned players only."""
        with self.get_session() as session:
            rows = session.query(PlayerRecord.id, PlayerRecord.owner_id).filter(
                PlayerRecord.owner_id.isnot(None)
            ).all()
            return {pid: owner for pid, owner in rows}

    # ==================== Rosters ====================

    def get_roster(self, roster_id: int) -> Optional[Roster]:
        with self.get_session() as session:
            record = session.get(RosterRecord, roster_id)
            return _to_roster(record) if record else None

    def get_roster_by_user(self, user_id: int) -> Optional[Roster]:
        with self.get_session() as session:
            record = session.query(RosterRecord).filter(
                RosterRecord.user_id == user_id
            ).first()
            return _to_roster(record) if record else None

    def get_roster_ids(self) -> List[int]:
        with self.get_session() as session:
            return [rid for (rid,) in session.query(RosterRecord.id).order_by(RosterRecord.id).all()]

    def insert_roster(self, roster: Roster) -> Roster:
        """
        Create a roster and claim its players in one transaction.

        Raises:
            RosterAlreadyExists: user already has a roster
            PlayerAlreadyOwned: a player was claimed by someone else first
        """
        with self.get_session() as session:
            record = RosterRecord(user_id=roster.user_id, version=0, **_roster_values(roster))
            session.add(record)
            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                raise RosterAlreadyExists("You already have a team.")

            self._claim_players(session, record.id, roster.player_ids)
            session.commit()
            return _to_roster(record)

    def commit_roster(
        self,
        roster: Roster,
        claim_ids: Iterable[int] = (),
        release_ids: Iterable[int] = (),
        transfer: Optional[Dict[str, Any]] = None,
        chip_event: Optional[Dict[str, Any]] = None
    ) -> Roster:
        """
        Write a roster if nobody else has written it since it was read.

        Args:
            roster: Updated roster carrying the version it was read at
            claim_ids: Players to take ownership of
            release_ids: Players to hand back to the market
            transfer: Optional transfer_history row
            chip_event: Optional {"chip", "gameweek", "cancelled"} chip usage event

        Returns:
            The roster as committed (with its new version)
        """
        with self.get_session() as session:
            updated = session.query(RosterRecord).filter(
                RosterRecord.id == roster.id,
                RosterRecord.version == roster.version
            ).update(
                dict(_roster_values(roster), version=roster.version + 1,
                     updated_at=datetime.utcnow()),
                synchronize_session=False
            )
            if updated != 1:
                session.rollback()
                raise ConcurrentModification(
                    f"Roster {roster.id} was modified concurrently. Please try again."
                )

            release_ids = list(release_ids)
            if release_ids:
                session.query(PlayerRecord).filter(
                    PlayerRecord.id.in_(release_ids),
                    PlayerRecord.owner_id == roster.id
                ).update(
                    {PlayerRecord.owner_id: None, PlayerRecord.version: PlayerRecord.version + 1},
                    synchronize_session=False
                )
            self._claim_players(session, roster.id, claim_ids)

            if transfer:
                session.add(TransferHistory(roster_id=roster.id, **transfer))
            if chip_event:
                self._record_chip_event(session, roster.id, chip_event)

            session.commit()
            record = session.get(RosterRecord, roster.id)
            return _to_roster(record)

    def _claim_players(self, session: Session, roster_id: int, player_ids: Iterable[int]) -> None:
        ids = list(player_ids)
        if not ids:
            return
        claimed = session.query(PlayerRecord).filter(
            PlayerRecord.id.in_(ids),
            PlayerRecord.owner_id.is_(None)
        ).update(
            {PlayerRecord.owner_id: roster_id, PlayerRecord.version: PlayerRecord.version + 1},
            synchronize_session=False
        )
        if claimed != len(ids):
            session.rollback()
            raise PlayerAlreadyOwned("One or more players are already owned by another team.", ids)

    def _record_chip_event(self, session: Session, roster_id: int, event: Dict[str, Any]) -> None:
        if event.get("cancelled"):
            usage = session.query(ChipUsage).filter(
                ChipUsage.roster_id == roster_id,
                ChipUsage.chip == event["chip"],
                ChipUsage.cancelled.is_(False)
            ).order_by(ChipUsage.used_at.desc()).first()
            if usage:
                usage.cancelled = True
                usage.cancelled_at = datetime.utcnow()
        else:
            session.add(ChipUsage(roster_id=roster_id, chip=event["chip"], gameweek=event["gameweek"]))

    def get_chip_history(self, roster_id: int) -> List[Dict[str, Any]]:
        with self.get_session() as session:
            rows = session.query(ChipUsage).filter(
                ChipUsage.roster_id == roster_id,
                ChipUsage.cancelled.is_(False)
            ).order_by(ChipUsage.used_at.asc()).all()
            return [
                {
                    "type": row.chip,
                    "gameweek": row.gameweek,
                    "used_at": row.used_at.isoformat() if row.used_at else None,
                }
                for row in rows
            ]

    def get_transfer_history(self, roster_id: int, gameweek: Optional[int] = None) -> List[Dict[str, Any]]:
        with self.get_session() as session:
            query = session.query(TransferHistory).filter(TransferHistory.roster_id == roster_id)
            if gameweek is not None:
                query = query.filter(TransferHistory.gameweek == gameweek)
            return [
                {
                    "gameweek": t.gameweek,
                    "player_out_id": t.player_out_id,
                    "player_in_id": t.player_in_id,
                    "selling_price": t.selling_price,
                    "purchase_price": t.purchase_price,
                    "is_hit": t.is_hit,
                    "executed_at": t.executed_at.isoformat() if t.executed_at else None,
                }
                for t in query.order_by(TransferHistory.id.asc()).all()
            ]

    # ==================== Gameweeks ====================

    def create_gameweek(self, number: int, deadline: datetime, lock_at: datetime) -> Gameweek:
        with self.get_session() as session:
            record = GameweekRecord(number=number, deadline=deadline, lock_at=lock_at, status=GameweekStatus.OPEN)
            session.add(record)
            session.commit()
            logger.info(f"Created Gameweek {number} (locks at {lock_at.isoformat()})")
            return _to_gameweek(record)

    def get_gameweek(self, number: int) -> Optional[Gameweek]:
        with self.get_session() as session:
            record = session.query(GameweekRecord).filter(GameweekRecord.number == number).first()
            return _to_gameweek(record) if record else None

    def get_current_gameweek(self) -> Optional[Gameweek]:
        """Latest gameweek that has not been archived."""
        with self.get_session() as session:
            record = session.query(GameweekRecord).filter(
                GameweekRecord.status != GameweekStatus.ARCHIVED
            ).order_by(GameweekRecord.number.desc()).first()
            return _to_gameweek(record) if record else None

    def get_latest_gameweek_number(self) -> int:
        with self.get_session() as session:
            record = session.query(GameweekRecord).order_by(GameweekRecord.number.desc()).first()
            return record.number if record else 0

    def set_gameweek_status(self, number: int, status: str, expected: Optional[str] = None) -> bool:
        """
        Move a gameweek to a new status.

        Returns:
            False if the gameweek is missing or not in the expected status
        """
        with self.get_session() as session:
            query = session.query(GameweekRecord).filter(GameweekRecord.number == number)
            if expected is not None:
                query = query.filter(GameweekRecord.status == expected)

            values: Dict[str, Any] = {"status": status}
            now = datetime.utcnow()
            if status == GameweekStatus.LOCKED:
                values["locked_at"] = now
            elif status == GameweekStatus.SCORED:
                values["scored_at"] = now
            elif status == GameweekStatus.ARCHIVED:
                values["archived_at"] = now

            updated = query.update(values, synchronize_session=False)
            session.commit()
            return updated == 1

    # ==================== Stats ====================

    def save_stat_lines(
        self,
        gameweek: int,
        lines: Dict[int, StatLine],
        points: Dict[int, float]
    ) -> int:
        """
        Upsert stat lines for a gameweek and keep season totals in step.

        Returns:
            Number of lines written
        """
        with self.get_session() as session:
            written = 0
            for player_id, line in lines.items():
                player = session.get(PlayerRecord, player_id)
                if player is None:
                    logger.warning(f"Skipping stats for unknown player {player_id}")
                    continue

                existing = session.query(PlayerGameweekStat).filter(
                    PlayerGameweekStat.player_id == player_id,
                    PlayerGameweekStat.gameweek == gameweek
                ).first()
                if existing:
                    self._apply_season_delta(player, existing, -1)
                else:
                    existing = PlayerGameweekStat(player_id=player_id, gameweek=gameweek)
                    session.add(existing)

                existing.goals = line.goals
                existing.assists = line.assists
                existing.saves = line.saves
                existing.clean_sheet = line.clean_sheet
                existing.own_goals = line.own_goals
                existing.played = line.played
                existing.points = points.get(player_id, 0.0)
                existing.ingested_at = datetime.utcnow()
                self._apply_season_delta(player, existing, 1)
                written += 1

            session.commit()
            return written

    @staticmethod
    def _apply_season_delta(player: PlayerRecord, stat: PlayerGameweekStat, sign: int) -> None:
        player.appearances = (player.appearances or 0) + sign * int(bool(stat.played))
        player.goals = (player.goals or 0) + sign * (stat.goals or 0)
        player.assists = (player.assists or 0) + sign * (stat.assists or 0)
        player.saves = (player.saves or 0) + sign * (stat.saves or 0)
        player.clean_sheets = (player.clean_sheets or 0) + sign * int(bool(stat.clean_sheet))
        player.own_goals = (player.own_goals or 0) + sign * (stat.own_goals or 0)
        player.total_points = round((player.total_points or 0.0) + sign * (stat.points or 0.0), 1)

    def get_stat_lines(self, gameweek: int, player_ids: Iterable[int]) -> Dict[int, StatLine]:
        ids = list(set(player_ids))
        with self.get_session() as session:
            rows = session.query(PlayerGameweekStat).filter(
                PlayerGameweekStat.gameweek == gameweek,
                PlayerGameweekStat.player_id.in_(ids)
            ).all()
            return {
                r.player_id: StatLine(
                    goals=r.goals, assists=r.assists, saves=r.saves,
                    clean_sheet=r.clean_sheet, own_goals=r.own_goals, played=r.played
                )
                for r in rows
            }

    # ==================== Scores ====================

    def commit_score(self, roster: Roster, gameweek: int, breakdown: ScoreBreakdown) -> Roster:
        """
        Append a gameweek score and update the roster totals atomically.

        Raises:
            ConcurrentModification: roster changed or was already scored
        """
        with self.get_session() as session:
            session.add(GameweekScore(
                roster_id=roster.id,
                gameweek=gameweek,
                points=breakdown.total,
                captain_points=breakdown.captain_points,
                bench_points=breakdown.bench_total,
                transfer_cost=breakdown.transfer_cost,
                chip=breakdown.chip,
                details={
                    "starters": {str(k): v for k, v in breakdown.starter_points.items()},
                    "bench": {str(k): v for k, v in breakdown.bench_points.items()},
                },
            ))
            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                raise ConcurrentModification(f"Roster {roster.id} already scored for Gameweek {gameweek}")

            updated = session.query(RosterRecord).filter(
                RosterRecord.id == roster.id,
                RosterRecord.version == roster.version
            ).update(
                dict(_roster_values(roster), version=roster.version + 1,
                     updated_at=datetime.utcnow()),
                synchronize_session=False
            )
            if updated != 1:
                session.rollback()
                raise ConcurrentModification(f"Roster {roster.id} was modified while scoring")

            session.commit()
            return _to_roster(session.get(RosterRecord, roster.id))

    def get_score(self, roster_id: int, gameweek: int) -> Optional[Dict[str, Any]]:
        with self.get_session() as session:
            score = session.query(GameweekScore).filter(
                GameweekScore.roster_id == roster_id,
                GameweekScore.gameweek == gameweek
            ).first()
            if not score:
                return None
            return {
                "roster_id": score.roster_id,
                "gameweek": score.gameweek,
                "points": score.points,
                "captain_points": score.captain_points,
                "bench_points": score.bench_points,
                "transfer_cost": score.transfer_cost,
                "chip": score.chip,
                "details": score.details,
            }

    # ==================== Leaderboard ====================

    def get_leaderboard(self, limit: int = 50, page: int = 1) -> Dict[str, Any]:
        """Rosters ranked by total points, then weekly points, then age."""
        skip = (page - 1) * limit
        with self.get_session() as session:
            records = session.query(RosterRecord).order_by(
                RosterRecord.points.desc(),
                RosterRecord.weekly_points.desc(),
                RosterRecord.created_at.asc(),
                RosterRecord.id.asc()
            ).offset(skip).limit(limit).all()
            total = session.query(RosterRecord).count()

            return {
                "teams": [
                    {
                        "rank": skip + i + 1,
                        "roster_id": r.id,
                        "name": r.name,
                        "user_id": r.user_id,
                        "points": r.points,
                        "weekly_points": r.weekly_points,
                    }
                    for i, r in enumerate(records)
                ],
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "pages": (total + limit - 1) // limit if limit else 0,
                },
            }
