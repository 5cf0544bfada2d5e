"""
Database Models

SQLAlchemy models for players, rosters, gameweeks, stats and scores.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, JSON,
    ForeignKey, UniqueConstraint, create_engine
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class PlayerRecord(Base):
    """Catalogue player with season totals."""
    __tablename__ = "players"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    position = Column(String(10), nullable=False, index=True)  # GK, CDM, LW, RW
    now_cost = Column(Integer, nullable=False)  # 0.1m units
    overall = Column(Integer, default=75)

    # Owner index: player id -> roster id
    owner_id = Column(Integer, ForeignKey("rosters.id"), nullable=True, index=True)

    # Season totals
    appearances = Column(Integer, default=0)
    goals = Column(Integer, default=0)
    assists = Column(Integer, default=0)
    saves = Column(Integer, default=0)
    clean_sheets = Column(Integer, default=0)
    own_goals = Column(Integer, default=0)
    total_points = Column(Float, default=0.0)

    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (UniqueConstraint("name", "position", name="uq_player_name_position"),)


class RosterRecord(Base):
    """A user's fantasy team. One per user."""
    __tablename__ = "rosters"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(30), nullable=False)

    bank = Column(Integer, nullable=False)  # 0.1m units
    points = Column(Float, default=0.0, index=True)
    weekly_points = Column(Float, default=0.0)

    # Lineup (ordered player id lists)
    starters = Column(JSON, nullable=False)
    subs = Column(JSON, nullable=False)
    captain_id = Column(Integer, nullable=False)
    vice_captain_id = Column(Integer, nullable=False)

    # Chips: {"wildcard": False, ...}
    chips_used = Column(JSON, nullable=False)
    active_chip = Column(String(20), nullable=True)
    free_hit_snapshot = Column(JSON, nullable=True)

    # Transfers this gameweek
    free_transfers = Column(Integer, default=1)
    transfers_made = Column(Integer, default=0)
    transfer_cost = Column(Integer, default=0)

    # Season stats
    highest_weekly_score = Column(Float, default=0.0)
    total_transfers = Column(Integer, default=0)

    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class GameweekRecord(Base):
    """Scoring round and its lock window."""
    __tablename__ = "gameweeks"

    id = Column(Integer, primary_key=True)
    number = Column(Integer, nullable=False, unique=True, index=True)
    deadline = Column(DateTime, nullable=False)
    lock_at = Column(DateTime, nullable=False)
    status = Column(String(20), default="open")  # open, locked, scored, archived

    locked_at = Column(DateTime)
    scored_at = Column(DateTime)
    archived_at = Column(DateTime)


class PlayerGameweekStat(Base):
    """Tabulated stats for one player in one gameweek."""
    __tablename__ = "player_gameweek_stats"

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    gameweek = Column(Integer, nullable=False, index=True)

    goals = Column(Integer, default=0)
    assists = Column(Integer, default=0)
    saves = Column(Integer, default=0)
    clean_sheet = Column(Boolean, default=False)
    own_goals = Column(Integer, default=0)
    played = Column(Boolean, default=False)
    points = Column(Float, default=0.0)

    ingested_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (UniqueConstraint("player_id", "gameweek", name="uq_stat_player_gameweek"),)


class GameweekScore(Base):
    """Committed points for a roster in a gameweek. Append-only."""
    __tablename__ = "gameweek_scores"

    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id"), nullable=False, index=True)
    gameweek = Column(Integer, nullable=False, index=True)

    points = Column(Float, nullable=False)
    captain_points = Column(Float, default=0.0)
    bench_points = Column(Float, default=0.0)
    transfer_cost = Column(Integer, default=0)
    chip = Column(String(20))

    # Per-player breakdown (JSON)
    details = Column(JSON)

    scored_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (UniqueConstraint("roster_id", "gameweek", name="uq_score_roster_gameweek"),)


class TransferHistory(Base):
    """Record of committed transfers."""
    __tablename__ = "transfer_history"

    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id"), nullable=False, index=True)
    gameweek = Column(Integer, nullable=False)

    # Transfer details
    player_out_id = Column(Integer)
    player_in_id = Column(Integer)

    # Prices (0.1m units)
    selling_price = Column(Integer)
    purchase_price = Column(Integer)

    # Was it a hit?
    is_hit = Column(Boolean, default=False)

    executed_at = Column(DateTime, default=datetime.utcnow)


class ChipUsage(Base):
    """When each chip was played (and whether it was later cancelled)."""
    __tablename__ = "chip_usage"

    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id"), nullable=False, index=True)
    chip = Column(String(20), nullable=False)
    gameweek = Column(Integer, nullable=False)
    cancelled = Column(Boolean, default=False)

    used_at = Column(DateTime, default=datetime.utcnow)
    cancelled_at = Column(DateTime)


def init_db(db_url: str = "sqlite:///fantasy_league.db"):
    """
    Initialize the database.

    Args:
        db_url: Database connection URL

    Returns:
        Tuple of (engine, SessionLocal)
    """
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    return engine, SessionLocal
