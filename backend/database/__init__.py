"""Database module."""

from .models import Base, PlayerRecord, RosterRecord, GameweekRecord, init_db
from .crud import DatabaseManager

__all__ = ["Base", "PlayerRecord", "RosterRecord", "GameweekRecord", "init_db", "DatabaseManager"]
