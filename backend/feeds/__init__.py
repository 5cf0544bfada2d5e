"""Player stats feed package."""

from .client import StatsFeedClient
from .models import PlayerStatPayload, GameweekStatsPayload

__all__ = ["StatsFeedClient", "PlayerStatPayload", "GameweekStatsPayload"]
