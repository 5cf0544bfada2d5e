"""
Stats Feed Client

Wrapper for the external player-stats feed.
"""

import logging
import time
from typing import Dict, Optional

import requests

from engine.models import StatLine
from .models import GameweekStatsPayload

logger = logging.getLogger(__name__)


class StatsFeedClient:
    """Client for the per-gameweek player stats endpoint."""

    MIN_REQUEST_INTERVAL = 0.25  # seconds between requests

    def __init__(self, base_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize the feed client.

        Args:
            base_url: Feed root, e.g. https://stats.example.com/api
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._last_request_time = 0.0

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.MIN_REQUEST_INTERVAL:
            time.sleep(self.MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.time()

    def _get(self, endpoint: str):
        self._rate_limit()
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Stats feed request failed: {e}")
            raise

    def fetch_gameweek(self, gameweek: int) -> Optional[Dict[int, StatLine]]:
        """
        Get stat lines for a gameweek.

        Returns:
            player_id -> StatLine, or None if the feed has not finalised the round
        """
        payload = GameweekStatsPayload.model_validate(self._get(f"gameweeks/{gameweek}/stats"))
        if payload.gameweek != gameweek:
            logger.warning(f"Feed returned Gameweek {payload.gameweek} when asked for {gameweek}")
            return None
        if not payload.finalized:
            logger.info(f"Stats for Gameweek {gameweek} not finalised yet")
            return None
        return {p.player_id: p.to_stat_line() for p in payload.players}
