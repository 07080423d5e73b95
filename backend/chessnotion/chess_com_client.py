"""
Chess.com API client for fetching a player's monthly game archives.
"""
import requests
import time
import logging
from typing import Any, Dict, List, Optional

from .errors import PlatformAPIError

logger = logging.getLogger(__name__)


class ChessComClient:
    """Client for interacting with Chess.com Published Data API."""

    BASE_URL = "https://api.chess.com/pub"
    RATE_LIMIT_DELAY = 0.1  # Delay between requests in seconds

    def __init__(self, session: Optional[requests.Session] = None, rate_limit_delay: Optional[float] = None):
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'ChessNotion/1.0'
        })
        self.rate_limit_delay = self.RATE_LIMIT_DELAY if rate_limit_delay is None else rate_limit_delay

    def _make_request(self, url: str, allow_404: bool = False) -> Optional[dict]:
        """
        Make an API request with error handling and rate limiting.
        """
        if self.rate_limit_delay:
            time.sleep(self.rate_limit_delay)
        try:
            response = self.session.get(url, timeout=10)
            if response.status_code == 404 and allow_404:
                return None
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning(f"HTTP error fetching {url}: {e}")
            raise PlatformAPIError(f"Chess.com request failed ({status})", status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error fetching {url}: {str(e)}")
            raise PlatformAPIError(f"Could not reach Chess.com: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise PlatformAPIError("Chess.com returned an invalid response") from e

    def get_player_archives(self, username: str) -> List[str]:
        """Monthly archive URLs for a player, oldest first as Chess.com returns them."""
        url = f"{self.BASE_URL}/player/{username}/games/archives"
        data = self._make_request(url, allow_404=True)
        if data is None:
            raise PlatformAPIError(f"Chess.com player '{username}' not found", status_code=404)
        return list(data.get('archives', []))

    def get_games_from_archive(self, archive_url: str) -> List[Dict[str, Any]]:
        """Raw game objects from one monthly archive; a missing archive is empty."""
        data = self._make_request(archive_url, allow_404=True)
        if not data:
            return []
        return list(data.get('games', []))
