"""
Lichess API client for fetching user game data.
"""
import calendar
import requests
import json
import time
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import PlatformAPIError

logger = logging.getLogger(__name__)


def generate_monthly_archives(created_at: int, today: Optional[datetime] = None) -> List[str]:
    """
    List "YYYY/MM" months from account creation to the current month.

    Args:
        created_at: Account creation time (Unix ms), as Lichess reports it
        today: Reference date (default: now)

    Returns:
        Months, most recent first
    """
    start = datetime.fromtimestamp(created_at / 1000)
    today = today or datetime.now()

    archives = []
    year, month = start.year, start.month
    while (year, month) <= (today.year, today.month):
        archives.append(f"{year}/{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1

    archives.reverse()
    return archives


def month_bounds(year_month: str) -> tuple:
    """First and last millisecond-precision instants (local time) of a "YYYY/MM" month."""
    year_str, month_str = year_month.split('/')
    year, month = int(year_str), int(month_str)
    last_day = calendar.monthrange(year, month)[1]
    since = datetime(year, month, 1, 0, 0, 0)
    until = datetime(year, month, last_day, 23, 59, 59)
    return int(since.timestamp() * 1000), int(until.timestamp() * 1000)


class LichessClient:
    """Client for interacting with Lichess API."""

    BASE_URL = "https://lichess.org/api"
    RATE_LIMIT_DELAY = 1.0  # Lichess allows ~60 req/min

    def __init__(self, session: Optional[requests.Session] = None, rate_limit_delay: Optional[float] = None):
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'ChessNotion/1.0'
        })
        self.rate_limit_delay = self.RATE_LIMIT_DELAY if rate_limit_delay is None else rate_limit_delay

    def _make_request(self, url: str, params: dict = None, headers: dict = None) -> requests.Response:
        """Make API request, raising PlatformAPIError on failure."""
        if self.rate_limit_delay:
            time.sleep(self.rate_limit_delay)
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=120)
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 404:
                logger.warning(f"Not found: {url}")
                raise PlatformAPIError("Lichess user not found", status_code=404) from e
            logger.error(f"HTTP error fetching {url}: {str(e)}")
            raise PlatformAPIError(f"Lichess request failed ({status})", status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error fetching {url}: {str(e)}")
            raise PlatformAPIError(f"Could not reach Lichess: {e}") from e

    def get_user(self, username: str) -> Dict[str, Any]:
        """Public profile of a Lichess user (includes ``createdAt`` in Unix ms)."""
        response = self._make_request(f"{self.BASE_URL}/user/{username}")
        try:
            return response.json()
        except ValueError as e:
            raise PlatformAPIError("Lichess returned an invalid response") from e

    def get_monthly_archives(self, username: str, today: Optional[datetime] = None) -> List[str]:
        user = self.get_user(username)
        created_at = user.get('createdAt')
        if not created_at:
            return []
        return generate_monthly_archives(created_at, today=today)

    def get_games_for_month(self, username: str, year_month: str) -> List[Dict[str, Any]]:
        """
        Fetch raw game records played in one month.

        Args:
            username: Lichess username
            year_month: Month as "YYYY/MM"

        Returns:
            Parsed ND-JSON game objects; lines that are not valid JSON are skipped
        """
        since, until = month_bounds(year_month)
        url = f"{self.BASE_URL}/games/user/{username}"
        params = {
            'since': since,
            'until': until,
            'pgnInJson': 'true',
        }

        logger.info(f"Fetching Lichess games for {username} in {year_month}...")
        response = self._make_request(url, params=params, headers={'Accept': 'application/x-ndjson'})

        # Parse NDJSON response (newline-delimited JSON)
        games = []
        for line in response.text.strip().split('\n'):
            if not line.strip():
                continue
            try:
                games.append(json.loads(line))
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse game JSON: {e}")
                continue

        logger.info(f"Fetched {len(games)} Lichess games for {username}")
        return games
