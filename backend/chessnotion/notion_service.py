"""
Client for the Notion proxy endpoints and the password gate.

Every call returns the proxies' ``{success, message, ...}`` envelope; network
and server failures are folded into ``success: False`` with a readable message.
"""
import requests
import logging
from typing import Any, Dict, Optional, Sequence

from .config import Settings
from .game_data import ProcessedGame

logger = logging.getLogger(__name__)


class NotionService:
    """Talks to the proxy backend on behalf of the import workflow."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 60):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotionService":
        return cls(settings.proxy_base_url)

    def _post(self, path: str, payload: Dict[str, Any], default_error: str) -> Dict[str, Any]:
        try:
            response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error calling {path}: {str(e)}")
            return {'success': False, 'message': str(e)}

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            logger.warning(f"{path} returned a non-object body")
            result = {}

        # 207 carries a partial-failure envelope
        if not response.ok and response.status_code != 207:
            message = result.get('message') or default_error
            logger.error(f"{path} failed: {response.status_code} {message}")
            return {'success': False, 'message': message}
        return result

    def check_duplicate_games(self, games: Sequence[ProcessedGame], database_id: str) -> Dict[str, Any]:
        """Ask the proxy which of ``games`` already exist in the Notion database."""
        if not database_id:
            return {'success': False, 'message': "Notion Database ID is required."}
        if not games:
            return {'success': False, 'message': "No games to check."}
        return self._post(
            '/api/notion-check-duplicates',
            {'games': [game.to_dict() for game in games], 'databaseId': database_id},
            'Failed to check duplicates.',
        )

    def export_games_to_notion(self, games: Sequence[ProcessedGame], database_id: str) -> Dict[str, Any]:
        """Create one Notion page per game through the import proxy."""
        if not database_id:
            return {'success': False, 'message': "Notion Database ID is required. Please check settings."}
        if not games:
            return {'success': False, 'message': "No games selected to import."}
        return self._post(
            '/api/notion-import-games',
            {'games': [game.to_dict() for game in games], 'databaseId': database_id},
            'An unknown error occurred during the Notion import.',
        )

    def confirm_password(self, password: str) -> bool:
        result = self._post('/api/password', {'password': password}, 'Incorrect password.')
        return bool(result.get('isConfirmed'))
