"""
Minimal Notion REST API client (databases and pages only).
"""
import requests
import logging
from typing import Any, Dict, Iterator, List, Optional

from .errors import NotionAPIError

logger = logging.getLogger(__name__)


class NotionAPI:
    """Client for the parts of the Notion API the game import uses."""

    BASE_URL = "https://api.notion.com/v1"
    NOTION_VERSION = "2022-06-28"
    PAGE_SIZE = 100

    def __init__(self, api_key: str, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Notion-Version': self.NOTION_VERSION,
            'Content-Type': 'application/json',
        })

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Dict[str, Any]:
        url = f"{self.BASE_URL}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=30)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error calling Notion {path}: {str(e)}")
            raise NotionAPIError(f"Could not reach Notion: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get('message') or f"Notion request failed ({response.status_code})"
            logger.warning(f"Notion {method} {path} failed: {response.status_code} {message}")
            raise NotionAPIError(message, status_code=response.status_code, code=body.get('code'))
        return body

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        return self._request('GET', f"/databases/{database_id}")

    def query_database(self, database_id: str, filter: Optional[dict] = None) -> Iterator[Dict[str, Any]]:
        """Yield every page in the database matching ``filter``, following pagination cursors."""
        payload = {'page_size': self.PAGE_SIZE}
        if filter:
            payload['filter'] = filter

        while True:
            body = self._request('POST', f"/databases/{database_id}/query", payload)
            for page in body.get('results', []):
                yield page
            if not body.get('has_more') or not body.get('next_cursor'):
                break
            payload['start_cursor'] = body['next_cursor']

    def create_page(self, database_id: str, properties: Dict[str, Any],
                    children: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        payload = {
            'parent': {'database_id': database_id},
            'properties': properties,
        }
        if children:
            payload['children'] = children
        return self._request('POST', "/pages", payload)
