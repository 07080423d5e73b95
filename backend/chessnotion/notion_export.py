"""
Server side of the Notion proxies: duplicate lookup and game import.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Set

from .errors import NotionAPIError
from .game_data import ProcessedGame
from .notion_api import NotionAPI
from .notion_pages import PROP_LINK, build_page_children, build_page_properties

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


@dataclass
class ImportReport:
    """Outcome of importing a batch of games, one Notion page per game."""
    total: int
    imported: int = 0
    failed_urls: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.failed_urls and self.imported:
            return STATUS_PARTIAL
        if self.failed_urls:
            return STATUS_FAILED
        return STATUS_SUCCESS

    @property
    def success(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def http_status(self) -> int:
        return {STATUS_SUCCESS: 200, STATUS_PARTIAL: 207, STATUS_FAILED: 500}[self.status]

    @property
    def message(self) -> str:
        if self.status == STATUS_PARTIAL:
            return f"Import partially failed. {self.imported} succeeded, {len(self.failed_urls)} failed."
        if self.status == STATUS_FAILED:
            return "All games failed to import. Check Notion database properties and permissions."
        return f"Successfully imported {self.imported} games to Notion!"


def existing_game_urls(notion: NotionAPI, database_id: str) -> Set[str]:
    """URLs stored in the link column of every page in the database."""
    urls = set()
    link_filter = {'property': PROP_LINK, 'url': {'is_not_empty': True}}
    for page in notion.query_database(database_id, filter=link_filter):
        link = (page.get('properties') or {}).get(PROP_LINK) or {}
        if link.get('type') == 'url' and link.get('url'):
            urls.add(link['url'])
    return urls


def find_duplicate_urls(notion: NotionAPI, database_id: str, games: Sequence[ProcessedGame]) -> List[str]:
    """URLs of ``games`` already present in the database, in selection order."""
    existing = existing_game_urls(notion, database_id)
    duplicates = []
    for game in games:
        if game.url and game.url in existing and game.url not in duplicates:
            duplicates.append(game.url)
    logger.info(f"Found {len(duplicates)} duplicate(s) among {len(games)} game(s)")
    return duplicates


def import_games(notion: NotionAPI, database_id: str, games: Sequence[ProcessedGame]) -> ImportReport:
    """Create one page per game; a failing game is recorded and the rest still run."""
    report = ImportReport(total=len(games))
    for game in games:
        try:
            notion.create_page(
                database_id,
                properties=build_page_properties(game),
                children=build_page_children(game),
            )
            report.imported += 1
        except (NotionAPIError, ValueError, OverflowError) as e:
            logger.error(f"Failed to import game {game.url} to Notion: {e}")
            report.failed_urls.append(game.url)
    return report
