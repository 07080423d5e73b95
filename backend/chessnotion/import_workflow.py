"""
Import workflow: paste or pick games, validate, confirm, check duplicates, export.

Validation failures stop the flow before any network call. The duplicate
check and the export are two sequential round-trips and the export only runs
after a clean duplicate result.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Settings
from .game_data import ProcessedGame
from .normalizer import PastedPGNNormalizer, refresh_user_result
from .notion_service import NotionService
from .selection import GameSelection

logger = logging.getLogger(__name__)

MSG_EMPTY_PASTE = "Please enter PGN text."
MSG_PARSE_FAILED = "Failed to parse PGN. Please check the format."
MSG_NO_SELECTION = "No games selected to import."
MSG_MISSING_COLOR = "Please assign your color (White/Black) for all games."
MSG_MISSING_DATABASE = "Notion Database ID not set in settings."
MSG_WRONG_PASSWORD = "Incorrect password."
MSG_NOTHING_TO_IMPORT = "No non-duplicate games to import."


def duplicates_message(count: int) -> str:
    return f"Found {count} duplicate game(s). Please remove duplicates and try again."


@dataclass
class ImportStatus:
    """User-facing status line; ``success`` is None while an operation is pending."""
    message: str = ""
    success: Optional[bool] = None
    partial: bool = False  # Some games imported, others failed


@dataclass
class PasteResult:
    added: List[ProcessedGame] = field(default_factory=list)
    duplicate_pgns: List[str] = field(default_factory=list)
    failed: int = 0
    error: Optional[str] = None
    status: ImportStatus = field(default_factory=ImportStatus)

    @property
    def leftover_text(self) -> str:
        """Text to leave in the paste box: the fragments that were already selected."""
        return "\n\n".join(self.duplicate_pgns)


class ImportWorkflow:
    """Owns the selection and drives it through duplicate check and export."""

    def __init__(self, settings: Settings, service: NotionService,
                 selection: Optional[GameSelection] = None):
        self.settings = settings
        self.service = service
        self.selection = selection if selection is not None else GameSelection()
        self.status = ImportStatus()
        self._pgn_normalizer = PastedPGNNormalizer()

    def parse_pasted_text(self, text: str) -> PasteResult:
        """Parse a paste into the selection; already-selected games are handed back."""
        result = PasteResult()
        if not text or not text.strip():
            result.error = MSG_EMPTY_PASTE
            return result

        for chunk, game in self._pgn_normalizer.iter_fragments(text):
            if game is None:
                result.failed += 1
                continue
            if self.selection.add(game):
                result.added.append(game)
            else:
                result.duplicate_pgns.append(chunk)

        if result.added:
            result.status = ImportStatus(f"Successfully parsed {len(result.added)} game(s).", True)
            self.status = result.status
        if result.duplicate_pgns:
            result.error = f"{len(result.duplicate_pgns)} duplicate game(s) found. They remain in the text box."
        elif not result.added and result.failed:
            result.error = MSG_PARSE_FAILED
        return result

    def remove_game(self, game_id: str) -> Optional[ProcessedGame]:
        """Remove a game; removing a reported duplicate refreshes the duplicate message."""
        was_duplicate = bool(self.selection.duplicate_urls)
        removed = self.selection.remove(game_id)
        if removed is not None and was_duplicate:
            remaining = len(self.selection.duplicate_urls)
            self.status = ImportStatus(duplicates_message(remaining), False) if remaining else ImportStatus()
        return removed

    def validate_for_export(self) -> Optional[str]:
        """Return the message that blocks an export, or None when the selection may proceed."""
        if not self.selection.games:
            return MSG_NO_SELECTION
        if self.selection.missing_color():
            return MSG_MISSING_COLOR
        if not self.settings.notion_database_id:
            return MSG_MISSING_DATABASE
        return None

    def start_import(self, password: str) -> ImportStatus:
        """Validate, confirm the password, then check duplicates and export."""
        error = self.validate_for_export()
        if error:
            self.status = ImportStatus(error, False)
            return self.status

        if not self.service.confirm_password(password):
            self.status = ImportStatus(MSG_WRONG_PASSWORD, False)
            return self.status

        return self.check_for_duplicates()

    def check_for_duplicates(self) -> ImportStatus:
        database_id = self.settings.notion_database_id
        if not database_id:
            self.status = ImportStatus(MSG_MISSING_DATABASE, False)
            return self.status

        self.status = ImportStatus("Checking for duplicates...", None)
        result = self.service.check_duplicate_games(self.selection.games, database_id)
        if not result.get('success'):
            self.status = ImportStatus(result.get('message', ''), False)
            return self.status

        self.selection.mark_duplicates(result.get('duplicateUrls') or [])
        if self.selection.duplicate_urls:
            self.status = ImportStatus(duplicates_message(len(self.selection.duplicate_urls)), False)
            return self.status

        return self.perform_import()

    def perform_import(self) -> ImportStatus:
        self.status = ImportStatus("Importing games...", None)
        games = [refresh_user_result(game) for game in self.selection.non_duplicates()]
        if not games:
            self.status = ImportStatus(MSG_NOTHING_TO_IMPORT, False)
            return self.status

        result = self.service.export_games_to_notion(games, self.settings.notion_database_id)
        self.status = ImportStatus(
            result.get('message', ''),
            bool(result.get('success')),
            partial=bool(result.get('failedUrls')) and result.get('importedCount', 0) > 0,
        )
        if self.status.success:
            logger.info(f"Exported {len(games)} game(s) to Notion")
            self.selection.clear()
        return self.status
