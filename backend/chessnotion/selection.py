"""
Ordered selection of games queued for export.
"""
from typing import Iterable, List, Optional, Set, Tuple

from .game_data import NO_COLOR, ProcessedGame
from .normalizer import assign_user_color


def selection_key(game: ProcessedGame) -> str:
    return game.url or game.id


class GameSelection:
    """
    Games the user has picked, in the order they will be exported.

    Each game is identified by its URL (or its id when it has none), so a game
    can be in the selection only once. ``duplicate_urls`` holds the URLs the
    Notion duplicate check reported and shrinks as those games are removed.
    """

    def __init__(self, games: Optional[Iterable[ProcessedGame]] = None):
        self.games: List[ProcessedGame] = []
        self.duplicate_urls: Set[str] = set()
        if games:
            self.add_many(games)

    def __len__(self) -> int:
        return len(self.games)

    def __iter__(self):
        return iter(self.games)

    def _index(self, game_id: str) -> int:
        for i, game in enumerate(self.games):
            if game.id == game_id:
                return i
        return -1

    def find(self, game_id: str) -> Optional[ProcessedGame]:
        index = self._index(game_id)
        return self.games[index] if index >= 0 else None

    def contains(self, game: ProcessedGame) -> bool:
        key = selection_key(game)
        return any(selection_key(g) == key for g in self.games)

    def add(self, game: ProcessedGame) -> bool:
        """Append ``game`` unless a game with the same URL is already selected."""
        if self.contains(game):
            return False
        self.games.append(game)
        return True

    def add_many(self, games: Iterable[ProcessedGame]) -> Tuple[List[ProcessedGame], List[ProcessedGame]]:
        """Add games in order; returns ``(added, already_selected)``."""
        added, rejected = [], []
        for game in games:
            (added if self.add(game) else rejected).append(game)
        return added, rejected

    def toggle(self, game: ProcessedGame) -> bool:
        """Select or deselect a game from a platform list. Known duplicates cannot be selected."""
        if game.url in self.duplicate_urls:
            return False
        if self.contains(game):
            key = selection_key(game)
            self.games = [g for g in self.games if selection_key(g) != key]
        else:
            self.games.append(game)
        return True

    def remove(self, game_id: str) -> Optional[ProcessedGame]:
        index = self._index(game_id)
        if index < 0:
            return None
        removed = self.games.pop(index)
        self.duplicate_urls.discard(removed.url)
        return removed

    def move(self, active_id: str, over_id: str) -> None:
        """Move the ``active_id`` game to the position of ``over_id``."""
        if active_id == over_id:
            return
        old_index, new_index = self._index(active_id), self._index(over_id)
        if old_index < 0 or new_index < 0:
            return
        self.games.insert(new_index, self.games.pop(old_index))

    def set_color(self, game_id: str, color: str) -> ProcessedGame:
        index = self._index(game_id)
        if index < 0:
            raise KeyError(game_id)
        self.games[index] = assign_user_color(self.games[index], color)
        return self.games[index]

    def set_game_type(self, game_id: str, rated: bool, is_guest: Optional[bool] = None) -> ProcessedGame:
        index = self._index(game_id)
        if index < 0:
            raise KeyError(game_id)
        self.games[index] = self.games[index].with_changes(rated=rated, is_guest=is_guest)
        return self.games[index]

    def missing_color(self) -> bool:
        return any(game.user_color == NO_COLOR for game in self.games)

    def mark_duplicates(self, urls: Iterable[str]) -> None:
        self.duplicate_urls = set(urls)

    def non_duplicates(self) -> List[ProcessedGame]:
        return [game for game in self.games if game.url not in self.duplicate_urls]

    def clear(self) -> None:
        self.games = []
        self.duplicate_urls = set()
