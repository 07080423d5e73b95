"""
Win/loss/draw statistics over a user's games.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, List, Optional

from .chess_com_client import ChessComClient
from .game_data import BLACK, DRAW, LOSS, WHITE, WIN, ProcessedGame
from .normalizer import ChessComNormalizer

logger = logging.getLogger(__name__)


@dataclass
class GameStats:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    total: int = 0

    def percentage(self, count: int) -> float:
        if not self.total:
            return 0.0
        return round(count / self.total * 100, 1)

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data.update({
            "winRate": self.percentage(self.wins),
            "lossRate": self.percentage(self.losses),
            "drawRate": self.percentage(self.draws),
        })
        return data


def calculate_stats(games: Iterable[ProcessedGame]) -> GameStats:
    """Count outcomes; games with an unknown result only add to ``total``."""
    stats = GameStats()
    for game in games:
        if game.user_result == WIN:
            stats.wins += 1
        elif game.user_result == LOSS:
            stats.losses += 1
        elif game.user_result == DRAW:
            stats.draws += 1
        stats.total += 1
    return stats


def summarize(games: List[ProcessedGame], rated_only: bool = False) -> Dict[str, Dict[str, float]]:
    """Overall and per-color stats, optionally restricted to rated games."""
    if rated_only:
        games = [game for game in games if game.rated]
    return {
        "overall": calculate_stats(games).to_dict(),
        "white": calculate_stats(g for g in games if g.user_color == WHITE).to_dict(),
        "black": calculate_stats(g for g in games if g.user_color == BLACK).to_dict(),
    }


def fetch_all_chess_com_games(client: ChessComClient, username: str,
                              progress: Optional[Callable[[float], None]] = None) -> List[ProcessedGame]:
    """
    Fetch and normalize every archived game of a Chess.com user.

    Archives are fetched one at a time; ``progress`` receives the completed
    percentage after each archive.
    """
    normalizer = ChessComNormalizer(username)
    archives = client.get_player_archives(username)
    total_archives = len(archives)
    games = []

    for i, archive_url in enumerate(archives):
        games.extend(normalizer.normalize_many(client.get_games_from_archive(archive_url)))
        if progress:
            progress((i + 1) / total_archives * 100)

    logger.info(f"Fetched {len(games)} games from {total_archives} archives for {username}")
    return games
