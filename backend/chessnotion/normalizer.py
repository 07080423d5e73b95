"""
Normalizers that turn platform API records and pasted PGN into ProcessedGame.

Chess.com and Lichess records name both players, so the user's color and
result are found by matching the configured username. Pasted PGN has no
reliable author, so the color stays ``none`` until the user picks one with
``assign_user_color``.
"""
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .config import Settings
from .game_data import BLACK, NO_COLOR, TIME_CLASSES, UNKNOWN, WHITE, PlayerInfo, ProcessedGame
from .pgn_parser import (
    PLATFORM_CHESS_COM, PLATFORM_LICHESS,
    classify_time_class, determine_user_result, get_result_from_pgn, is_guest_player,
    normalize_time_control, parse_pasted_pgn as _parse_pasted_pgn, result_for_color,
    split_multiple_pgns as _split_multiple_pgns,
)

logger = logging.getLogger(__name__)

LICHESS_GAME_URL = "https://lichess.org/{game_id}"


def _int_or(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _time_class(time_control: str, reported: Optional[str]) -> str:
    time_class = classify_time_class(time_control)
    if time_class == UNKNOWN and reported in TIME_CLASSES:
        return reported
    return time_class


class GameNormalizer:
    """Base class for producers of ProcessedGame records."""

    source = UNKNOWN

    def normalize(self, raw) -> Optional[ProcessedGame]:
        """Convert one raw record. Producers override this."""
        raise NotImplementedError

    def normalize_many(self, raws: Iterable) -> List[ProcessedGame]:
        """Normalize a batch, skipping records that fail without aborting the rest."""
        games = []
        for raw in raws:
            try:
                game = self.normalize(raw)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Failed to normalize {self.source} game: {e}")
                continue
            if game is not None:
                games.append(game)
        return games


class UsernameMatchedNormalizer(GameNormalizer):
    """Producers whose records name both players; the user is found by username."""

    def __init__(self, username: str):
        self.username = username or ""

    def user_perspective(self, white: PlayerInfo, black: PlayerInfo, pgn: str):
        return determine_user_result(white.username, black.username, get_result_from_pgn(pgn), self.username)


class ChessComNormalizer(UsernameMatchedNormalizer):
    """Chess.com Published-Data archive games."""

    source = PLATFORM_CHESS_COM

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChessComNormalizer":
        return cls(settings.chess_com_username)

    def normalize(self, raw: Dict[str, Any]) -> ProcessedGame:
        url = raw["url"]
        pgn = raw.get("pgn", "")
        raw_time_control = str(raw.get("time_control") or UNKNOWN)
        white = raw.get("white") or {}
        black = raw.get("black") or {}

        white_player = PlayerInfo(username=white.get("username", UNKNOWN), rating=_int_or(white.get("rating")))
        black_player = PlayerInfo(username=black.get("username", UNKNOWN), rating=_int_or(black.get("rating")))
        user_result, user_color = self.user_perspective(white_player, black_player, pgn)

        return ProcessedGame(
            id=url,
            url=url,
            pgn=pgn,
            time_control=normalize_time_control(raw_time_control),
            time_class=_time_class(raw_time_control, raw.get("time_class")),
            rated=bool(raw.get("rated", False)),
            white=white_player,
            black=black_player,
            user_result=user_result,
            user_color=user_color,
            end_time=_int_or(raw.get("end_time")),
            platform=PLATFORM_CHESS_COM,
        )


class LichessNormalizer(UsernameMatchedNormalizer):
    """Lichess game export records (one ND-JSON line each, with ``pgnInJson``)."""

    source = PLATFORM_LICHESS

    @classmethod
    def from_settings(cls, settings: Settings) -> "LichessNormalizer":
        return cls(settings.lichess_username)

    @staticmethod
    def _player(side: Dict[str, Any]) -> PlayerInfo:
        user = side.get("user") or {}
        if user.get("name"):
            name = user["name"]
        elif side.get("aiLevel"):
            name = f"Stockfish level {side['aiLevel']}"
        else:
            name = "Anonymous"
        # Lichess reports the pre-game rating
        rating_diff = side.get("ratingDiff") or None
        return PlayerInfo(
            username=name,
            rating=_int_or(side.get("rating")) + (rating_diff or 0),
            rating_diff=rating_diff,
        )

    @staticmethod
    def _time_control(clock: Optional[Dict[str, Any]]) -> str:
        if not clock or clock.get("initial") is None:
            return UNKNOWN
        initial = _int_or(clock.get("initial"))
        increment = _int_or(clock.get("increment"))
        return f"{initial}+{increment}" if increment > 0 else f"{initial}"

    def normalize(self, raw: Dict[str, Any]) -> ProcessedGame:
        url = LICHESS_GAME_URL.format(game_id=raw["id"])
        pgn = raw.get("pgn", "")
        players = raw.get("players") or {}
        white = self._player(players.get("white") or {})
        black = self._player(players.get("black") or {})
        user_result, user_color = self.user_perspective(white, black, pgn)
        time_control = self._time_control(raw.get("clock"))
        last_move_at = raw.get("lastMoveAt") or raw.get("createdAt") or 0

        return ProcessedGame(
            id=url,
            url=url,
            pgn=pgn,
            time_control=time_control,
            time_class=_time_class(time_control, raw.get("speed")),
            rated=bool(raw.get("rated", False)),
            is_guest=is_guest_player(white.username) or is_guest_player(black.username),
            white=white,
            black=black,
            user_result=user_result,
            user_color=user_color,
            end_time=_int_or(last_move_at) // 1000,
            platform=PLATFORM_LICHESS,
        )


class PastedPGNNormalizer(GameNormalizer):
    """Pasted PGN text; color is assigned later by the user."""

    source = "PGN"

    def normalize(self, raw: str) -> Optional[ProcessedGame]:
        return _parse_pasted_pgn(raw)

    def iter_fragments(self, text: str) -> Iterator[Tuple[str, Optional[ProcessedGame]]]:
        """Yield ``(fragment, game)`` for each game in a paste; ``game`` is None when unreadable."""
        for fragment in _split_multiple_pgns(text):
            yield fragment, self.normalize(fragment)

    def parse_text(self, text: str) -> Tuple[List[ProcessedGame], int]:
        """Parse every game in a paste; returns the games and the number of fragments that failed."""
        games = []
        failed = 0
        for _, game in self.iter_fragments(text):
            if game is None:
                failed += 1
                continue
            games.append(game)
        if failed:
            logger.info(f"Skipped {failed} unparsable PGN fragment(s)")
        return games, failed

    def normalize_text(self, text: str) -> List[ProcessedGame]:
        return self.parse_text(text)[0]


def assign_user_color(game: ProcessedGame, color: str) -> ProcessedGame:
    """Return a copy of ``game`` seen from ``color`` with the result recomputed from its PGN."""
    if color not in (WHITE, BLACK):
        raise ValueError(f"Color must be '{WHITE}' or '{BLACK}', got {color!r}")
    return game.with_changes(
        user_color=color,
        user_result=result_for_color(get_result_from_pgn(game.pgn), color),
    )


def refresh_user_result(game: ProcessedGame) -> ProcessedGame:
    """Recompute ``user_result`` for a game whose color was set by hand."""
    if game.user_color == NO_COLOR:
        return game
    return assign_user_color(game, game.user_color)


def parse_from_chess_com_api(raw: Dict[str, Any], username: str) -> ProcessedGame:
    return ChessComNormalizer(username).normalize(raw)


def parse_from_lichess_api(raw: Dict[str, Any], username: str) -> ProcessedGame:
    return LichessNormalizer(username).normalize(raw)


def parse_pasted_pgn(text: str) -> Optional[ProcessedGame]:
    return _parse_pasted_pgn(text)


def split_multiple_pgns(text: str) -> List[str]:
    return _split_multiple_pgns(text)
