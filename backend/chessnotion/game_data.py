"""
Data models for normalized chess games.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

WIN = "win"
LOSS = "loss"
DRAW = "draw"
UNKNOWN = "unknown"

WHITE = "white"
BLACK = "black"
NO_COLOR = "none"

BULLET = "bullet"
BLITZ = "blitz"
RAPID = "rapid"
CLASSICAL = "classical"

GAME_RESULTS = (WIN, LOSS, DRAW, UNKNOWN)
USER_COLORS = (WHITE, BLACK, NO_COLOR)
TIME_CLASSES = (BULLET, BLITZ, RAPID, CLASSICAL, UNKNOWN)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class PlayerInfo:
    """One side of a game."""
    username: str
    rating: int = 0  # Post-game rating where the source provides it
    rating_diff: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "rating": self.rating,
            "ratingDiff": self.rating_diff,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlayerInfo":
        data = data or {}
        return cls(
            username=str(data.get("username") or "unknown"),
            rating=_optional_int(data.get("rating")) or 0,
            rating_diff=_optional_int(data.get("ratingDiff")),
        )


@dataclass
class ProcessedGame:
    """
    Canonical, source-agnostic game record.

    ``id`` equals ``url`` whenever the source gives one; ``url`` is the key used
    for deduplication in a selection and against Notion.
    """
    id: str
    url: str
    pgn: str  # Raw PGN exactly as received
    time_control: str  # "600" or "180+2"
    time_class: str
    rated: bool
    white: PlayerInfo
    black: PlayerInfo
    user_result: str = UNKNOWN
    user_color: str = NO_COLOR
    end_time: int = 0  # Epoch seconds
    is_guest: Optional[bool] = None
    platform: str = UNKNOWN

    def player(self, color: str) -> Optional[PlayerInfo]:
        if color == WHITE:
            return self.white
        if color == BLACK:
            return self.black
        return None

    def opponent(self, color: str) -> Optional[PlayerInfo]:
        if color == WHITE:
            return self.black
        if color == BLACK:
            return self.white
        return None

    def with_changes(self, **changes) -> "ProcessedGame":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the key names the browser client and proxies exchange."""
        data = {
            "id": self.id,
            "url": self.url,
            "pgn": self.pgn,
            "time_control": self.time_control,
            "time_class": self.time_class,
            "rated": self.rated,
            "white": self.white.to_dict(),
            "black": self.black.to_dict(),
            "userResult": self.user_result,
            "userColor": self.user_color,
            "endTime": self.end_time,
            "platform": self.platform,
        }
        if self.is_guest is not None:
            data["isGuest"] = self.is_guest
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessedGame":
        url = str(data.get("url") or "")
        user_result = data.get("userResult", UNKNOWN)
        user_color = data.get("userColor", NO_COLOR)
        is_guest = data.get("isGuest")
        return cls(
            id=str(data.get("id") or url),
            url=url,
            pgn=str(data.get("pgn") or ""),
            time_control=str(data.get("time_control") or UNKNOWN),
            time_class=str(data.get("time_class") or UNKNOWN),
            rated=bool(data.get("rated", False)),
            white=PlayerInfo.from_dict(data.get("white")),
            black=PlayerInfo.from_dict(data.get("black")),
            user_result=user_result if user_result in GAME_RESULTS else UNKNOWN,
            user_color=user_color if user_color in USER_COLORS else NO_COLOR,
            end_time=_optional_int(data.get("endTime")) or 0,
            is_guest=None if is_guest is None else bool(is_guest),
            platform=str(data.get("platform") or UNKNOWN),
        )
