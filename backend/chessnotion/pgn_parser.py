"""
PGN parsing utilities - header block only.

Moves are never parsed; only the bracketed tag pairs and a handful of derived
fields (time class, platform, end time, guest flag) are extracted.
"""
import hashlib
import logging
import math
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from .game_data import (
    BLACK, BLITZ, BULLET, CLASSICAL, DRAW, LOSS, NO_COLOR, RAPID, UNKNOWN, WHITE, WIN,
    PlayerInfo, ProcessedGame,
)

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r'\[(\w+)\s+"(.*)"\]')
GAME_BOUNDARY_RE = re.compile(r'\r?\n[ \t]*\r?\n(?=\[Event)')
TIME_CONTROL_RE = re.compile(r'^(\d+)(?:\+(\d+))?$')
RESULT_RE = re.compile(r'\[Result "(.*)"\]')
CLOCK_RE = re.compile(r'(\d{1,2}):(\d{2})(?::(\d{2}))?')

BULLET_LIMIT = 180
BLITZ_LIMIT = 600
RAPID_LIMIT = 1800

PLATFORM_CHESS_COM = "Chess.com"
PLATFORM_LICHESS = "Lichess"

# PGN result code -> outcome for (white, black)
_RESULT_OUTCOMES = {
    "1-0": (WIN, LOSS),
    "0-1": (LOSS, WIN),
    "1/2-1/2": (DRAW, DRAW),
}


def extract_headers(pgn_text: str) -> Dict[str, str]:
    """
    Map ``[Key "Value"]`` tag pairs to their values, one tag per line.

    Lines that are not tag pairs are skipped; a repeated key keeps its last value.
    """
    headers = {}
    for line in pgn_text.splitlines():
        match = HEADER_RE.search(line)
        if match:
            headers[match.group(1)] = match.group(2)
    return headers


def split_multiple_pgns(text: str) -> List[str]:
    """Split pasted text into one chunk per game on a blank line before ``[Event``."""
    if not text:
        return []
    return [chunk.strip() for chunk in GAME_BOUNDARY_RE.split(text) if chunk.strip()]


def normalize_time_control(time_control: str) -> str:
    """Drop a zero increment ("600+0" -> "600"); anything else passes through."""
    match = TIME_CONTROL_RE.match(time_control.strip())
    if match and match.group(2) is not None and int(match.group(2)) == 0:
        return match.group(1)
    return time_control


def base_seconds(time_control: str) -> Optional[int]:
    match = TIME_CONTROL_RE.match(time_control.strip())
    if not match:
        return None
    return int(match.group(1))


def classify_time_class(value: Union[int, str, None]) -> str:
    """Bucket base thinking time in seconds; time-control strings are accepted too."""
    if isinstance(value, bool) or value is None:
        return UNKNOWN
    if isinstance(value, str):
        seconds = base_seconds(value)
    else:
        seconds = value
    if seconds is None or seconds < 0:
        return UNKNOWN
    if seconds < BULLET_LIMIT:
        return BULLET
    if seconds < BLITZ_LIMIT:
        return BLITZ
    if seconds < RAPID_LIMIT:
        return RAPID
    return CLASSICAL


def get_result_from_pgn(pgn: str) -> Optional[str]:
    match = RESULT_RE.search(pgn or "")
    return match.group(1) if match else None


def result_for_color(result: Optional[str], color: str) -> str:
    """Outcome of a PGN result code seen from ``color``."""
    outcomes = _RESULT_OUTCOMES.get(result or "")
    if outcomes is None:
        return UNKNOWN
    if color == WHITE:
        return outcomes[0]
    if color == BLACK:
        return outcomes[1]
    return UNKNOWN


def determine_user_result(white_username: str, black_username: str,
                          result: Optional[str], username: str) -> Tuple[str, str]:
    """Return ``(user_result, user_color)`` by matching ``username`` against both players."""
    if not result or not username:
        return UNKNOWN, NO_COLOR

    me = username.lower()
    if (white_username or "").lower() == me:
        color = WHITE
    elif (black_username or "").lower() == me:
        color = BLACK
    else:
        return UNKNOWN, NO_COLOR

    return result_for_color(result, color), color


def resolve_end_time(date: Optional[str], time: Optional[str],
                     now: Optional[datetime] = None) -> int:
    """
    Combine a PGN date and time into epoch seconds.

    Missing parts default to the current local date / wall-clock time and the
    result is read as local time. This is best-effort: a malformed date falls
    back to ``now`` and PGN UTC headers are not reconciled with the local zone.
    """
    now = now or datetime.now()
    resolved_date = re.sub(r'[^0-9]', '-', date.strip()) if date else now.strftime("%Y-%m-%d")
    resolved_time = now.strftime("%H:%M:%S")
    if time:
        # Chess.com writes e.g. "4:21:37 GMT+0000"
        clock = CLOCK_RE.search(time)
        if clock:
            hours, minutes, seconds = clock.groups()
            resolved_time = f"{int(hours):02d}:{minutes}:{seconds or '00'}"
        else:
            resolved_time = time.strip()

    try:
        moment = datetime.fromisoformat(f"{resolved_date}T{resolved_time}")
    except ValueError:
        logger.warning(f"Unparsable PGN date/time {date!r} {time!r}, using current time")
        moment = now
    return math.floor(moment.timestamp())


def detect_platform(site: Optional[str], link: Optional[str] = None) -> Tuple[str, Optional[str]]:
    """Return ``(platform, url)`` from the Site (and Chess.com Link) headers."""
    site = (site or "").strip()
    site_lower = site.lower()
    if "chess.com" in site_lower:
        return PLATFORM_CHESS_COM, link or (site if site_lower.startswith("http") else None)
    if "https://lichess.org" in site_lower:
        return PLATFORM_LICHESS, site
    return UNKNOWN, site if site_lower.startswith("http") else None


def is_guest_player(name: Optional[str]) -> bool:
    if not name:
        return False
    return name.startswith("Guest") or name == "Anonymous"


def _int_header(headers: Dict[str, str], key: str, default: Optional[int] = 0) -> Optional[int]:
    value = headers.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _fallback_id(pgn: str) -> str:
    return "pgn-" + hashlib.sha1(pgn.encode("utf-8")).hexdigest()[:16]


def parse_pasted_pgn(pgn: str) -> Optional[ProcessedGame]:
    """
    Parse a single pasted PGN game into a ProcessedGame.

    The user's color is unknown at this point, so ``user_color`` is ``none`` and
    ``user_result`` is ``unknown`` until a color is assigned. Returns None when
    the text carries no tag pairs at all or cannot be read.
    """
    try:
        headers = extract_headers(pgn)
        if not headers:
            logger.warning("PGN fragment has no header tags, skipping")
            return None

        white = headers.get("White", UNKNOWN)
        black = headers.get("Black", UNKNOWN)
        time_control = headers.get("TimeControl", UNKNOWN)
        event = headers.get("Event", UNKNOWN)
        platform, url = detect_platform(headers.get("Site"), headers.get("Link"))

        end_time = resolve_end_time(
            headers.get("UTCDate") or headers.get("Date"),
            headers.get("EndTime") or headers.get("UTCTime"),
        )

        game_url = url or ""
        return ProcessedGame(
            id=game_url or _fallback_id(pgn),
            url=game_url,
            pgn=pgn,
            time_control=normalize_time_control(time_control) if time_control != UNKNOWN else time_control,
            time_class=classify_time_class(time_control),
            rated="rated" in event.lower(),
            is_guest=is_guest_player(white) or is_guest_player(black),
            white=PlayerInfo(
                username=white,
                rating=_int_header(headers, "WhiteElo"),
                rating_diff=_int_header(headers, "WhiteRatingDiff", None),
            ),
            black=PlayerInfo(
                username=black,
                rating=_int_header(headers, "BlackElo"),
                rating_diff=_int_header(headers, "BlackRatingDiff", None),
            ),
            user_result=UNKNOWN,
            user_color=NO_COLOR,
            end_time=end_time,
            platform=platform,
        )
    except Exception as e:
        logger.warning(f"Error parsing PGN: {e}")
        return None

