import sys
from pathlib import Path

import pytest

backend_path = Path(__file__).resolve().parents[1]
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from pgn_samples import CHESS_COM_PGN, LICHESS_PGN  # noqa: E402


@pytest.fixture
def chess_com_raw_game():
    return {
        "url": "https://www.chess.com/game/live/123456789",
        "pgn": CHESS_COM_PGN,
        "time_control": "600+0",
        "end_time": 1709648497,
        "rated": True,
        "time_class": "rapid",
        "white": {"rating": 1500, "result": "win", "username": "Alice"},
        "black": {"rating": 1480, "result": "checkmated", "username": "bob99"},
    }


@pytest.fixture
def lichess_raw_game():
    return {
        "id": "abc123",
        "rated": True,
        "speed": "blitz",
        "createdAt": 1709716200000,
        "lastMoveAt": 1709716500000,
        "clock": {"initial": 180, "increment": 2, "totalTime": 260},
        "players": {
            "white": {"user": {"name": "carol", "id": "carol"}, "rating": 1626, "ratingDiff": -6},
            "black": {"user": {"name": "Alice", "id": "alice"}, "rating": 1604, "ratingDiff": 6},
        },
        "pgn": LICHESS_PGN,
    }
