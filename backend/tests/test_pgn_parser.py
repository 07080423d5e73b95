from datetime import datetime

import pytest

from chessnotion.pgn_parser import (
    classify_time_class,
    detect_platform,
    determine_user_result,
    extract_headers,
    get_result_from_pgn,
    is_guest_player,
    normalize_time_control,
    parse_pasted_pgn,
    resolve_end_time,
    result_for_color,
    split_multiple_pgns,
)
from pgn_samples import CHESS_COM_PGN, LICHESS_PGN


# --- Header extraction --- #
def test_extract_headers_basic():
    headers = extract_headers(CHESS_COM_PGN)
    assert headers["White"] == "Alice"
    assert headers["Black"] == "bob99"
    assert headers["TimeControl"] == "600+0"
    assert headers["Link"] == "https://www.chess.com/game/live/123456789"


def test_extract_headers_last_occurrence_wins():
    headers = extract_headers('[White "first"]\n[White "second"]\n')
    assert headers == {"White": "second"}


def test_extract_headers_ignores_malformed_lines():
    text = '[Event "Casual"]\n[Broken tag\nnot a header\n[Black unquoted]\n\n1. e4 e5'
    assert extract_headers(text) == {"Event": "Casual"}


def test_extract_headers_empty_text():
    assert extract_headers("") == {}


# --- Splitting --- #
def test_split_empty_text():
    assert split_multiple_pgns("") == []
    assert split_multiple_pgns("   \n\n  ") == []


def test_split_single_game_without_boundary_returns_trimmed_input():
    text = "\n  " + CHESS_COM_PGN + "  "
    assert split_multiple_pgns(text) == [text.strip()]


def test_split_two_games():
    chunks = split_multiple_pgns(CHESS_COM_PGN + "\n\n" + LICHESS_PGN + "\n")
    assert chunks == [CHESS_COM_PGN, LICHESS_PGN]


def test_split_keeps_movetext_with_its_headers():
    # The blank line between headers and moves is not a game boundary
    chunks = split_multiple_pgns(CHESS_COM_PGN)
    assert len(chunks) == 1
    assert chunks[0].endswith("Qxf7# 1-0")


def test_split_handles_windows_line_endings():
    text = CHESS_COM_PGN.replace("\n", "\r\n") + "\r\n\r\n" + LICHESS_PGN.replace("\n", "\r\n")
    assert len(split_multiple_pgns(text)) == 2


# --- Time control --- #
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("600+0", "600"),
        ("60+1", "60+1"),
        ("180", "180"),
        ("1800+30", "1800+30"),
        ("1/259200", "1/259200"),
        ("-", "-"),
    ],
)
def test_normalize_time_control(raw, expected):
    assert normalize_time_control(raw) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "bullet"),
        (179, "bullet"),
        (180, "blitz"),
        (599, "blitz"),
        (600, "rapid"),
        (1799, "rapid"),
        (1800, "classical"),
        ("60+1", "bullet"),
        ("300+0", "blitz"),
        ("1800+30", "classical"),
        ("1/259200", "unknown"),
        ("unknown", "unknown"),
        ("", "unknown"),
        (None, "unknown"),
    ],
)
def test_classify_time_class(value, expected):
    assert classify_time_class(value) == expected


# --- Result / color --- #
def test_get_result_from_pgn():
    assert get_result_from_pgn(CHESS_COM_PGN) == "1-0"
    assert get_result_from_pgn("1. e4 e5") is None


@pytest.mark.parametrize(
    "result,color,expected",
    [
        ("1-0", "white", "win"),
        ("1-0", "black", "loss"),
        ("0-1", "white", "loss"),
        ("0-1", "black", "win"),
        ("1/2-1/2", "white", "draw"),
        ("1/2-1/2", "black", "draw"),
        ("*", "white", "unknown"),
        (None, "black", "unknown"),
        ("1-0", "none", "unknown"),
    ],
)
def test_result_for_color(result, color, expected):
    assert result_for_color(result, color) == expected


def test_determine_user_result_white_is_case_insensitive():
    assert determine_user_result("Alice", "bob", "1-0", "aLiCe") == ("win", "white")


def test_determine_user_result_black():
    assert determine_user_result("bob", "Alice", "1-0", "alice") == ("loss", "black")


def test_determine_user_result_draw_either_color():
    assert determine_user_result("Alice", "bob", "1/2-1/2", "alice") == ("draw", "white")
    assert determine_user_result("bob", "Alice", "1/2-1/2", "alice") == ("draw", "black")


def test_determine_user_result_absent_result():
    assert determine_user_result("Alice", "bob", None, "alice") == ("unknown", "none")


def test_determine_user_result_user_not_playing():
    assert determine_user_result("carol", "bob", "1-0", "alice") == ("unknown", "none")


# --- End time --- #
NOW = datetime(2025, 1, 2, 3, 4, 5)


def test_resolve_end_time_with_date_and_chess_com_time():
    expected = int(datetime(2024, 3, 5, 14, 21, 37).timestamp())
    assert resolve_end_time("2024.03.05", "14:21:37 GMT+0000", now=NOW) == expected


def test_resolve_end_time_pads_single_digit_hour():
    expected = int(datetime(2024, 3, 5, 4, 21, 37).timestamp())
    assert resolve_end_time("2024.03.05", "4:21:37", now=NOW) == expected


def test_resolve_end_time_missing_date_uses_today():
    expected = int(datetime(2025, 1, 2, 9, 15, 0).timestamp())
    assert resolve_end_time(None, "09:15:00", now=NOW) == expected


def test_resolve_end_time_missing_time_uses_now():
    expected = int(datetime(2024, 3, 5, 3, 4, 5).timestamp())
    assert resolve_end_time("2024.03.05", None, now=NOW) == expected


def test_resolve_end_time_nothing_known():
    assert resolve_end_time(None, None, now=NOW) == int(NOW.timestamp())


def test_resolve_end_time_malformed_date_falls_back_to_now():
    assert resolve_end_time("????.??.??", "10:00:00", now=NOW) == int(NOW.timestamp())


# --- Platform / guest --- #
@pytest.mark.parametrize(
    "site,link,expected",
    [
        ("Chess.com", "https://www.chess.com/game/live/1", ("Chess.com", "https://www.chess.com/game/live/1")),
        ("https://www.chess.com/game/live/1", None, ("Chess.com", "https://www.chess.com/game/live/1")),
        ("Chess.com", None, ("Chess.com", None)),
        ("https://lichess.org/abc123", None, ("Lichess", "https://lichess.org/abc123")),
        ("Local club", None, ("unknown", None)),
        ("https://example.org/game/7", None, ("unknown", "https://example.org/game/7")),
        (None, None, ("unknown", None)),
    ],
)
def test_detect_platform(site, link, expected):
    assert detect_platform(site, link) == expected


@pytest.mark.parametrize(
    "name,expected",
    [("Guest12345", True), ("Anonymous", True), ("alice", False), ("", False), (None, False)],
)
def test_is_guest_player(name, expected):
    assert is_guest_player(name) is expected


# --- Pasted PGN --- #
def test_parse_pasted_chess_com_pgn():
    game = parse_pasted_pgn(CHESS_COM_PGN)

    assert game is not None
    assert game.url == "https://www.chess.com/game/live/123456789"
    assert game.id == game.url
    assert game.platform == "Chess.com"
    assert game.time_control == "600"
    assert game.time_class == "rapid"
    assert game.rated is False
    assert game.is_guest is False
    assert game.white.username == "Alice"
    assert game.white.rating == 1500
    assert game.black.rating_diff is None
    assert game.user_color == "none"
    assert game.user_result == "unknown"
    assert game.end_time == int(datetime(2024, 3, 5, 14, 21, 37).timestamp())


def test_parse_pasted_lichess_pgn():
    game = parse_pasted_pgn(LICHESS_PGN)

    assert game.url == "https://lichess.org/abc123"
    assert game.platform == "Lichess"
    assert game.rated is True
    assert game.time_control == "180+2"
    assert game.time_class == "blitz"
    assert game.white.rating_diff == -6
    assert game.black.rating_diff == 6
    assert game.end_time == int(datetime(2024, 3, 6, 9, 15, 0).timestamp())


def test_parse_pasted_pgn_keeps_pgn_verbatim():
    game = parse_pasted_pgn(LICHESS_PGN)
    assert game.pgn == LICHESS_PGN
    assert game.to_dict()["pgn"] == LICHESS_PGN


def test_parse_pasted_pgn_defaults_for_missing_headers():
    game = parse_pasted_pgn('[Event "Club night"]\n\n1. e4 e5 *')

    assert game.white.username == "unknown"
    assert game.white.rating == 0
    assert game.time_control == "unknown"
    assert game.time_class == "unknown"
    assert game.platform == "unknown"
    assert game.url == ""
    assert game.id.startswith("pgn-")


def test_parse_pasted_pgn_guest_player():
    game = parse_pasted_pgn('[Event "Casual"]\n[White "Guest4821"]\n[Black "alice"]\n\n1. e4 *')
    assert game.is_guest is True


def test_parse_pasted_pgn_non_numeric_elo():
    game = parse_pasted_pgn('[Event "Casual"]\n[WhiteElo "?"]\n[BlackElo "-"]\n\n1. e4 *')
    assert game.white.rating == 0
    assert game.black.rating == 0


def test_parse_pasted_pgn_without_headers_returns_none():
    assert parse_pasted_pgn("1. e4 e5 2. Nf3 Nc6") is None


def test_parse_pasted_pgn_invalid_input_returns_none():
    assert parse_pasted_pgn(None) is None
