import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from chessnotion.chess_com_client import ChessComClient
from chessnotion.errors import PlatformAPIError
from chessnotion.lichess_client import LichessClient, generate_monthly_archives, month_bounds
from http_fakes import FakeResponse, make_fake_get


def chess_com_client(responses, captured=None):
    client = ChessComClient(session=MagicMock(), rate_limit_delay=0)
    client.session.get.side_effect = make_fake_get(responses, captured)
    return client


def lichess_client(responses, captured=None):
    client = LichessClient(session=MagicMock(), rate_limit_delay=0)
    client.session.get.side_effect = make_fake_get(responses, captured)
    return client


# --- Chess.com --- #
def test_get_player_archives():
    captured = []
    archives = ["https://api.chess.com/pub/player/alice/games/2024/01"]
    client = chess_com_client([FakeResponse(json_data={"archives": archives})], captured)

    assert client.get_player_archives("alice") == archives
    assert captured[0][0] == "https://api.chess.com/pub/player/alice/games/archives"


def test_get_player_archives_unknown_player():
    client = chess_com_client([FakeResponse(status_code=404)])
    with pytest.raises(PlatformAPIError) as exc:
        client.get_player_archives("nobody")
    assert exc.value.status_code == 404


def test_get_games_from_archive(chess_com_raw_game):
    client = chess_com_client([FakeResponse(json_data={"games": [chess_com_raw_game]})])
    assert client.get_games_from_archive("https://api.chess.com/pub/player/alice/games/2024/03") == [chess_com_raw_game]


def test_get_games_from_missing_archive_is_empty():
    client = chess_com_client([FakeResponse(status_code=404)])
    assert client.get_games_from_archive("https://api.chess.com/pub/player/alice/games/1999/01") == []


def test_chess_com_server_error_raises():
    client = chess_com_client([FakeResponse(status_code=503)])
    with pytest.raises(PlatformAPIError) as exc:
        client.get_games_from_archive("https://api.chess.com/pub/player/alice/games/2024/03")
    assert exc.value.status_code == 503


def test_chess_com_connection_error_raises():
    client = chess_com_client([requests.exceptions.ConnectionError("offline")])
    with pytest.raises(PlatformAPIError):
        client.get_player_archives("alice")


# --- Lichess --- #
def test_generate_monthly_archives_most_recent_first():
    created_at = int(datetime(2023, 11, 15).timestamp() * 1000)
    archives = generate_monthly_archives(created_at, today=datetime(2024, 2, 3))
    assert archives == ["2024/02", "2024/01", "2023/12", "2023/11"]


def test_generate_monthly_archives_same_month():
    created_at = int(datetime(2024, 2, 1).timestamp() * 1000)
    assert generate_monthly_archives(created_at, today=datetime(2024, 2, 28)) == ["2024/02"]


def test_month_bounds_covers_whole_month():
    since, until = month_bounds("2024/02")
    assert since == int(datetime(2024, 2, 1).timestamp() * 1000)
    assert until == int(datetime(2024, 2, 29, 23, 59, 59).timestamp() * 1000)


def test_get_monthly_archives_uses_account_creation():
    created_at = int(datetime(2024, 1, 10).timestamp() * 1000)
    client = lichess_client([FakeResponse(json_data={"id": "alice", "createdAt": created_at})])
    assert client.get_monthly_archives("alice", today=datetime(2024, 3, 1)) == ["2024/03", "2024/02", "2024/01"]


def test_get_games_for_month_parses_ndjson(lichess_raw_game):
    captured = []
    body = json.dumps(lichess_raw_game) + "\n\n{not json}\n" + json.dumps({"id": "def456"}) + "\n"
    client = lichess_client([FakeResponse(text=body)], captured)

    games = client.get_games_for_month("alice", "2024/03")

    assert [g["id"] for g in games] == ["abc123", "def456"]
    url, kwargs = captured[0]
    assert url == "https://lichess.org/api/games/user/alice"
    assert kwargs["params"]["pgnInJson"] == "true"
    assert (kwargs["params"]["since"], kwargs["params"]["until"]) == month_bounds("2024/03")
    assert kwargs["headers"] == {"Accept": "application/x-ndjson"}


def test_lichess_unknown_user():
    client = lichess_client([FakeResponse(status_code=404)])
    with pytest.raises(PlatformAPIError) as exc:
        client.get_user("nobody")
    assert exc.value.status_code == 404


def test_lichess_connection_error():
    client = lichess_client([requests.exceptions.Timeout("slow")])
    with pytest.raises(PlatformAPIError):
        client.get_games_for_month("alice", "2024/03")
