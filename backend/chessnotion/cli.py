#!/usr/bin/env python3
"""
Command-line helpers.

Usage:
  chessnotion parse games.pgn --color white
  chessnotion import games.pgn --color black
  chessnotion stats --username hikaru --rated-only
  chessnotion hash-password
"""
import argparse
import getpass
import json
import logging
import sys

from .auth import hash_password
from .chess_com_client import ChessComClient
from .config import load_settings
from .errors import PlatformAPIError
from .game_data import BLACK, WHITE
from .import_workflow import ImportWorkflow
from .normalizer import PastedPGNNormalizer, assign_user_color
from .notion_service import NotionService
from .stats import fetch_all_chess_com_games, summarize


def cmd_parse(args) -> int:
    with open(args.file, encoding="utf-8") as f:
        text = f.read()

    games = PastedPGNNormalizer().normalize_text(text)
    if args.color:
        games = [assign_user_color(game, args.color) for game in games]

    json.dump([game.to_dict() for game in games], sys.stdout, ensure_ascii=False, indent=2)
    print()
    print(f"Parsed {len(games)} game(s)", file=sys.stderr)
    return 0


def cmd_import(args) -> int:
    with open(args.file, encoding="utf-8") as f:
        text = f.read()

    settings = load_settings()
    workflow = ImportWorkflow(settings, NotionService.from_settings(settings))
    pasted = workflow.parse_pasted_text(text)
    if pasted.error:
        print(pasted.error, file=sys.stderr)
    if not pasted.added:
        return 1

    if args.color:
        for game in pasted.added:
            workflow.selection.set_color(game.id, args.color)

    password = args.password or getpass.getpass("Import password: ")
    status = workflow.start_import(password)
    print(status.message)
    return 0 if status.success else 1


def cmd_stats(args) -> int:
    username = args.username or load_settings().chess_com_username
    if not username:
        print("Chess.com username not set.", file=sys.stderr)
        return 2

    def show_progress(percent: float):
        print(f"\r  {percent:5.1f}%", end="", file=sys.stderr, flush=True)

    try:
        games = fetch_all_chess_com_games(ChessComClient(), username, progress=show_progress)
    except PlatformAPIError as e:
        print(f"\nError fetching games: {e}", file=sys.stderr)
        return 1
    print(file=sys.stderr)

    for label, stats in summarize(games, rated_only=args.rated_only).items():
        print(f"{label:8} total {stats['total']:5}  "
              f"W {stats['wins']} ({stats['winRate']}%)  "
              f"L {stats['losses']} ({stats['lossRate']}%)  "
              f"D {stats['draws']} ({stats['drawRate']}%)")
    return 0


def cmd_hash_password(args) -> int:
    password = args.password or getpass.getpass("Import password: ")
    print(hash_password(password))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessnotion", description="Chess game import helpers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a PGN file into game records (JSON)")
    p.add_argument("file", help="PGN file with one or more games")
    p.add_argument("--color", choices=[WHITE, BLACK], help="Your color in every game")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("import", help="Import the games of a PGN file into Notion")
    p.add_argument("file", help="PGN file with one or more games")
    p.add_argument("--color", choices=[WHITE, BLACK], help="Your color in every game")
    p.add_argument("--password", help="Import password (prompted when omitted)")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("stats", help="Win/loss/draw stats for a Chess.com user")
    p.add_argument("--username", help="Chess.com username (default: CHESS_COM_USERNAME)")
    p.add_argument("--rated-only", action="store_true", help="Only count rated games")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("hash-password", help="Print a bcrypt hash for IMPORT_PASSWORD")
    p.add_argument("--password", help="Password (prompted when omitted)")
    p.set_defaults(func=cmd_hash_password)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
