"""
Chess-to-Notion Backend API
"""
from fastapi import FastAPI, Query, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from typing import Optional, Any
import json
import logging

from chessnotion import auth
from chessnotion.chess_com_client import ChessComClient
from chessnotion.config import Settings, get_settings
from chessnotion.errors import NotionAPIError, PlatformAPIError
from chessnotion.game_data import ProcessedGame
from chessnotion.lichess_client import LichessClient
from chessnotion.normalizer import ChessComNormalizer, LichessNormalizer, PastedPGNNormalizer
from chessnotion.notion_api import NotionAPI
from chessnotion.notion_export import find_duplicate_urls, import_games
from chessnotion.stats import fetch_all_chess_com_games, summarize

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Chess Notion Importer API")


# ============================================
# Pydantic models for request/response
# ============================================

class GamesRequest(BaseModel):
    games: Optional[Any] = None
    databaseId: Optional[str] = None


class ParsePGNRequest(BaseModel):
    text: str = ""


# Proxies are called from the browser app on any origin; CORS_ORIGINS narrows it
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Dependencies
# ============================================

def get_notion_api(settings: Settings = Depends(get_settings)) -> Optional[NotionAPI]:
    if not settings.notion_api_key:
        return None
    return NotionAPI(settings.notion_api_key)


def get_chess_com_client() -> ChessComClient:
    return ChessComClient()


def get_lichess_client() -> LichessClient:
    return LichessClient()


# ============================================
# Helper functions
# ============================================

def envelope(status_code: int, success: bool, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": success, "message": message, **extra})


def missing_parameters() -> JSONResponse:
    return envelope(400, False, "Missing required parameters. 'games' (array) and 'databaseId' are required.")


def platform_error(e: PlatformAPIError) -> HTTPException:
    if e.status_code == 404:
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


# ============================================
# Notion proxy endpoints
# ============================================

@app.get("/api/env")
async def get_env(settings: Settings = Depends(get_settings)):
    """Report which server-side secrets are configured."""
    return {"notionApiKey": bool(settings.notion_api_key)}


@app.post("/api/password")
async def confirm_password(request: Request, settings: Settings = Depends(get_settings)):
    """Check the import confirmation password."""
    try:
        body = await request.json()
        if isinstance(body, str):
            body = json.loads(body)
    except ValueError:
        body = {}
    password = body.get("password", "") if isinstance(body, dict) else ""
    return {"isConfirmed": auth.verify_password(password, settings.import_password_hash)}


@app.post("/api/notion-check-duplicates")
def check_duplicates(request: GamesRequest, notion: Optional[NotionAPI] = Depends(get_notion_api)):
    """Report which of the submitted games already have a page in the Notion database."""
    if notion is None or not request.databaseId or not isinstance(request.games, list):
        return missing_parameters()

    try:
        notion.retrieve_database(request.databaseId)
    except NotionAPIError as e:
        logger.error(f"Failed to connect to Notion Database: {e}")
        return envelope(500, False, "Failed to connect to Notion database.")

    try:
        games = [ProcessedGame.from_dict(game) for game in request.games if isinstance(game, dict)]
        duplicate_urls = find_duplicate_urls(notion, request.databaseId, games)
    except NotionAPIError as e:
        logger.error(f"Error checking duplicates: {e}")
        return envelope(500, False, f"Error checking duplicates: {e}")

    if duplicate_urls:
        return envelope(200, True, f"Found {len(duplicate_urls)} duplicate game(s).", duplicateUrls=duplicate_urls)
    return envelope(200, True, "No duplicates found.", duplicateUrls=[])


@app.post("/api/notion-import-games")
def import_notion_games(request: GamesRequest, notion: Optional[NotionAPI] = Depends(get_notion_api)):
    """Create one Notion page per submitted game."""
    if notion is None or not request.databaseId or not isinstance(request.games, list):
        return missing_parameters()

    try:
        notion.retrieve_database(request.databaseId)
    except NotionAPIError as e:
        logger.error(f"Failed to connect to Notion Database: {e}")
        return envelope(500, False, str(e))

    games = [ProcessedGame.from_dict(game) for game in request.games if isinstance(game, dict)]
    report = import_games(notion, request.databaseId, games)
    logger.info(f"Imported {report.imported}/{report.total} games ({report.status})")

    return envelope(
        report.http_status,
        report.success,
        report.message,
        importedCount=report.imported,
        failedUrls=report.failed_urls,
    )


@app.options("/api/env")
@app.options("/api/password")
@app.options("/api/notion-check-duplicates")
@app.options("/api/notion-import-games")
async def proxy_options():
    """Answer bare OPTIONS requests; browser preflights are handled by the CORS middleware."""
    return Response(status_code=200)


# ============================================
# Platform endpoints
# ============================================

@app.get("/api/chesscom/archives")
def get_chess_com_archives(
    username: Optional[str] = Query(None, description="Chess.com username (default: settings)"),
    settings: Settings = Depends(get_settings),
    client: ChessComClient = Depends(get_chess_com_client),
):
    """Monthly archive URLs, most recent first."""
    username = username or settings.chess_com_username
    if not username:
        raise HTTPException(status_code=400, detail="Chess.com username not set.")
    try:
        archives = client.get_player_archives(username)
    except PlatformAPIError as e:
        raise platform_error(e)
    return {"username": username, "archives": list(reversed(archives))}


@app.get("/api/chesscom/games")
def get_chess_com_games(
    archive_url: str = Query(..., description="Archive URL returned by /api/chesscom/archives"),
    username: Optional[str] = Query(None, description="Chess.com username (default: settings)"),
    settings: Settings = Depends(get_settings),
    client: ChessComClient = Depends(get_chess_com_client),
):
    """Games of one archive month, normalized and most recent first."""
    username = username or settings.chess_com_username
    if not archive_url.startswith(ChessComClient.BASE_URL):
        raise HTTPException(status_code=400, detail="Not a Chess.com archive URL")
    try:
        raw_games = client.get_games_from_archive(archive_url)
    except PlatformAPIError as e:
        raise platform_error(e)

    games = ChessComNormalizer(username).normalize_many(raw_games)
    games.reverse()
    return {"username": username, "games": [game.to_dict() for game in games], "total": len(games)}


@app.get("/api/lichess/archives")
def get_lichess_archives(
    username: Optional[str] = Query(None, description="Lichess username (default: settings)"),
    settings: Settings = Depends(get_settings),
    client: LichessClient = Depends(get_lichess_client),
):
    """Months from account creation to now, most recent first."""
    username = username or settings.lichess_username
    if not username:
        raise HTTPException(status_code=400, detail="Lichess username not set.")
    try:
        archives = client.get_monthly_archives(username)
    except PlatformAPIError as e:
        raise platform_error(e)
    return {"username": username, "archives": archives}


@app.get("/api/lichess/games")
def get_lichess_games(
    month: str = Query(..., pattern=r"^\d{4}/\d{2}$", description="Month as YYYY/MM"),
    username: Optional[str] = Query(None, description="Lichess username (default: settings)"),
    settings: Settings = Depends(get_settings),
    client: LichessClient = Depends(get_lichess_client),
):
    """Games played in one month, normalized."""
    username = username or settings.lichess_username
    if not username:
        raise HTTPException(status_code=400, detail="Lichess username not set.")
    try:
        raw_games = client.get_games_for_month(username, month)
    except PlatformAPIError as e:
        raise platform_error(e)

    games = LichessNormalizer(username).normalize_many(raw_games)
    return {"username": username, "games": [game.to_dict() for game in games], "total": len(games)}


@app.post("/api/pgn/parse")
async def parse_pgn(request: ParsePGNRequest):
    """Parse pasted PGN text; fragments that cannot be read are counted, not fatal."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Please enter PGN text.")
    games, failed = PastedPGNNormalizer().parse_text(request.text)
    return {"games": [game.to_dict() for game in games], "failed": failed}


@app.get("/api/stats")
def get_stats(
    username: Optional[str] = Query(None, description="Chess.com username (default: settings)"),
    rated_only: bool = Query(False, description="Only count rated games"),
    settings: Settings = Depends(get_settings),
    client: ChessComClient = Depends(get_chess_com_client),
):
    """Win/loss/draw totals over every archived Chess.com game."""
    username = username or settings.chess_com_username
    if not username:
        raise HTTPException(status_code=400, detail="Chess.com username not set.")
    try:
        games = fetch_all_chess_com_games(client, username)
    except PlatformAPIError as e:
        logger.error(f"Failed to fetch games for stats: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch all game data. Please try again later.")
    return {"username": username, "ratedOnly": rated_only, **summarize(games, rated_only=rated_only)}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
