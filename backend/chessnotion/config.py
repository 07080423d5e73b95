"""
Application settings loaded from the environment (and a local .env file).
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_PROXY_BASE_URL = "http://localhost:8000"
DEFAULT_CORS_ORIGINS = ["*"]


@dataclass
class Settings:
    """Per-user configuration passed to normalizers, the import workflow and the proxies."""
    chess_com_username: str = ""
    lichess_username: str = ""
    notion_workspace_id: str = ""
    notion_database_id: str = ""
    notion_api_key: Optional[str] = None
    import_password_hash: Optional[str] = None  # bcrypt hash
    proxy_base_url: str = DEFAULT_PROXY_BASE_URL
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


def _split_origins(value: Optional[str]) -> List[str]:
    if not value:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read settings from the environment after loading ``env_file`` (default: ./.env)."""
    load_dotenv(env_file)
    return Settings(
        chess_com_username=os.getenv("CHESS_COM_USERNAME", ""),
        lichess_username=os.getenv("LICHESS_USERNAME", ""),
        notion_workspace_id=os.getenv("NOTION_WORKSPACE_ID", ""),
        notion_database_id=os.getenv("NOTION_DATABASE_ID", ""),
        notion_api_key=os.getenv("NOTION_API_KEY") or None,
        import_password_hash=os.getenv("IMPORT_PASSWORD") or None,
        proxy_base_url=os.getenv("PROXY_BASE_URL", DEFAULT_PROXY_BASE_URL).rstrip("/"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
