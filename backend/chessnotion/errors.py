"""
Exception types raised by the API clients.
"""
from typing import Optional


class ChessNotionError(Exception):
    """Base class for errors raised by this package."""


class PlatformAPIError(ChessNotionError):
    """A Chess.com or Lichess request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotionAPIError(ChessNotionError):
    """The Notion API rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
