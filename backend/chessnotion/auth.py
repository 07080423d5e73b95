"""
Password utilities for the import confirmation gate.

The gate only asks the person at the keyboard to re-enter a shared password
before games are written to Notion; it does not authenticate API callers.
"""
import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against a hash; a missing or malformed hash never matches."""
    if not password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            hashed_password.encode("utf-8")
        )
    except ValueError:
        logger.error("IMPORT_PASSWORD is not a valid bcrypt hash")
        return False
