"""
app/core/security.py

Purpose: Basic authentication gate for destructive operations

- Parses the Authorization header (Basic scheme only)
- Compares against the configured static credential pair
- Never raises: every failure mode means "not authenticated"
"""

import base64
import binascii
import secrets
from typing import Optional, Tuple

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

BASIC_PREFIX = "Basic "


def parse_basic_credentials(auth_header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extracts (username, password) from a Basic Authorization header.

    Returns None when the header is missing, uses another scheme,
    is not valid base64/UTF-8, or carries no colon separator.
    """
    if not auth_header or not auth_header.startswith(BASIC_PREFIX):
        return None

    encoded = auth_header[len(BASIC_PREFIX):]
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None

    return username, password


def authenticate(auth_header: Optional[str]) -> bool:
    """
    Checks a Basic Authorization header against the admin credentials.

    Args:
        auth_header: Raw value of the Authorization header (may be None)

    Returns:
        True only if the decoded username and password both match
    """
    credentials = parse_basic_credentials(auth_header)
    if credentials is None:
        logger.warning("Rejected missing or malformed Authorization header")
        return False

    username, password = credentials
    username_ok = secrets.compare_digest(username.encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8"))

    if not (username_ok and password_ok):
        logger.warning(f"Rejected credentials for username '{username}'")
        return False

    return True
