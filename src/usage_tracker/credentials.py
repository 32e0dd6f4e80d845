"""Bearer token lookup for the usage API.

Resolution order: an explicit token from settings, then the OAuth credentials
file written by the Claude CLI (``{"claudeAiOauth": {"accessToken": ...}}``).
Refreshing expired tokens is left to whoever wrote the file.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from src.config import settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def read_credentials_file(path: Path) -> str | None:
    """Return the access token stored in *path*, or None if it is unusable."""
    if not path.exists():
        logger.debug("No credentials file at %s", path)
        return None
    try:
        creds = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read credentials file %s: %s", path, e)
        return None

    if not isinstance(creds, dict):
        return None
    oauth = creds.get("claudeAiOauth")
    token = oauth.get("accessToken") if isinstance(oauth, dict) else None
    if not token:
        logger.debug("No accessToken in %s", path)
        return None
    return str(token)


def default_token_provider(
    token: str | None = None,
    credentials_path: Path | None = None,
) -> TokenProvider:
    """Build a provider that re-reads the credentials on every call.

    Re-reading lets a token refreshed by another process be picked up on the
    next poll without restarting.
    """
    explicit = token if token is not None else settings.oauth_token
    path = credentials_path or settings.credentials_path

    def _provide() -> str | None:
        if explicit:
            return explicit
        return read_credentials_file(path)

    return _provide
