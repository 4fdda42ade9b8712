# src/taskdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the HTTP client into AppState,
- optionally restores a session from a pre-issued token or logs in.
"""

from __future__ import annotations

import logging

from ..api.auth import open_session, session_from_token
from ..api.client import TaskServiceClient, make_timeout
from ..config import get_settings
from ..core.errors import SyncError, friendly_error_message
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    client = TaskServiceClient(
        settings.api_base_url,
        token=settings.api_token,
        timeout=make_timeout(
            connect_s=settings.http_connect_timeout_seconds,
            total_s=settings.http_timeout_seconds,
        ),
    )

    state = AppState(settings=settings, client=client)

    if settings.api_token:
        state.session = session_from_token(settings.api_token)
        if state.session is None:
            logger.warning("TASKDESK_API_TOKEN has no user_id claim; log in with /login")
    return state


async def auto_login(state: AppState) -> str | None:
    """Log in with configured credentials. Returns an error message or None."""
    settings = state.settings
    if state.session is not None or not getattr(settings, "auto_login", False):
        return None
    username = getattr(settings, "username", None)
    password = getattr(settings, "password", None)
    if not username or not password:
        return None
    try:
        state.session = await open_session(state.client, username, password)
    except SyncError as e:
        logger.info("Auto login failed (%s): %s", e.kind.value, e.message)
        return friendly_error_message(e)
    return None
