# src/taskdesk/api/auth.py

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from ..core.errors import SyncError
from ..core.session import Role, Session
from .client import TaskServiceClient

logger = logging.getLogger(__name__)


def decode_token_claims(token: str) -> dict[str, Any]:
    """
    Read the claims of a JWT without verifying it.

    Only used to learn our own user id/role; the server still validates the
    token on every request. Returns {} for anything that is not a JWT.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    body = parts[1]
    body += "=" * (-len(body) % 4)
    try:
        raw = base64.urlsafe_b64decode(body.encode("ascii"))
        claims = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return {}
    return claims if isinstance(claims, dict) else {}


async def open_session(client: TaskServiceClient, username: str, password: str) -> Session:
    """
    Log in and build the Session.

    User id resolution, first hit wins:
    1. `user_id` claim of the token
    2. the user list (managers can read it; employees usually get 403)
    3. 0 (unknown)
    """
    data = await client.login(username, password)
    token = str(data["token"])
    client.set_token(token)

    claims = decode_token_claims(token)
    role = Role.from_api(data.get("role") or claims.get("role"))
    name = ""

    user_id = _int_or_none(claims.get("user_id"))
    if user_id is None:
        try:
            users = await client.list_users()
        except SyncError as e:
            logger.info("User list unavailable after login (%s); user id unknown", e.kind.value)
            users = []
        for user in users:
            if user.username == username:
                user_id = user.id
                name = user.name
                break

    if user_id is None:
        logger.warning("Could not determine user id for %s; using 0", username)
        user_id = 0

    logger.info("Logged in as %s (id=%s role=%s)", username, user_id, role.value)
    return Session(user_id=user_id, username=username, role=role, token=token, name=name)


def session_from_token(token: str) -> Session | None:
    """Build a Session from a pre-issued token (TASKDESK_API_TOKEN)."""
    claims = decode_token_claims(token)
    user_id = _int_or_none(claims.get("user_id"))
    if user_id is None:
        return None
    return Session(
        user_id=user_id,
        username=str(claims.get("username") or ""),
        role=Role.from_api(claims.get("role")),
        token=token,
    )


def _int_or_none(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
