# src/taskdesk/api/client.py

"""
HTTP client for the task service REST API (httpx, async).

Every failure leaves this module as a SyncError subclass:
- httpx transport problems (connect, timeout, protocol) -> TransportError
- HTTP error statuses -> error_from_response() classification
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..comments.comment_models import Comment
from ..core.errors import TransportError, error_from_response
from ..core.session import User
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def make_timeout(*, connect_s: float, total_s: float) -> httpx.Timeout:
    return httpx.Timeout(total_s, connect=connect_s)


class TaskServiceClient:
    """Thin async wrapper over the task service endpoints."""

    def __init__(
            self,
            base_url: str,
            *,
            token: str | None = None,
            timeout: httpx.Timeout | float = 15.0,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> TaskServiceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- low-level ----

    async def _request(
            self,
            method: str,
            path: str,
            *,
            params: dict[str, Any] | None = None,
            json: Any = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        logger.debug("%s %s params=%s", method, path, params)
        try:
            resp = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}" if str(e) else type(e).__name__) from e

        if resp.is_error:
            payload = _decode_body(resp)
            err = error_from_response(resp.status_code, payload, reason=resp.reason_phrase)
            logger.debug("%s %s -> %s (%s)", method, path, resp.status_code, err.kind.value)
            if resp.status_code == 401:
                # The token is no good anymore; stop sending it.
                self._token = None
            raise err

        if not resp.content:
            return None
        return _decode_body(resp)

    # ---- auth ----

    async def login(self, username: str, password: str) -> dict[str, Any]:
        """POST /login -> {"token": ..., "role": ...}. Does not store the token."""
        data = await self._request("POST", "/login", json={"username": username, "password": password})
        if not isinstance(data, dict) or not data.get("token"):
            raise TransportError("Login response has no token")
        return data

    # ---- users ----

    async def list_users(self) -> list[User]:
        data = await self._request("GET", "/users")
        return [User.from_api(row) for row in _as_list(data)]

    async def fetch_user(self, user_id: int) -> User:
        data = await self._request("GET", f"/users/{int(user_id)}")
        return User.from_api(_as_dict(data))

    # ---- tasks ----

    async def list_tasks(self, *, employee_id: int) -> list[Task]:
        data = await self._request("GET", "/tasks", params={"employee_id": int(employee_id)})
        return [Task.from_api(row) for row in _as_list(data)]

    async def fetch_task(self, task_id: int) -> Task:
        data = await self._request("GET", f"/tasks/{int(task_id)}")
        return Task.from_api(_as_dict(data))

    async def create_task(self, payload: dict[str, Any]) -> Task:
        data = await self._request("POST", "/tasks", json=payload)
        return Task.from_api(_as_dict(data))

    async def update_task(self, task_id: int, payload: dict[str, Any]) -> None:
        await self._request("PUT", f"/tasks/{int(task_id)}", json=payload)

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{int(task_id)}")

    # ---- comments ----

    async def list_comments(self, *, task_id: int) -> list[Comment]:
        data = await self._request("GET", "/comments", params={"task_id": int(task_id)})
        return [Comment.from_api(row) for row in _as_list(data)]

    async def create_comment(self, *, task_id: int, text: str) -> Comment:
        data = await self._request("POST", "/comments", json={"task_id": int(task_id), "text": text})
        return Comment.from_api(_as_dict(data))

    async def delete_comment(self, comment_id: int) -> None:
        await self._request("DELETE", f"/comments/{int(comment_id)}")


def _decode_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _as_list(data: Any) -> list[dict[str, Any]]:
    # Some endpoints answer `null` instead of [] for empty collections.
    if data is None:
        return []
    if not isinstance(data, list):
        raise TransportError(f"Expected a list, got {type(data).__name__}")
    return [row for row in data if isinstance(row, dict)]


def _as_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict) or "id" not in data:
        raise TransportError("Unexpected response shape (expected an object with an id)")
    return data
