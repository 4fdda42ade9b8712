# src/taskdesk/core/errors.py

"""
Error variants used by the core.

The transport layer returns dynamically shaped error bodies ({"message": ...},
{"error": ...}, plain text, nothing at all). They are normalized here, at the
boundary, into a small tagged set so the core only ever sees SyncError.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"


class SyncError(Exception):
    """Base for every error that crosses from the transport into the core."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class ValidationError(SyncError):
    """Payload rejected by the server (bad field value, invalid transition)."""

    kind = ErrorKind.VALIDATION


class TransportError(SyncError):
    """Network failure, timeout, or an unexpected server response."""

    kind = ErrorKind.TRANSPORT


class AuthorizationError(SyncError):
    """Missing/expired credentials or insufficient role."""

    kind = ErrorKind.AUTHORIZATION


class NotFoundError(SyncError):
    kind = ErrorKind.NOT_FOUND


_VALIDATION_STATUSES = frozenset({400, 409, 422})
_AUTHORIZATION_STATUSES = frozenset({401, 403})


def extract_error_message(payload: Any) -> str | None:
    """Pick a human-readable message out of an arbitrary error body."""
    if payload is None:
        return None
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict | list) and value:
                nested = extract_error_message(value)
                if nested:
                    return nested
        # {"field": "reason", ...} style validation maps
        parts = [f"{k}: {v}" for k, v in payload.items() if isinstance(v, str) and v.strip()]
        return "; ".join(parts) or None
    if isinstance(payload, list):
        parts = [m for m in (extract_error_message(p) for p in payload) if m]
        return "; ".join(parts) or None
    return None


def error_from_response(status: int, payload: Any = None, *, reason: str = "") -> SyncError:
    """Classify an HTTP error status (+ body) into one SyncError variant."""
    message = extract_error_message(payload)
    if not message:
        suffix = f" {reason}" if reason else ""
        message = f"Request failed ({status}{suffix})"

    if status in _VALIDATION_STATUSES:
        return ValidationError(message, status=status)
    if status in _AUTHORIZATION_STATUSES:
        return AuthorizationError(message, status=status)
    if status == 404:
        return NotFoundError(message, status=status)
    return TransportError(message, status=status)


def friendly_error_message(err: BaseException) -> str:
    """Inline text for the user; authorization failures explain why."""
    if isinstance(err, AuthorizationError):
        if err.status == 401:
            return "Your session has expired or is not signed in. Please log in again."
        return f"You are not allowed to do this: {err.message}"
    if isinstance(err, NotFoundError):
        return f"Not found: {err.message}"
    if isinstance(err, ValidationError):
        return f"Rejected by the server: {err.message}"
    if isinstance(err, TransportError):
        return f"Could not reach the task service: {err.message}"
    msg = str(err).strip()
    return msg or "Unexpected error."
