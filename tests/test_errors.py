# tests/test_errors.py

from __future__ import annotations

import pytest

from taskdesk.core.errors import (
    AuthorizationError,
    ErrorKind,
    NotFoundError,
    TransportError,
    ValidationError,
    error_from_response,
    extract_error_message,
    friendly_error_message,
)


@pytest.mark.parametrize(
    ("status", "cls", "kind"),
    [
        (400, ValidationError, ErrorKind.VALIDATION),
        (409, ValidationError, ErrorKind.VALIDATION),
        (422, ValidationError, ErrorKind.VALIDATION),
        (401, AuthorizationError, ErrorKind.AUTHORIZATION),
        (403, AuthorizationError, ErrorKind.AUTHORIZATION),
        (404, NotFoundError, ErrorKind.NOT_FOUND),
        (418, TransportError, ErrorKind.TRANSPORT),
        (500, TransportError, ErrorKind.TRANSPORT),
        (503, TransportError, ErrorKind.TRANSPORT),
    ],
)
def test_status_classification(status: int, cls: type, kind: ErrorKind) -> None:
    err = error_from_response(status, None)
    assert isinstance(err, cls)
    assert err.kind == kind
    assert err.status == status


def test_message_extraction_handles_the_usual_body_shapes() -> None:
    assert extract_error_message({"message": "bad status"}) == "bad status"
    assert extract_error_message({"error": "forbidden"}) == "forbidden"
    assert extract_error_message({"detail": [{"message": "x"}, {"message": "y"}]}) == "x; y"
    assert extract_error_message({"progress": "must be <= 100"}) == "progress: must be <= 100"
    assert extract_error_message("  plain text  ") == "plain text"
    assert extract_error_message(None) is None
    assert extract_error_message({}) is None


def test_fallback_message_mentions_status() -> None:
    err = error_from_response(502, "", reason="Bad Gateway")
    assert err.message == "Request failed (502 Bad Gateway)"


def test_friendly_messages_explain_authorization() -> None:
    assert "log in" in friendly_error_message(AuthorizationError("expired", status=401))
    assert "not allowed" in friendly_error_message(AuthorizationError("managers only", status=403))
    assert "managers only" in friendly_error_message(AuthorizationError("managers only", status=403))
    assert "Rejected" in friendly_error_message(ValidationError("bad"))
    assert friendly_error_message(RuntimeError("")) == "Unexpected error."
