# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskdesk.logging_setup import _ConsoleNoiseFilter, redact, setup_logging


def _record(name: str, level: int, msg: str = "x") -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_redact_masks_tokens_and_passwords() -> None:
    assert redact("Authorization: Bearer abc.def-ghi") == "Authorization: Bearer ***"
    assert redact('{"username": "alice", "password": "s3cret"}') == '{"username": "alice", "password": "***"}'
    assert redact("progress=40") == "progress=40"


def test_console_filter_lets_app_logs_through_and_quiets_httpx() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("taskdesk.tasks.sync_controller", logging.DEBUG))
    assert not f.filter(_record("httpx", logging.INFO))
    assert f.filter(_record("httpx", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_redacted_file(tmp_path: Path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.CRITICAL)

    logging.getLogger("taskdesk.test").info("sending %s", "Bearer tok123")
    for h in logging.getLogger().handlers:
        h.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "sending Bearer ***" in text
    assert "tok123" not in text
