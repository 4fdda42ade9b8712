# src/taskdesk/logging_setup.py

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=]+")
_PASSWORD_RE = re.compile(r"""(["']?password["']?\s*[:=]\s*["']?)[^"'\s,}]+""", re.IGNORECASE)


def redact(text: str) -> str:
    """Mask bearer tokens and password values in a log line."""
    text = _BEARER_RE.sub(r"\1***", text)
    return _PASSWORD_RE.sub(r"\1***", text)


class _RedactFilter(logging.Filter):
    """Credentials never reach a handler, console or file."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        clean = redact(msg)
        if clean != msg:
            record.msg = clean
            record.args = None
        return True


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while commands run:
    - taskdesk logs pass
    - HTTP client chatter (httpx/httpcore) only at ERROR+
    - captured Python warnings only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "taskdesk" or name.startswith("taskdesk."):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        # httpx logs every request line at INFO.
        if name.startswith(("httpx", "httpcore")):
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdesk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure root logging with a filtered console handler and a full log file.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskdesk.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    redactor = _RedactFilter()

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(redactor)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    fh.addFilter(redactor)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
