# src/taskdesk/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, optionally logs in, then runs the
console REPL on a single asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import auto_login, create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState, runner: asyncio.Runner) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    state.close_views()
    aclose = getattr(state.client, "aclose", None)
    if aclose is None:
        return
    try:
        runner.run(aclose())
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s (api=%s)...", settings.app_name, settings.api_base_url)

    state = create_initial_state(settings=settings)

    with asyncio.Runner() as runner:
        try:
            err = runner.run(auto_login(state))
            if err:
                print(f"Auto login failed: {err}")
            elif state.session is not None:
                print(f"Logged in as {state.session.display_name} ({state.session.role.value}).")

            run_console_loop(state, runner)
        finally:
            _shutdown(state, runner)
            logger.info("Bye.")


if __name__ == "__main__":
    main()
