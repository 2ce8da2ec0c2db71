# src/schedule_maker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL on an asyncio
loop so write-through sync calls can proceed in the background.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..sync.http_backend import HttpBackend

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    if getattr(state.settings, "auto_sign_in", False) and state.backend is not None:
        if not await state.sync.sign_in(state.backend):
            logger.warning("Automatic sign-in failed; use /login to retry.")

    try:
        await run_console_loop(state)
    finally:
        # Let pending remote writes finish before the loop goes away.
        await state.sync.drain()
        if isinstance(state.backend, HttpBackend):
            await state.backend.aclose()


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.sync.sign_out()
    except Exception:
        logger.debug("Sync sign-out failed.", exc_info=True)

    storage = getattr(state.store, "storage", None)
    try:
        if storage is not None and hasattr(storage, "close"):
            storage.close()
    except Exception:
        logger.debug("Storage close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "schedule-maker"))

    state = create_initial_state(settings=settings)
    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
