# src/schedule_maker/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL. input() runs in a worker thread so background sync
    calls keep making progress on the event loop while we wait for a line.
    """
    logger.info("Console connector started (sync=%s).", state.sync.state.value)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            print("Commands start with '/'. Try /help.")
            continue

        try:
            reply = await command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command failed: %s", user_input)
            print("Command failed; see logs.")
            continue

        if reply:
            print(reply)
