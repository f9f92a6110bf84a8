# src/taskgate/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.models import PromptChoice, PromptOption, Severity
from ..core.state import AppState

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]

_SEVERITY_TAGS = {
    Severity.INFO: "INFO",
    Severity.WARNING: "WARN",
    Severity.ERROR: "ERROR",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifications:
    """
    NotificationSurface for a terminal.

    Prints the message with numbered options and reads the answer on a worker
    thread so the event loop keeps running dispatched tasks meanwhile.
    Empty input, EOF, Ctrl+C or an unknown answer count as a dismissal.
    """

    def __init__(self, input_fn: InputFn = input) -> None:
        self._input = input_fn

    def _read(self, prompt: str) -> str | None:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            return None

    async def prompt(
            self,
            severity: Severity,
            message: str,
            options: Sequence[PromptOption],
    ) -> PromptChoice | None:
        _print_ts(f"[{_SEVERITY_TAGS.get(severity, 'INFO')}] {message}")
        for i, opt in enumerate(options, start=1):
            print(f"  {i}) {opt.label}")

        answer = await asyncio.to_thread(self._read, "Choose an option (empty to dismiss): ")
        answer = (answer or "").strip()
        if not answer:
            logger.debug("Prompt dismissed")
            return None

        if answer.isdigit():
            idx = int(answer) - 1
            if 0 <= idx < len(options):
                return options[idx].choice
        else:
            for opt in options:
                if answer.lower() in (opt.label.lower(), opt.choice.value):
                    return opt.choice

        logger.info("Unknown answer %r; treating the prompt as dismissed", answer)
        return None


async def run_console_loop(state: AppState, *, input_fn: InputFn = input) -> None:
    logger.info("Console connector started (workspace=%s).", state.storage.workspace_id)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    def read_line() -> str | None:
        try:
            return input_fn(">>> ")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            return None
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            return None

    while True:
        line = await asyncio.to_thread(read_line)
        if line is None:
            break
        line = line.strip()
        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = await command_registry.handle(state, line, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Not a command. Use /help to list available commands."
        _print_ts(response)

    logger.info("Console connector finished.")
