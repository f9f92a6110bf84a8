# src/taskgate/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState for the given folders, then simulates a
folder open:
- entry point A (run automatic tasks if already allowed),
- entry point B once the task index has loaded (ask if undecided),
- console command loop (optional) while started tasks keep running.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.models import TaskRunSource
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="taskgate",
        description="Open workspace folders and run their tasks marked runOn=folderOpen, with consent.",
    )
    parser.add_argument("folders", nargs="*", help="Workspace folders (default: current directory).")
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Do not start the command console after the folder-open flow.",
    )
    return parser.parse_args(argv)


async def open_workspace(state: AppState) -> None:
    gate = state.gate

    await gate.try_run_tasks()

    # The index is "ready" once its first full load completes.
    try:
        result = await state.task_index.get_workspace_tasks(TaskRunSource.FOLDER_OPEN)
    except Exception:
        logger.exception("Task index failed to load; not asking about automatic tasks")
        return
    await gate.prompt_for_permission(result)

    await gate.wait_idle()


async def _run(state: AppState, console: bool) -> None:
    await open_workspace(state)

    if console:
        await run_console_loop(state)

    runner = state.task_index.runner
    if runner.running:
        logger.info("Waiting for %d running task(s). Press Ctrl+C to stop.", runner.running)
        await runner.wait_all()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s... (log: %s)", settings.app_name, log_file)

    state = create_initial_state(args.folders, settings=settings)

    try:
        asyncio.run(_run(state, settings.console_enabled and not args.no_console))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
