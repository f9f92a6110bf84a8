# src/taskgate/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_RUNNER_LOGGER = "taskgate.index.runner"


class _PromptFriendlyFilter(logging.Filter):
    """
    The consent prompt and the started tasks share one terminal, so stderr
    only gets what a user needs while answering it. Runner start/finish lines
    are INFO and would interleave with task output; they go to the file only.
    Anything outside taskgate (including captured py.warnings) needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == _RUNNER_LOGGER:
            return record.levelno >= logging.WARNING
        if record.name.startswith("taskgate."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskgate",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send taskgate logs to stderr (filtered) and to <log_dir>/taskgate.log.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskgate.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_PromptFriendlyFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(log_file, encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(formatter)
    root.addHandler(logfile)

    logging.captureWarnings(True)
    # Subprocess transports log at DEBUG on every spawn.
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return log_file
