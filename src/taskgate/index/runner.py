# src/taskgate/index/runner.py

from __future__ import annotations

"""
Shell task runner.

Starts a resolved task as a subprocess in its folder and returns as soon as
the process is spawned. Output goes straight to the terminal; the exit code
is only logged. Whatever happens to the process is the runner's business,
the gate never looks at it.
"""

import asyncio
import logging
import shlex
from pathlib import Path

from ..core.models import Task

logger = logging.getLogger(__name__)


class ShellTaskRunner:
    def __init__(self) -> None:
        self._watchers: set[asyncio.Task[int]] = set()

    @staticmethod
    def _cwd(task: Task) -> Path | None:
        if task.cwd is not None:
            if task.cwd.is_absolute() or task.folder is None:
                return task.cwd
            return task.folder.uri / task.cwd
        return task.folder.uri if task.folder is not None else None

    async def start(self, task: Task) -> asyncio.subprocess.Process | None:
        if not task.command:
            logger.warning("Task %s has no command; nothing to start", task.label)
            return None

        cwd = self._cwd(task)
        if task.type == "process":
            proc = await asyncio.create_subprocess_exec(task.command, *task.args, cwd=cwd)
        else:
            cmdline = " ".join([task.command, *(shlex.quote(a) for a in task.args)])
            proc = await asyncio.create_subprocess_shell(cmdline, cwd=cwd)

        logger.info("Task %s started pid=%s cwd=%s", task.label, proc.pid, cwd)

        watcher = asyncio.create_task(self._watch(task, proc))
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)
        return proc

    @staticmethod
    async def _watch(task: Task, proc: asyncio.subprocess.Process) -> int:
        code = await proc.wait()
        if code:
            logger.warning("Task %s exited with code %s", task.label, code)
        else:
            logger.info("Task %s finished", task.label)
        return code

    @property
    def running(self) -> int:
        return len(self._watchers)

    async def wait_all(self) -> None:
        while self._watchers:
            await asyncio.gather(*list(self._watchers), return_exceptions=True)
