# src/taskgate/index/json_index.py

from __future__ import annotations

"""
tasks.json backed task index.

Each workspace folder may carry a `.vscode/tasks.json` (path configurable).
Entries are split in two groups:

- entries with a `command` (or only `dependsOn`) are fully specified tasks;
- entries without a command but with a non-shell `type` customize a task
  defined elsewhere ("configuring" entries) and are resolved lazily through
  get_task(), following their `configures` reference.

The file is parsed as JSON5, so // and /* */ comments and trailing commas are accepted.
"""

import asyncio
import dataclasses
import json
import logging
import shlex
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any

import json5

from ..config import Settings, get_settings
from ..core.models import (
    ConfiguringTask,
    RunOn,
    RunOptions,
    Task,
    TaskConfigurations,
    TaskIdentifier,
    TaskRunSource,
    TaskSet,
    WorkspaceFolder,
    WorkspaceFolderTaskResult,
    WorkspaceTaskResult,
)
from ..errors import TaskConfigError
from .runner import ShellTaskRunner

logger = logging.getLogger(__name__)

TASKS_TEMPLATE: dict[str, Any] = {"version": "2.0.0", "tasks": []}

_SELF_DEFINED_TYPES = ("shell", "process")

ConfigOpener = Callable[[Path], Awaitable[None]]


def load_task_entries(path: Path) -> list[dict[str, Any]]:
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        raise TaskConfigError(path, f"cannot read: {e}") from e

    try:
        data = json5.loads(text)
    except ValueError as e:
        raise TaskConfigError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise TaskConfigError(path, "top-level value must be an object")
    tasks = data.get("tasks", [])
    if not isinstance(tasks, list):
        raise TaskConfigError(path, "'tasks' must be a list")
    return tasks


def _run_options(raw: dict[str, Any]) -> RunOptions:
    opts = raw.get("runOptions")
    if not isinstance(opts, dict):
        return RunOptions()
    run_on = opts.get("runOn")
    return RunOptions(run_on=RunOn.parse(run_on if isinstance(run_on, str) else None))


def _str_list(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [str(x) for x in raw]
    return []


def parse_folder_tasks(folder: WorkspaceFolder, entries: Iterable[Any]) -> WorkspaceFolderTaskResult:
    task_set = TaskSet()
    configurations = TaskConfigurations()
    has_errors = False

    for pos, raw in enumerate(entries):
        if not isinstance(raw, dict):
            logger.warning("%s: task #%d is not an object; skipped", folder.name, pos)
            has_errors = True
            continue

        task_type = str(raw.get("type") or "shell")
        command = raw.get("command")
        label = raw.get("label") or raw.get("taskName")
        run_options = _run_options(raw)

        if command or raw.get("dependsOn"):
            label = str(label or command)
            options = raw.get("options")
            cwd = options.get("cwd") if isinstance(options, dict) else None
            task_set.tasks.append(
                Task(
                    id=f"{task_type}.{label}",
                    label=label,
                    run_options=run_options,
                    folder=folder,
                    type=task_type,
                    command=str(command) if command else None,
                    args=_str_list(raw.get("args")),
                    cwd=Path(cwd) if cwd else None,
                    depends_on=_str_list(raw.get("dependsOn")),
                )
            )
            continue

        if task_type in _SELF_DEFINED_TYPES:
            logger.warning("%s: task #%d (%s) has no command; skipped", folder.name, pos, label or "?")
            has_errors = True
            continue

        name = raw.get("script") or raw.get("task") or label
        if not name:
            logger.warning("%s: %s task #%d does not name the task it configures; skipped", folder.name, task_type, pos)
            has_errors = True
            continue

        identifier = TaskIdentifier(type=task_type, task=str(name))
        configurations.by_identifier[identifier.key] = ConfiguringTask(
            id=identifier.key,
            configures=identifier,
            run_options=run_options,
            label=str(raw["label"]) if raw.get("label") else None,
            folder=folder,
        )

    return WorkspaceFolderTaskResult(
        workspace_folder=folder,
        set=task_set,
        configurations=configurations,
        has_errors=has_errors,
    )


def _resolve_configured(
        result: WorkspaceFolderTaskResult,
        configured: ConfiguringTask,
        force_resolution: bool,
) -> Task | None:
    configurations = result.configurations.by_identifier if result.configurations else {}
    tasks = result.set.tasks if result.set else []

    seen: set[str] = set()
    current = configured
    while True:
        seen.add(current.id)
        target = next((t for t in tasks if t.label == current.configures.task), None)
        if target is not None:
            return dataclasses.replace(
                target,
                id=configured.id,
                label=configured.label or target.label,
                run_options=configured.run_options,
            )
        if not force_resolution:
            return None

        # Nested configuration: the referenced name is itself a configuring entry.
        nxt = configurations.get(current.configures.task) or next(
            (c for c in configurations.values() if c.label == current.configures.task),
            None,
        )
        if nxt is None:
            return None
        if nxt.id in seen:
            logger.warning("Cycle while resolving %s via %s", configured.id, nxt.id)
            return None
        current = nxt


class JsonTaskIndex:
    """
    TaskIndex over a list of workspace folders.

    get_workspace_tasks() re-reads every tasks.json; get_task() uses the last
    loaded result for the folder (loading it on first use).
    """

    def __init__(
            self,
            folders: Iterable[WorkspaceFolder],
            *,
            settings: Settings | None = None,
            runner: ShellTaskRunner | None = None,
            opener: ConfigOpener | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._folders = list(folders)
        self._runner = runner or ShellTaskRunner()
        self._opener = opener or self._open_in_editor
        self._results: dict[str, WorkspaceFolderTaskResult] = {}

    @property
    def folders(self) -> list[WorkspaceFolder]:
        return list(self._folders)

    @property
    def runner(self) -> ShellTaskRunner:
        return self._runner

    def config_path(self, folder: WorkspaceFolder) -> Path:
        return folder.uri / self._settings.tasks_config_relpath

    def _load_folder(self, folder: WorkspaceFolder) -> WorkspaceFolderTaskResult:
        path = self.config_path(folder)
        if not path.exists():
            result = WorkspaceFolderTaskResult(workspace_folder=folder)
        else:
            try:
                result = parse_folder_tasks(folder, load_task_entries(path))
            except TaskConfigError as e:
                logger.warning("Ignoring task configuration: %s", e)
                result = WorkspaceFolderTaskResult(workspace_folder=folder, has_errors=True)
        self._results[folder.key] = result
        return result

    async def get_workspace_tasks(self, reason: TaskRunSource) -> WorkspaceTaskResult:
        logger.debug("Loading workspace tasks reason=%s folders=%d", reason.value, len(self._folders))
        return {folder.key: self._load_folder(folder) for folder in self._folders}

    async def get_task(
            self,
            folder: WorkspaceFolder | None,
            identifier: str,
            force_resolution: bool = False,
    ) -> Task | None:
        candidates = [folder] if folder is not None else self._folders
        for f in candidates:
            result = self._results.get(f.key) or self._load_folder(f)

            if result.set is not None:
                for task in result.set.tasks:
                    if task.id == identifier:
                        return task

            if result.configurations is not None:
                configured = result.configurations.by_identifier.get(identifier)
                if configured is not None:
                    return _resolve_configured(result, configured, force_resolution)
        return None

    def _find_by_label(self, folder: WorkspaceFolder | None, label: str) -> Task | None:
        candidates = [folder] if folder is not None else self._folders
        for f in candidates:
            result = self._results.get(f.key) or self._load_folder(f)
            if result.set is None:
                continue
            for task in result.set.tasks:
                if task.label == label:
                    return task
        return None

    async def run(self, task: Task) -> None:
        """
        Start `task` and, first, every task named in its dependsOn.

        Dependencies are looked up by label in the same folder. They are only
        started, not awaited; a task reached twice (shared dependency or a
        cycle) starts once.
        """
        await self._start_with_dependencies(task, set())

    async def _start_with_dependencies(self, task: Task, started: set[str]) -> None:
        started.add(task.id)
        for label in task.depends_on:
            dep = self._find_by_label(task.folder, label)
            if dep is None:
                logger.warning("Task %s depends on unknown task %r; skipped", task.label, label)
                continue
            if dep.id in started:
                logger.debug("Task %s: dependency %s already started", task.label, label)
                continue
            await self._start_with_dependencies(dep, started)

        if task.command or not task.depends_on:
            await self._runner.start(task)

    async def open_config(self, folder: WorkspaceFolder | None) -> None:
        if folder is None:
            if not self._folders:
                logger.warning("No workspace folder to open a task configuration in")
                return
            folder = self._folders[0]

        path = self.config_path(folder)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(TASKS_TEMPLATE, indent=2) + "\n", "utf-8")
            logger.info("Created %s", path)

        await self._opener(path)

    async def _open_in_editor(self, path: Path) -> None:
        editor = self._settings.editor
        if not editor:
            print(f"Task configuration: {path}")
            return
        proc = await asyncio.create_subprocess_exec(*shlex.split(editor), str(path))
        code = await proc.wait()
        if code:
            logger.warning("Editor %r exited with code %s", editor, code)
