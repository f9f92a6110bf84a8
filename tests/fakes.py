# tests/fakes.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from taskgate.core.models import (
    ConfiguringTask,
    PromptChoice,
    PromptOption,
    RunOn,
    RunOptions,
    Severity,
    StorageScope,
    Task,
    TaskConfigurations,
    TaskIdentifier,
    TaskRunSource,
    TaskSet,
    WorkspaceFolder,
    WorkspaceFolderTaskResult,
    WorkspaceTaskResult,
)

FOLDER = WorkspaceFolder(uri=Path("/work/app"), name="app")


def make_task(label: str, run_on: RunOn = RunOn.FOLDER_OPEN, folder: WorkspaceFolder = FOLDER) -> Task:
    return Task(
        id=f"shell.{label}",
        label=label,
        run_options=RunOptions(run_on=run_on),
        folder=folder,
        command=f"echo {label}",
    )


def make_configured(
    name: str,
    *,
    label: str | None = None,
    run_on: RunOn = RunOn.FOLDER_OPEN,
    task_type: str = "npm",
) -> ConfiguringTask:
    ident = TaskIdentifier(type=task_type, task=name)
    return ConfiguringTask(
        id=ident.key,
        configures=ident,
        run_options=RunOptions(run_on=run_on),
        label=label,
        folder=FOLDER,
    )


def make_result(
    tasks: Sequence[Task] = (),
    configured: Sequence[ConfiguringTask] = (),
    folder: WorkspaceFolder = FOLDER,
) -> dict[str, WorkspaceFolderTaskResult]:
    return {
        folder.key: WorkspaceFolderTaskResult(
            workspace_folder=folder,
            set=TaskSet(tasks=list(tasks)),
            configurations=TaskConfigurations(by_identifier={c.id: c for c in configured}),
        )
    }


class FakeTaskIndex:
    """
    In-memory TaskIndex.

    - `resolvable` maps configured ids to what get_task returns (missing -> None)
    - captures every call for assertions
    """

    def __init__(
        self,
        result: WorkspaceTaskResult | None = None,
        resolvable: dict[str, Task | None] | None = None,
        failing_runs: set[str] | None = None,
    ) -> None:
        self.result = result if result is not None else {}
        self.resolvable = resolvable or {}
        self.failing_runs = failing_runs or set()

        self.workspace_queries: list[TaskRunSource] = []
        self.get_task_calls: list[tuple[WorkspaceFolder | None, str, bool]] = []
        self.runs: list[Task] = []
        self.opened_configs: list[WorkspaceFolder | None] = []

    async def get_workspace_tasks(self, reason: TaskRunSource) -> WorkspaceTaskResult:
        self.workspace_queries.append(reason)
        return self.result

    async def get_task(
        self,
        folder: WorkspaceFolder | None,
        identifier: str,
        force_resolution: bool = False,
    ) -> Task | None:
        self.get_task_calls.append((folder, identifier, force_resolution))
        value = self.resolvable.get(identifier)
        if isinstance(value, Exception):
            raise value
        return value

    async def run(self, task: Task) -> None:
        self.runs.append(task)
        if task.label in self.failing_runs:
            raise RuntimeError(f"cannot start {task.label}")

    async def open_config(self, folder: WorkspaceFolder | None) -> None:
        self.opened_configs.append(folder)

    @property
    def run_labels(self) -> list[str]:
        return [t.label for t in self.runs]


class FakeStorage:
    def __init__(self, initial: bool | None = None, *, broken: bool = False) -> None:
        self.values: dict[tuple[str, StorageScope], bool | str | int] = {}
        self.writes: list[tuple[str, bool | str | int, StorageScope]] = []
        self.broken = broken
        if initial is not None:
            from taskgate.automatic.gate import ALLOW_AUTOMATIC_TASKS_KEY

            self.values[(ALLOW_AUTOMATIC_TASKS_KEY, StorageScope.WORKSPACE)] = initial

    def get_boolean(self, key: str, scope: StorageScope, default: bool | None = None) -> bool | None:
        if self.broken:
            raise OSError("storage unavailable")
        value = self.values.get((key, scope))
        return value if isinstance(value, bool) else default

    def store(self, key: str, value: bool | str | int, scope: StorageScope) -> None:
        self.writes.append((key, value, scope))
        self.values[(key, scope)] = value

    def remove(self, key: str, scope: StorageScope) -> None:
        self.values.pop((key, scope), None)


@dataclass(slots=True)
class PromptCall:
    severity: Severity
    message: str
    options: list[PromptOption]
    runs_before: int


@dataclass(slots=True)
class FakeNotifications:
    """Answers every prompt with `answer` (None = dismissed)."""

    answer: PromptChoice | None = None
    index: FakeTaskIndex | None = None
    calls: list[PromptCall] = field(default_factory=list)

    async def prompt(
        self,
        severity: Severity,
        message: str,
        options: Sequence[PromptOption],
    ) -> PromptChoice | None:
        runs_before = len(self.index.runs) if self.index is not None else 0
        self.calls.append(PromptCall(severity, message, list(options), runs_before))
        return self.answer
