# src/taskgate/core/models.py

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TypeAlias


class RunOn(StrEnum):
    """When a task is started without an explicit user request."""

    DEFAULT = "default"
    FOLDER_OPEN = "folderOpen"

    @classmethod
    def parse(cls, raw: str | None) -> RunOn:
        if not raw:
            return cls.DEFAULT
        try:
            return cls(raw)
        except ValueError:
            return cls.DEFAULT


class TaskRunSource(StrEnum):
    USER = "user"
    FOLDER_OPEN = "folder_open"


class StorageScope(StrEnum):
    GLOBAL = "global"
    WORKSPACE = "workspace"


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ConsentState(StrEnum):
    """
    Per-workspace decision about automatic tasks.

    Only UNDECIDED allows prompting. ALLOWED/DISALLOWED stay until a user
    action rewrites the stored flag.
    """

    ALLOWED = "allowed"
    DISALLOWED = "disallowed"
    UNDECIDED = "undecided"

    @classmethod
    def from_stored(cls, raw: bool | None) -> ConsentState:
        if raw is True:
            return cls.ALLOWED
        if raw is False:
            return cls.DISALLOWED
        return cls.UNDECIDED


class PromptChoice(StrEnum):
    ALLOW = "allow"
    DISALLOW = "disallow"
    OPEN_CONFIG = "open_config"


@dataclass(slots=True, frozen=True)
class PromptOption:
    label: str
    choice: PromptChoice


@dataclass(slots=True, frozen=True)
class RunOptions:
    run_on: RunOn = RunOn.DEFAULT


@dataclass(slots=True, frozen=True)
class WorkspaceFolder:
    uri: Path
    name: str
    index: int = 0

    @classmethod
    def from_path(cls, path: str | Path, index: int = 0) -> WorkspaceFolder:
        p = Path(path).expanduser().resolve()
        return cls(uri=p, name=p.name or str(p), index=index)

    @property
    def key(self) -> str:
        return str(self.uri)


@dataclass(slots=True)
class Task:
    """A fully resolved task: everything needed to hand it to the runner."""

    id: str
    label: str
    run_options: RunOptions = field(default_factory=RunOptions)
    folder: WorkspaceFolder | None = None

    type: str = "shell"
    command: str | None = None
    args: list[str] = field(default_factory=list)
    cwd: Path | None = None
    depends_on: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class TaskIdentifier:
    """Reference from a configuring entry to the task it customizes."""

    type: str
    task: str

    @property
    def key(self) -> str:
        return f"{self.type}.{self.task}"


@dataclass(slots=True)
class ConfiguringTask:
    """
    A tasks.json entry that customizes a task defined elsewhere.

    It only becomes a Task once the index resolves `configures`.
    """

    id: str
    configures: TaskIdentifier
    run_options: RunOptions = field(default_factory=RunOptions)
    label: str | None = None
    folder: WorkspaceFolder | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.configures.task


@dataclass(slots=True)
class TaskSet:
    tasks: list[Task] = field(default_factory=list)


@dataclass(slots=True)
class TaskConfigurations:
    by_identifier: dict[str, ConfiguringTask] = field(default_factory=dict)


@dataclass(slots=True)
class WorkspaceFolderTaskResult:
    workspace_folder: WorkspaceFolder
    set: TaskSet | None = None
    configurations: TaskConfigurations | None = None
    has_errors: bool = False


WorkspaceTaskResult: TypeAlias = Mapping[str, WorkspaceFolderTaskResult]


# ---- task references ----


@dataclass(slots=True, frozen=True)
class ResolvedTask:
    task: Task


@dataclass(slots=True, frozen=True)
class PendingTask:
    """
    A task that still has to be resolved by the index.

    Nothing is requested from the index until the dispatcher calls resolve().
    The result is None when the configured task cannot be matched.
    """

    identifier: str
    resolver: Callable[[], Awaitable[Task | None]]

    async def resolve(self) -> Task | None:
        return await self.resolver()


TaskRef: TypeAlias = ResolvedTask | PendingTask


@dataclass(slots=True)
class DiscoveryResult:
    """Parallel lists: tasks[i] is shown to the user as task_names[i]."""

    tasks: list[TaskRef] = field(default_factory=list)
    task_names: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.tasks)
