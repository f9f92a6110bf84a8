# src/taskgate/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The gate depends on Protocols instead of concrete implementations.
This keeps the task index, the storage backend and the UI swappable and makes testing easier.
"""

from collections.abc import Sequence
from typing import Awaitable, Protocol

from .models import (
    PromptChoice,
    PromptOption,
    Severity,
    StorageScope,
    Task,
    TaskRunSource,
    WorkspaceFolder,
    WorkspaceTaskResult,
)


class TaskIndex(Protocol):
    """
    Owner of the workspace task configuration.

    Resolution and execution may complete asynchronously; the gate never
    inspects what happens to a task after `run`.
    """

    def get_workspace_tasks(self, reason: TaskRunSource) -> Awaitable[WorkspaceTaskResult]: ...

    def get_task(
            self,
            folder: WorkspaceFolder | None,
            identifier: str,
            force_resolution: bool = False,
    ) -> Awaitable[Task | None]: ...

    def run(self, task: Task) -> Awaitable[None]: ...

    def open_config(self, folder: WorkspaceFolder | None) -> Awaitable[None]: ...


class WorkspaceStorage(Protocol):
    """Key-value store; WORKSPACE scope is bound to the currently open workspace."""

    def get_boolean(self, key: str, scope: StorageScope, default: bool | None = None) -> bool | None: ...
    def store(self, key: str, value: bool | str | int, scope: StorageScope) -> None: ...
    def remove(self, key: str, scope: StorageScope) -> None: ...


class NotificationSurface(Protocol):
    """
    Shows a message with a fixed set of options.

    Returns the selected choice, or None when the user dismissed the prompt.
    """

    def prompt(
            self,
            severity: Severity,
            message: str,
            options: Sequence[PromptOption],
    ) -> Awaitable[PromptChoice | None]: ...
