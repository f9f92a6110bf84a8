# src/taskgate/automatic/gate.py

from __future__ import annotations

"""
Consent gate for tasks that run when a folder is opened.

Two entry points:
- try_run_tasks(): called on folder open. Runs automatic tasks only if the
  workspace already allowed them. Never prompts.
- prompt_for_permission(result): called by the task index owner once task
  data is available. Asks the user once per workspace while no decision is
  stored, persists the answer and runs the tasks if allowed.

The stored flag is read on every call and never cached here, so a /allow or
/disallow issued elsewhere is picked up by the next entry point.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence

from ..core.models import (
    ConsentState,
    PendingTask,
    PromptChoice,
    PromptOption,
    ResolvedTask,
    Severity,
    StorageScope,
    TaskRef,
    TaskRunSource,
    WorkspaceTaskResult,
)
from ..core.ports import NotificationSurface, TaskIndex, WorkspaceStorage
from .discovery import find_auto_tasks

logger = logging.getLogger(__name__)

ALLOW_AUTOMATIC_TASKS_KEY = "tasks.run.allowAutomatic"

PROMPT_MESSAGE = (
    "This folder has tasks ({names}) defined in 'tasks.json' that run automatically "
    "when you open this folder. Do you allow automatic tasks to run when you open this folder?"
)

PROMPT_OPTIONS: tuple[PromptOption, ...] = (
    PromptOption(label="Allow and run", choice=PromptChoice.ALLOW),
    PromptOption(label="Disallow", choice=PromptChoice.DISALLOW),
    PromptOption(label="Open tasks.json", choice=PromptChoice.OPEN_CONFIG),
)


def format_prompt_message(task_names: Sequence[str]) -> str:
    return PROMPT_MESSAGE.format(names=", ".join(task_names))


def read_consent(storage: WorkspaceStorage) -> ConsentState:
    """A store that cannot answer counts as 'no decision yet'."""
    try:
        raw = storage.get_boolean(ALLOW_AUTOMATIC_TASKS_KEY, StorageScope.WORKSPACE, None)
    except Exception:
        logger.exception("Failed to read %s; treating as undecided", ALLOW_AUTOMATIC_TASKS_KEY)
        return ConsentState.UNDECIDED
    return ConsentState.from_stored(raw)


def allow_automatic_tasks(storage: WorkspaceStorage) -> None:
    """Allow automatic tasks in this workspace. Does not run anything."""
    storage.store(ALLOW_AUTOMATIC_TASKS_KEY, True, StorageScope.WORKSPACE)
    logger.info("Automatic tasks allowed for this workspace")


def disallow_automatic_tasks(storage: WorkspaceStorage) -> None:
    """Disallow automatic tasks in this workspace."""
    storage.store(ALLOW_AUTOMATIC_TASKS_KEY, False, StorageScope.WORKSPACE)
    logger.info("Automatic tasks disallowed for this workspace")


class RunAutomaticTasks:
    """
    Gate + dispatcher for runOn=folderOpen tasks.

    Dispatch is fire-and-forget: every task reference becomes its own asyncio
    task, so a failing resolution or run never blocks the rest of the batch.
    Callers that need to wait (CLI shutdown, tests) can await the returned
    jobs or wait_idle().
    """

    def __init__(
            self,
            task_index: TaskIndex,
            storage: WorkspaceStorage,
            notifications: NotificationSurface | None = None,
    ) -> None:
        self._task_index = task_index
        self._storage = storage
        self._notifications = notifications
        self._jobs: set[asyncio.Task[None]] = set()

    def consent(self) -> ConsentState:
        return read_consent(self._storage)

    # ---- entry point A: folder open ----

    async def try_run_tasks(self) -> list[asyncio.Task[None]]:
        # Prompting happens in prompt_for_permission, when the task index is ready.
        state = self.consent()
        if state != ConsentState.ALLOWED:
            logger.debug("Automatic tasks not run on folder open (consent=%s)", state.value)
            return []

        try:
            workspace_task_result = await self._task_index.get_workspace_tasks(TaskRunSource.FOLDER_OPEN)
        except Exception:
            logger.exception("get_workspace_tasks failed; no automatic tasks this time")
            return []

        found = find_auto_tasks(self._task_index, workspace_task_result)
        if not found.tasks:
            return []

        logger.info("Running automatic tasks: %s", ", ".join(found.task_names))
        return self.run_tasks(found.tasks)

    # ---- entry point B: task index ready ----

    async def prompt_for_permission(
            self,
            workspace_task_result: WorkspaceTaskResult | None,
    ) -> list[asyncio.Task[None]]:
        if self.consent() != ConsentState.UNDECIDED:
            return []

        found = find_auto_tasks(self._task_index, workspace_task_result)
        if not found.task_names:
            return []

        choice = await self._show_prompt(found.task_names)

        match choice:
            case PromptChoice.ALLOW:
                self._store_decision(True)
                logger.info("Running automatic tasks: %s", ", ".join(found.task_names))
                return self.run_tasks(found.tasks)
            case PromptChoice.DISALLOW:
                self._store_decision(False)
            case PromptChoice.OPEN_CONFIG:
                try:
                    await self._task_index.open_config(None)
                except Exception:
                    logger.exception("open_config failed")
            case None:
                logger.info("Automatic tasks prompt dismissed; will ask again next time")

        return []

    @classmethod
    async def prompt_for_permission_with(
            cls,
            task_index: TaskIndex,
            storage: WorkspaceStorage,
            notifications: NotificationSurface,
            workspace_task_result: WorkspaceTaskResult | None,
    ) -> list[asyncio.Task[None]]:
        """One-shot variant for task index owners that do not keep a gate."""
        gate = cls(task_index, storage, notifications)
        return await gate.prompt_for_permission(workspace_task_result)

    async def _show_prompt(self, task_names: Sequence[str]) -> PromptChoice | None:
        if self._notifications is None:
            logger.warning("No notification surface configured; cannot ask about automatic tasks")
            return None
        try:
            return await self._notifications.prompt(
                Severity.INFO,
                format_prompt_message(task_names),
                PROMPT_OPTIONS,
            )
        except Exception:
            logger.exception("Automatic tasks prompt failed")
            return None

    def _store_decision(self, allowed: bool) -> None:
        # The user already chose; a failed write only means we ask again later.
        try:
            if allowed:
                allow_automatic_tasks(self._storage)
            else:
                disallow_automatic_tasks(self._storage)
        except Exception:
            logger.exception("Failed to persist automatic tasks decision allowed=%s", allowed)

    # ---- dispatch ----

    def run_tasks(self, tasks: Iterable[TaskRef]) -> list[asyncio.Task[None]]:
        """Schedule every task reference in discovery order. Must run inside an event loop."""
        jobs: list[asyncio.Task[None]] = []
        for ref in tasks:
            job = asyncio.create_task(self._dispatch(ref))
            self._jobs.add(job)
            job.add_done_callback(self._jobs.discard)
            jobs.append(job)
        return jobs

    async def _dispatch(self, ref: TaskRef) -> None:
        match ref:
            case ResolvedTask(task=task):
                pass
            case PendingTask():
                try:
                    task = await ref.resolve()
                except Exception:
                    logger.debug("Resolution failed id=%s; skipping", ref.identifier, exc_info=True)
                    return
                if task is None:
                    return
            case _:
                logger.warning("Unknown task reference %r; skipping", ref)
                return

        try:
            await self._task_index.run(task)
        except Exception:
            logger.exception("run failed task=%s", task.label)

    async def wait_idle(self) -> None:
        """Wait for every dispatched task submission still in flight."""
        while self._jobs:
            await asyncio.gather(*list(self._jobs))
