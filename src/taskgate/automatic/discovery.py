# src/taskgate/automatic/discovery.py

from __future__ import annotations

"""
Automatic task discovery.

Scans the resolved workspace task data and collects every task whose run
options say "run on folder open". Fully specified tasks are returned as they
are; configured tasks are wrapped in a PendingTask so the index only resolves
them if the gate decides to run them.

Discovery is a pure read and is safe to call before consent is known.
"""

import logging

from ..core.models import (
    ConfiguringTask,
    DiscoveryResult,
    PendingTask,
    ResolvedTask,
    RunOn,
    Task,
    WorkspaceFolder,
    WorkspaceTaskResult,
)
from ..core.ports import TaskIndex

logger = logging.getLogger(__name__)


def _pending(task_index: TaskIndex, folder: WorkspaceFolder | None, configured: ConfiguringTask) -> PendingTask:
    identifier = configured.id

    async def resolve() -> Task | None:
        try:
            task = await task_index.get_task(folder, identifier, True)
        except Exception:
            logger.debug("get_task failed folder=%s id=%s", folder, identifier, exc_info=True)
            return None
        if task is None:
            logger.debug("Configured task did not resolve folder=%s id=%s", folder, identifier)
        return task

    return PendingTask(identifier=identifier, resolver=resolve)


def find_auto_tasks(
        task_index: TaskIndex,
        workspace_task_result: WorkspaceTaskResult | None,
) -> DiscoveryResult:
    """
    Return (tasks, task_names) for everything marked runOn=folderOpen.

    Order follows the input: per folder, the task set first, then the
    configurations. Labels are only used for the prompt text.
    """
    result = DiscoveryResult()
    if not workspace_task_result:
        return result

    for folder_result in workspace_task_result.values():
        if folder_result.set is not None:
            for task in folder_result.set.tasks:
                if task.run_options.run_on == RunOn.FOLDER_OPEN:
                    result.tasks.append(ResolvedTask(task))
                    result.task_names.append(task.label)

        if folder_result.configurations is not None:
            for configured in folder_result.configurations.by_identifier.values():
                if configured.run_options.run_on != RunOn.FOLDER_OPEN:
                    continue
                result.tasks.append(_pending(task_index, folder_result.workspace_folder, configured))
                result.task_names.append(configured.display_label)

    logger.debug("Automatic tasks found: %s", result.task_names)
    return result
