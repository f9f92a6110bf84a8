# src/taskgate/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the workspace store, the tasks.json index, the console prompt and the gate into AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..automatic.gate import RunAutomaticTasks
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifications
from ..core.models import WorkspaceFolder
from ..core.ports import NotificationSurface
from ..core.state import AppState
from ..index.json_index import JsonTaskIndex
from ..storage.workspace_store import WorkspaceStore, workspace_id_for

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
        folder_paths: Sequence[str | Path],
        *,
        settings=None,
        notifications: NotificationSurface | None = None,
) -> AppState:
    """
    Create AppState for the given workspace folders.

    The first folder identifies the workspace: its consent flag is stored under that id.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if not folder_paths:
        folder_paths = [Path.cwd()]

    _ensure_local_dirs(settings)

    folders = [WorkspaceFolder.from_path(p, index=i) for i, p in enumerate(folder_paths)]
    for folder in folders:
        if not folder.uri.is_dir():
            logger.warning("Workspace folder does not exist: %s", folder.uri)

    storage = WorkspaceStore(settings.storage_db_path, workspace_id_for(folders[0].uri))
    task_index = JsonTaskIndex(folders, settings=settings)
    if notifications is None:
        notifications = ConsoleNotifications()

    return AppState(
        settings=settings,
        storage=storage,
        task_index=task_index,
        notifications=notifications,
        gate=RunAutomaticTasks(task_index, storage, notifications),
    )
