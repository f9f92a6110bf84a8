# src/taskgate/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..automatic.gate import RunAutomaticTasks
from ..index.json_index import JsonTaskIndex
from ..storage.workspace_store import WorkspaceStore
from .ports import NotificationSurface


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    storage: WorkspaceStore
    task_index: JsonTaskIndex
    notifications: NotificationSurface
    gate: RunAutomaticTasks
