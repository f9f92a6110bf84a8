# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from .fakes import FakeNotifications, FakeStorage, FakeTaskIndex


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the index and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the caller's environment.
    """
    return SimpleNamespace(
        app_name="taskgate-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        storage_db_path=tmp_path / "data" / "storage.sqlite3",
        tasks_config_relpath=".vscode/tasks.json",
        console_enabled=False,
        editor=None,
    )


@pytest.fixture()
def task_index() -> FakeTaskIndex:
    return FakeTaskIndex()


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def notifications(task_index: FakeTaskIndex) -> FakeNotifications:
    return FakeNotifications(index=task_index)
