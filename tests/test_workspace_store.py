# tests/test_workspace_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from taskgate.core.models import StorageScope
from taskgate.errors import StorageError
from taskgate.storage.workspace_store import WorkspaceStore, workspace_id_for


def test_boolean_roundtrip_and_default(tmp_path: Path) -> None:
    store = WorkspaceStore(tmp_path / "storage.sqlite3", "ws1")

    assert store.get_boolean("tasks.run.allowAutomatic", StorageScope.WORKSPACE, None) is None
    assert store.get_boolean("tasks.run.allowAutomatic", StorageScope.WORKSPACE, True) is True

    store.store("tasks.run.allowAutomatic", False, StorageScope.WORKSPACE)
    assert store.get_boolean("tasks.run.allowAutomatic", StorageScope.WORKSPACE, None) is False

    store.store("tasks.run.allowAutomatic", True, StorageScope.WORKSPACE)
    assert store.get_boolean("tasks.run.allowAutomatic", StorageScope.WORKSPACE, None) is True

    store.remove("tasks.run.allowAutomatic", StorageScope.WORKSPACE)
    assert store.get_boolean("tasks.run.allowAutomatic", StorageScope.WORKSPACE, None) is None


def test_workspace_scope_is_per_workspace_and_global_is_shared(tmp_path: Path) -> None:
    db = tmp_path / "storage.sqlite3"
    a = WorkspaceStore(db, "ws-a")
    b = WorkspaceStore(db, "ws-b")

    a.store("flag", True, StorageScope.WORKSPACE)
    a.store("theme", "dark", StorageScope.GLOBAL)

    assert b.get_boolean("flag", StorageScope.WORKSPACE) is None
    assert b.get("theme", StorageScope.GLOBAL) == "dark"
    assert a.get_boolean("flag", StorageScope.GLOBAL) is None


def test_value_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "storage.sqlite3"
    WorkspaceStore(db, "ws1").store("flag", True, StorageScope.WORKSPACE)
    assert WorkspaceStore(db, "ws1").get_boolean("flag", StorageScope.WORKSPACE) is True


def test_non_boolean_value_reads_as_default(tmp_path: Path) -> None:
    store = WorkspaceStore(tmp_path / "storage.sqlite3", "ws1")
    store.store("flag", "maybe", StorageScope.WORKSPACE)
    assert store.get_boolean("flag", StorageScope.WORKSPACE, None) is None


def test_migrates_table_without_updated_at(tmp_path: Path) -> None:
    db = tmp_path / "storage.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute(
        "CREATE TABLE kv (scope TEXT NOT NULL, workspace_id TEXT NOT NULL DEFAULT '', "
        "key TEXT NOT NULL, value TEXT NOT NULL, PRIMARY KEY (scope, workspace_id, key))"
    )
    conn.execute("INSERT INTO kv VALUES ('workspace', 'ws1', 'flag', 'true')")
    conn.commit()
    conn.close()

    store = WorkspaceStore(db, "ws1")
    assert store.get_boolean("flag", StorageScope.WORKSPACE) is True
    store.store("flag", False, StorageScope.WORKSPACE)
    assert store.get_boolean("flag", StorageScope.WORKSPACE) is False


def test_unopenable_database_raises_storage_error(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x", "utf-8")
    with pytest.raises(StorageError):
        WorkspaceStore(not_a_dir / "storage.sqlite3", "ws1")


def test_workspace_id_is_stable_per_path(tmp_path: Path) -> None:
    (tmp_path / "a").mkdir()
    assert workspace_id_for(tmp_path / "a") == workspace_id_for(tmp_path / "a" / ".." / "a")
    assert workspace_id_for(tmp_path / "a") != workspace_id_for(tmp_path / "b")


def test_workspace_id_is_required(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        WorkspaceStore(tmp_path / "storage.sqlite3", "")
