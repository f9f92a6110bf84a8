# src/taskgate/storage/workspace_store.py

from __future__ import annotations

import contextlib
import hashlib
import logging
import sqlite3
import time
from pathlib import Path

from ..core.models import StorageScope
from ..errors import StorageError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def workspace_id_for(path: str | Path) -> str:
    """Stable identifier for a workspace folder (sha1 of its resolved path)."""
    resolved = str(Path(path).expanduser().resolve())
    return hashlib.sha1(resolved.encode("utf-8")).hexdigest()


class WorkspaceStore:
    """
    SQLite key-value store with GLOBAL and WORKSPACE scopes.

    WORKSPACE values are keyed by the workspace id given at construction;
    GLOBAL values are shared by every workspace using the same database.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path, workspace_id: str) -> None:
        if not workspace_id:
            raise ValueError("workspace_id is required")
        self._db_path = Path(db_path)
        self._workspace_id = workspace_id
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open workspace store {self._db_path}: {e}") from e
        logger.info("WorkspaceStore ready db=%s workspace=%s", self._db_path, workspace_id)

    @property
    def workspace_id(self) -> str:
        return self._workspace_id

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    scope TEXT NOT NULL,
                    workspace_id TEXT NOT NULL DEFAULT '',
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (scope, workspace_id, key)
                )
                """
            )

            cur.execute("PRAGMA table_info(kv)")
            cols = {row["name"] for row in cur.fetchall()}
            if "updated_at" not in cols:
                cur.execute("ALTER TABLE kv ADD COLUMN updated_at REAL NOT NULL DEFAULT 0")
                logger.info("WorkspaceStore migration: added column updated_at")

            conn.commit()
        finally:
            conn.close()

    def _scope_id(self, scope: StorageScope) -> str:
        return self._workspace_id if scope == StorageScope.WORKSPACE else ""

    # ---- public API ----

    def get(self, key: str, scope: StorageScope, default: str | None = None) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT value FROM kv WHERE scope = ? AND workspace_id = ? AND key = ?",
                (scope.value, self._scope_id(scope), key),
            )
            row = cur.fetchone()
            return default if row is None else str(row["value"])
        finally:
            conn.close()

    def get_boolean(self, key: str, scope: StorageScope, default: bool | None = None) -> bool | None:
        raw = self.get(key, scope)
        if raw is None:
            return default
        val = raw.strip().lower()
        if val in _TRUE_VALUES:
            return True
        if val in _FALSE_VALUES:
            return False
        logger.warning("Ignoring non-boolean value for %s (%s): %r", key, scope.value, raw)
        return default

    def store(self, key: str, value: bool | str | int, scope: StorageScope) -> None:
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(scope, workspace_id, key, value, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(scope, workspace_id, key)
                DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (scope.value, self._scope_id(scope), key, text, time.time()),
            )
            conn.commit()
            logger.debug("Stored %s=%s scope=%s", key, text, scope.value)
        finally:
            conn.close()

    def remove(self, key: str, scope: StorageScope) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "DELETE FROM kv WHERE scope = ? AND workspace_id = ? AND key = ?",
                (scope.value, self._scope_id(scope), key),
            )
            conn.commit()
        finally:
            conn.close()
