# src/taskgate/errors.py

from __future__ import annotations

from pathlib import Path


class TaskgateError(Exception):
    """Base class for errors raised by taskgate adapters."""


class TaskConfigError(TaskgateError):
    """tasks.json exists but cannot be parsed into task definitions."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class StorageError(TaskgateError):
    """The workspace store could not be opened or migrated."""
