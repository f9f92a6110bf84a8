# src/taskgate/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

from ..automatic.discovery import find_auto_tasks
from ..automatic.gate import allow_automatic_tasks, disallow_automatic_tasks
from ..core.models import ConsentState, TaskRunSource
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str | Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /allow, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        reply = handler(state, args, emit)
        if inspect.isawaitable(reply):
            reply = await reply
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    consent = state.gate.consent()
    result = await state.task_index.get_workspace_tasks(TaskRunSource.USER)
    found = find_auto_tasks(state.task_index, result)

    folders = ", ".join(f.name for f in state.task_index.folders) or "(none)"
    names = ", ".join(found.task_names) or "(none)"
    errors = [r.workspace_folder.name for r in result.values() if r.has_errors]

    lines = [
        "Status:",
        f"  Folders: {folders}",
        f"  Automatic tasks: {consent.value}",
        f"  Tasks run on folder open: {names}",
    ]
    if errors:
        lines.append(f"  Task configuration problems in: {', '.join(errors)}")
    return "\n".join(lines)


def cmd_allow(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.gate.consent() == ConsentState.ALLOWED:
        return "Automatic tasks are already allowed in this folder."
    allow_automatic_tasks(state.storage)
    return "Automatic tasks allowed in this folder. They will run the next time the folder is opened."


def cmd_disallow(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.gate.consent() == ConsentState.DISALLOWED:
        return "Automatic tasks are already disallowed in this folder."
    disallow_automatic_tasks(state.storage)
    return "Automatic tasks disallowed in this folder."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show the automatic tasks decision and the tasks it covers.")
registry.register("allow", cmd_allow, help_text="Allow Automatic Tasks in Folder.")
registry.register("disallow", cmd_disallow, help_text="Disallow Automatic Tasks in Folder.")
