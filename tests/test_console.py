# tests/test_console.py

from __future__ import annotations

import json

import pytest

from taskgate.automatic.gate import PROMPT_OPTIONS
from taskgate.cli.bootstrap import create_initial_state
from taskgate.cli.main import open_workspace
from taskgate.connectors.console_connector import ConsoleNotifications, run_console_loop
from taskgate.core.models import ConsentState, PromptChoice, Severity

from .fakes import FakeNotifications


def _answers(*lines):
    it = iter(lines)

    def fake_input(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return fake_input


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("1", PromptChoice.ALLOW),
        ("2", PromptChoice.DISALLOW),
        ("3", PromptChoice.OPEN_CONFIG),
        ("disallow", PromptChoice.DISALLOW),
        ("Allow and run", PromptChoice.ALLOW),
        ("", None),
        ("9", None),
        ("maybe", None),
    ],
)
async def test_console_prompt_maps_answers(answer, expected, capsys) -> None:
    surface = ConsoleNotifications(input_fn=_answers(answer))
    assert await surface.prompt(Severity.INFO, "Run build?", PROMPT_OPTIONS) == expected
    out = capsys.readouterr().out
    assert "Run build?" in out
    assert "1) Allow and run" in out


@pytest.mark.asyncio
async def test_console_prompt_eof_is_dismissal() -> None:
    surface = ConsoleNotifications(input_fn=_answers())
    assert await surface.prompt(Severity.INFO, "Run build?", PROMPT_OPTIONS) is None


def _workspace(tmp_path, settings, answer):
    root = tmp_path / "app"
    (root / ".vscode").mkdir(parents=True)
    (root / ".vscode" / "tasks.json").write_text(
        json.dumps({"tasks": [{"label": "build", "command": "make", "runOptions": {"runOn": "folderOpen"}}]}),
        "utf-8",
    )
    notifications = FakeNotifications(answer=answer)
    state = create_initial_state([root], settings=settings, notifications=notifications)

    started = []

    async def start(task):
        started.append(task.label)

    state.task_index.runner.start = start
    return state, notifications, started


@pytest.mark.asyncio
async def test_open_workspace_asks_once_then_runs_without_asking(tmp_path, settings) -> None:
    state, notifications, started = _workspace(tmp_path, settings, PromptChoice.ALLOW)

    await open_workspace(state)
    assert len(notifications.calls) == 1
    assert started == ["build"]
    assert state.gate.consent() == ConsentState.ALLOWED

    # Second folder open: consent is stored, no prompt.
    await open_workspace(state)
    assert len(notifications.calls) == 1
    assert started == ["build", "build"]


@pytest.mark.asyncio
async def test_open_workspace_disallowed_never_runs(tmp_path, settings) -> None:
    state, notifications, started = _workspace(tmp_path, settings, PromptChoice.DISALLOW)

    await open_workspace(state)
    await open_workspace(state)

    assert len(notifications.calls) == 1
    assert started == []
    assert state.gate.consent() == ConsentState.DISALLOWED


@pytest.mark.asyncio
async def test_console_loop_runs_commands_until_exit(tmp_path, settings, capsys) -> None:
    state, _, _ = _workspace(tmp_path, settings, None)

    await run_console_loop(state, input_fn=_answers("", "hello", "/allow", "/exit", "/disallow"))

    out = capsys.readouterr().out
    assert "Not a command" in out
    assert "Automatic tasks allowed" in out
    assert state.gate.consent() == ConsentState.ALLOWED
