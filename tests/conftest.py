"""Shared pytest fixtures for the vuecreate test suite.

Provides reusable fixtures for:
- A test-mode ``Config`` rooted in a temporary directory
- A temporary rc store
- A scripted prompt engine standing in for the terminal
- Lifecycle event recording
- Mock subprocess helpers
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vuecreate.config import Config
from vuecreate.events import CreationEvent, EventBus, LifecycleEvent
from vuecreate.options import RcStore
from vuecreate.prompts.engine import Answers, Question


# ---------------------------------------------------------------------------
# Scripted prompt engine
# ---------------------------------------------------------------------------


class ScriptedEngine:
    """Prompt engine answering from a fixed ``{question_name: answer}`` map.

    Visible questions without a scripted answer receive their default.
    Every call to :meth:`prompt` is a session; the names of the questions
    actually asked are recorded per session.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.sessions: list[list[str]] = []

    @property
    def asked(self) -> list[str]:
        return [name for session in self.sessions for name in session]

    async def prompt(self, questions: Sequence[Question], answers: Answers | None = None) -> Answers:
        collected: Answers = dict(answers or {})
        session: list[str] = []
        for question in questions:
            if not question.is_visible(collected):
                continue
            session.append(question.name)
            if question.name in self.answers:
                collected[question.name] = self.answers[question.name]
            else:
                collected[question.name] = question.resolve_default(collected)
        self.sessions.append(session)
        return collected


@pytest.fixture
def scripted_engine():
    """Factory for ``ScriptedEngine`` instances.

    Usage:
        def test_prompt(scripted_engine):
            engine = scripted_engine({"preset": "__manual__"})
    """
    return ScriptedEngine


# ---------------------------------------------------------------------------
# Config & rc store
# ---------------------------------------------------------------------------


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Directory standing in for the user's cwd (auto-cleanup)."""
    directory = tmp_path / "work"
    directory.mkdir()
    yield directory


@pytest.fixture
def test_config(tmp_path: Path, workdir: Path) -> Config:
    """Test-mode config with the rc file inside the temp directory."""
    return Config(cwd=workdir, test=True, rc_path=tmp_path / ".vuerc")


@pytest.fixture
def rc_store(test_config: Config) -> RcStore:
    return RcStore(test_config.rc_path)


@pytest.fixture(autouse=True)
def only_npm_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend only npm is installed so no test shells out to yarn / pnpm."""
    monkeypatch.setattr("vuecreate.package_manager.get_version", AsyncMock(return_value=None))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@pytest.fixture
def event_log() -> tuple[EventBus, list[LifecycleEvent]]:
    """An ``EventBus`` plus the list it records emitted events into."""
    received: list[LifecycleEvent] = []

    def listener(event: CreationEvent) -> None:
        received.append(event.event)

    return EventBus([listener]), received


# ---------------------------------------------------------------------------
# Mock Subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
