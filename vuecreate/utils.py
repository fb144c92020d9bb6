"""Shared utility functions for vuecreate.

Provides async command execution, JSON / file-tree I/O, Rich-based console
helpers and the process-exit policy shared by every pipeline step.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

from rich.console import Console
from rich.pretty import Pretty

if TYPE_CHECKING:
    from vuecreate.config import Config

console = Console()

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CreatorError(Exception):
    """Base class for every error raised by vuecreate."""


class ExitRequested(CreatorError):
    """A deliberate hard stop, raised instead of exiting under test mode."""

    def __init__(self, code: int, message: str = "") -> None:
        self.code = code
        super().__init__(message or f"Process exit requested with status {code}")


class CommandError(CreatorError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


def exit_process(code: int, config: "Config", message: str = "") -> NoReturn:
    """Terminate the run with *code*.

    Under test mode the process is kept alive and ``ExitRequested`` is raised
    so a harness can inspect the outcome.
    """
    if config.test:
        raise ExitRequested(code, message)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, which is what installs want).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# JSON / file-tree I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that must contain an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def dump_json(data: Any) -> str:
    """Serialise *data* the way package descriptors are written (2-space indent)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


async def write_file_tree(directory: str | Path, files: Mapping[str, str]) -> None:
    """Write a ``{relative_path: content}`` mapping below *directory*.

    Parent directories are created as needed; writes run in a worker thread
    so the event loop is never blocked on disk.
    """
    root = Path(directory)

    def _write() -> None:
        for name, content in files.items():
            target = root / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)


def sort_object(
    obj: Mapping[str, Any],
    key_order: Iterable[str] = (),
    dont_sort_by_unicode: bool = False,
) -> dict[str, Any]:
    """Return a copy of *obj* with the keys in *key_order* moved to the front.

    The remaining keys are sorted alphabetically unless
    *dont_sort_by_unicode* is set, in which case their insertion order is kept.
    """
    result: dict[str, Any] = {}
    for key in key_order:
        if key in obj:
            result[key] = obj[key]
    rest = [key for key in obj if key not in result]
    if not dont_sort_by_unicode:
        rest.sort()
    for key in rest:
        result[key] = obj[key]
    return result


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def log(message: str = "") -> None:
    console.print(message)


def log_debug(namespace: str, value: Any, config: "Config") -> None:
    """Pretty-print *value* under *namespace* when debug output is on."""
    if not config.debug:
        return
    console.print(f"[dim]{namespace}[/dim]")
    console.print(Pretty(value))


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]ERROR[/bold red] {message}")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]WARN[/bold yellow] {message}")


def clear_console(config: "Config", title: str | None = None) -> None:
    """Clear the terminal, unless running under test/debug where output must survive."""
    if config.is_test_or_debug or not console.is_terminal:
        return
    console.clear()
    if title:
        console.print(title)
