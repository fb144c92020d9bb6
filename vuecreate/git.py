"""Git helpers for repository initialisation and the initial commit."""

import asyncio
import shutil
from functools import lru_cache
from pathlib import Path

from .utils import CreatorError


class GitError(CreatorError):
    """Raised when a git operation fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


async def run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 60.0,
) -> tuple[str, str]:
    """Run a git command asynchronously and return (stdout, stderr).

    Raises GitError if the command exits with a non-zero code.
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        raise GitError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            command=cmd_str,
        )

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        raise GitError(
            f"Git command failed (exit {process.returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )

    return stdout, stderr


@lru_cache(maxsize=1)
def has_git() -> bool:
    """Return ``True`` if a git executable is on PATH."""
    return shutil.which("git") is not None


def has_project_git(path: str | Path) -> bool:
    """Return ``True`` if *path* (or one of its parents) is inside a git work tree.

    The target directory may not exist yet, so the nearest existing ancestor
    is inspected instead of shelling out.
    """
    current = Path(path).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return True
    return False


async def init_repository(path: str | Path) -> None:
    await run_git("init", cwd=path)


async def commit_all(
    path: str | Path,
    message: str,
    *,
    test_identity: bool = False,
) -> None:
    """Stage everything below *path* and create a commit.

    With *test_identity* a throwaway local identity is configured first so the
    commit does not depend on the user's global git configuration.
    """
    await run_git("add", "-A", cwd=path)
    if test_identity:
        await run_git("config", "user.name", "test", cwd=path)
        await run_git("config", "user.email", "test@test.com", cwd=path)
        await run_git("config", "commit.gpgSign", "false", cwd=path)
    await run_git("commit", "-m", message, "--no-verify", cwd=path)
