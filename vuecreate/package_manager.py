"""Package-manager detection, selection and installs.

Only the surface the creation pipeline needs: which managers are available,
which one a run should use, and ``install()`` in the project directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from packaging.version import InvalidVersion, Version

from .config import Config
from .options import PACKAGE_MANAGERS
from .utils import CommandError, run_command

_versions: dict[str, Version | None] = {}


async def _query_version(binary: str) -> Version | None:
    if shutil.which(binary) is None:
        return None
    try:
        returncode, stdout, _ = await run_command([binary, "--version"], timeout=10)
    except OSError:
        return None
    if returncode != 0:
        return None
    try:
        return Version(stdout.strip())
    except InvalidVersion:
        return None


async def get_version(binary: str) -> Version | None:
    """Installed version of *binary*, or ``None`` if unavailable.

    Looked up once per process.
    """
    if binary not in _versions:
        _versions[binary] = await _query_version(binary)
    return _versions[binary]


async def has_yarn() -> bool:
    return await get_version("yarn") is not None


async def has_pnpm_version_or_later(version: str) -> bool:
    installed = await get_version("pnpm")
    if installed is None:
        return False
    return installed >= Version(version)


async def has_pnpm3_or_later() -> bool:
    return await has_pnpm_version_or_later("3.0.0")


async def available_alternatives() -> list[str]:
    """Non-default managers that are installed, in preference order."""
    found = []
    if await has_yarn():
        found.append("yarn")
    if await has_pnpm3_or_later():
        found.append("pnpm")
    return found


async def resolve_package_manager(cli_choice: str | None, saved: str | None) -> str:
    """Pick the manager for a run: CLI choice, saved preference, yarn, pnpm, npm."""
    for candidate in (cli_choice, saved):
        if candidate:
            if candidate not in PACKAGE_MANAGERS:
                raise ValueError(
                    f"Unknown package manager '{candidate}'. "
                    f"Expected one of: {', '.join(PACKAGE_MANAGERS)}"
                )
            return candidate
    alternatives = await available_alternatives()
    return alternatives[0] if alternatives else "npm"


async def pnpm_config() -> str:
    """Contents of the ``.npmrc`` that keeps pnpm's node_modules layout flat."""
    if await has_pnpm_version_or_later("4.0.0"):
        return "shamefully-hoist=true\n"
    return "shamefully-flatten=true\n"


def run_script_command(package_manager: str, script: str) -> str:
    if package_manager == "yarn":
        return f"yarn {script}"
    if package_manager == "pnpm":
        return f"pnpm run {script}"
    return f"npm run {script}"


class PackageManager:
    """Runs package-manager commands inside a project directory."""

    def __init__(self, context: str | Path, package_manager: str, config: Config) -> None:
        if package_manager not in PACKAGE_MANAGERS:
            raise ValueError(f"Unknown package manager '{package_manager}'")
        self.context = Path(context)
        self.bin = package_manager
        self.config = config

    async def install(self) -> None:
        """Install every dependency declared in ``package.json``.

        Output is streamed straight to the terminal.

        Raises:
            CommandError: If the install exits with a non-zero status.
        """
        cmd = [self.bin, "install"]
        if self.bin == "npm":
            cmd += ["--loglevel", "error"]
        if self.config.registry:
            cmd += ["--registry", self.config.registry]

        returncode, _, stderr = await run_command(
            cmd,
            cwd=self.context,
            timeout=self.config.install_timeout,
            capture=False,
        )
        if returncode != 0:
            raise CommandError(
                f"{self.bin} install failed (exit {returncode})",
                command=" ".join(cmd),
                stderr=stderr,
            )
