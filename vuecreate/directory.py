"""Project-name validation and handling of an existing target directory."""

from __future__ import annotations

import asyncio
import re
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import quote

from .config import Config, CreateOptions
from .prompts.engine import Choice, PromptEngine, Question
from .utils import clear_console, log

MAX_NAME_LENGTH = 214

RESERVED_NAMES = ("node_modules", "favicon.ico")

NODE_BUILTIN_MODULES = frozenset(
    {
        "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
        "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
        "events", "fs", "http", "http2", "https", "inspector", "module", "net",
        "os", "path", "perf_hooks", "process", "punycode", "querystring",
        "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
        "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
        "worker_threads", "zlib",
    }
)

_SCOPED_NAME_RE = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")
_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")


def _url_safe(value: str) -> bool:
    return quote(value, safe="-_.!~*'()") == value


@dataclass
class NameValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid_for_new_packages(self) -> bool:
        return not self.errors and not self.warnings


def validate_project_name(name: str) -> NameValidation:
    """Check *name* against the npm package naming rules.

    Errors make a name unusable altogether; warnings only rule it out for
    new packages. Both reject a project name.
    """
    result = NameValidation()

    if not name:
        result.errors.append("name length must be greater than zero")
        return result
    if name.startswith("."):
        result.errors.append("name cannot start with a period")
    if name.startswith("_"):
        result.errors.append("name cannot start with an underscore")
    if name.strip() != name:
        result.errors.append("name cannot contain leading or trailing spaces")
    for reserved in RESERVED_NAMES:
        if name.lower() == reserved:
            result.errors.append(f"{reserved} is a blacklisted name")

    if name in NODE_BUILTIN_MODULES:
        result.warnings.append(f"{name} is a core module name")
    if len(name) > MAX_NAME_LENGTH:
        result.warnings.append(f"name can no longer contain more than {MAX_NAME_LENGTH} characters")
    if name.lower() != name:
        result.warnings.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS_RE.search(name.split("/")[-1]):
        result.warnings.append("name can no longer contain special characters (\"~'!()*\")")

    if not _url_safe(name):
        match = _SCOPED_NAME_RE.match(name)
        scoped_ok = (
            match is not None
            and match.group(1) is not None
            and _url_safe(match.group(1))
            and _url_safe(match.group(2))
        )
        if not scoped_ok:
            result.errors.append("name can only contain URL-friendly characters")

    return result


class DirectoryAction(str, Enum):
    PROCEED_CLEAN = "proceed-clean"
    PROCEED_MERGE = "proceed-merge"
    ABORT = "abort"


async def remove_directory(path: Path) -> None:
    await asyncio.to_thread(shutil.rmtree, path)


class DirectoryConflictResolver:
    """Decides what happens when the target directory already exists.

    Nothing on disk is touched unless the outcome is ``PROCEED_CLEAN``.
    """

    def __init__(self, config: Config, engine: PromptEngine) -> None:
        self.config = config
        self.engine = engine

    async def resolve(
        self,
        target_dir: str | Path,
        options: CreateOptions,
        in_current: bool = False,
    ) -> DirectoryAction:
        target = Path(target_dir)
        if not target.exists() or options.merge:
            return DirectoryAction.PROCEED_MERGE

        if options.force:
            await remove_directory(target)
            return DirectoryAction.PROCEED_CLEAN

        clear_console(self.config)

        if in_current:
            answers = await self.engine.prompt(
                [Question(name="ok", type="confirm", message="Generate project in current directory?")]
            )
            return DirectoryAction.PROCEED_MERGE if answers.get("ok") else DirectoryAction.ABORT

        answers = await self.engine.prompt(
            [
                Question(
                    name="action",
                    type="list",
                    message=f"Target directory {target} already exists. Pick an action:",
                    choices=[
                        Choice(name="Overwrite", value="overwrite"),
                        Choice(name="Merge", value="merge"),
                        Choice(name="Cancel", value=False),
                    ],
                )
            ]
        )
        action = answers.get("action")
        if not action:
            return DirectoryAction.ABORT
        if action == "overwrite":
            log(f"\nRemoving [cyan]{target}[/cyan]...")
            await remove_directory(target)
            return DirectoryAction.PROCEED_CLEAN
        return DirectoryAction.PROCEED_MERGE
