"""Loading presets from the local filesystem and from remote repositories.

A preset source is either a JSON file or a directory holding ``preset.json``.
A directory may also ship ``generator.py`` and/or ``prompts.py``; in that
case the directory itself is added to the preset as a plugin marked with
``_isPreset`` so its generator runs and its prompts are asked.
"""

from __future__ import annotations

import asyncio
import io
import json
import shutil
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from ..git import run_git
from ..utils import CreatorError, load_json

PRESET_FILE = "preset.json"
PRESET_GENERATOR_FILE = "generator.py"
PRESET_PROMPTS_FILE = "prompts.py"


class RemotePresetError(CreatorError):
    """Raised when a remote preset cannot be fetched or read."""

    def __init__(self, reference: str, message: str = "") -> None:
        self.reference = reference
        super().__init__(message or f"Failed fetching remote preset {reference}")


@dataclass(frozen=True)
class RemoteReference:
    owner: str
    repo: str
    subpath: str = ""
    ref: str = "HEAD"

    @classmethod
    def parse(cls, reference: str) -> "RemoteReference":
        """Parse ``owner/repo[/subpath][#ref]`` (an optional ``github:`` prefix is accepted)."""
        body, _, ref = reference.partition("#")
        if body.startswith("github:"):
            body = body[len("github:"):]
        parts = [part for part in body.split("/") if part]
        if len(parts) < 2:
            raise RemotePresetError(reference, f"Invalid remote preset reference: {reference}")
        return cls(owner=parts[0], repo=parts[1], subpath="/".join(parts[2:]), ref=ref or "HEAD")

    @property
    def clone_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}.git"

    @property
    def tarball_url(self) -> str:
        return f"https://codeload.github.com/{self.owner}/{self.repo}/tar.gz/{self.ref}"


def preset_cache_dir(remote: RemoteReference) -> Path:
    """Fixed checkout location for *remote*, reused (and cleared) on every fetch."""
    return Path(tempfile.gettempdir()) / "vuecreate-presets" / f"{remote.owner}__{remote.repo}"


def is_local_reference(name: str) -> bool:
    return name.endswith(".json") or name.startswith(".") or Path(name).is_absolute()


async def load_local_preset(path: str | Path) -> dict[str, Any]:
    """Read a preset from a JSON file or a preset directory.

    Raises:
        FileNotFoundError: If the path (or ``preset.json`` inside it) is missing.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    source = Path(path)
    if source.is_dir():
        preset = await asyncio.to_thread(load_json, source / PRESET_FILE)
        has_generator = (source / PRESET_GENERATOR_FILE).exists()
        has_prompts = (source / PRESET_PROMPTS_FILE).exists()
        if has_generator or has_prompts:
            plugins = preset.setdefault("plugins", {})
            if isinstance(plugins, dict):
                plugins[str(source.resolve())] = {"_isPreset": True, "prompts": has_prompts}
        return preset
    return await asyncio.to_thread(load_json, source)


def _extract_tarball(data: bytes, destination: Path) -> Path:
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
        archive.extractall(destination, filter="data")
    roots = [child for child in destination.iterdir() if child.is_dir()]
    if len(roots) != 1:
        raise ValueError("Unexpected archive layout")
    return roots[0]


async def load_remote_preset(
    reference: str,
    clone: bool = False,
    timeout: float = 30.0,
) -> dict[str, Any]:
    """Download a remote preset repository and read it like a local directory.

    With *clone* the repository is fetched with a shallow ``git clone``
    (works for private repositories with configured credentials); otherwise
    the GitHub tarball is downloaded over HTTPS. The checkout lives in
    :func:`preset_cache_dir` because preset generators run later in the
    pipeline; the directory is emptied before each fetch and removed again
    if the fetch fails.
    """
    remote = RemoteReference.parse(reference)
    workdir = preset_cache_dir(remote)
    await asyncio.to_thread(shutil.rmtree, workdir, ignore_errors=True)
    workdir.mkdir(parents=True)

    try:
        if clone:
            checkout = workdir / remote.repo
            args = ["clone", "--depth", "1"]
            if remote.ref != "HEAD":
                args += ["--branch", remote.ref]
            await run_git(*args, remote.clone_url, str(checkout), timeout=timeout * 4)
        else:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(timeout), follow_redirects=True
            ) as client:
                response = await client.get(remote.tarball_url)
                response.raise_for_status()
            checkout = await asyncio.to_thread(_extract_tarball, response.content, workdir)

        preset_dir = checkout / remote.subpath if remote.subpath else checkout
        return await load_local_preset(preset_dir)
    except Exception:
        await asyncio.to_thread(shutil.rmtree, workdir, ignore_errors=True)
        raise


def parse_inline_preset(text: str) -> dict[str, Any]:
    """Parse an inline JSON preset.

    Raises:
        ValueError: If *text* is not JSON or not a JSON object.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Inline preset must be a JSON object")
    return data
