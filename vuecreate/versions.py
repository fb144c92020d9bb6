"""Discovery of the latest CLI release line used to pin first-party plugins."""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx
from packaging.version import InvalidVersion, Version

from .config import Config
from .options import RcStore
from .utils import print_warning

CLI_VERSION = "5.0.8"
CLI_PACKAGE = "@vue/cli"

_CHECK_INTERVAL = 24 * 60 * 60


@dataclass(frozen=True)
class VersionInfo:
    current: str
    latest: str
    latest_minor: str


def _parse(version: str) -> Version | None:
    try:
        return Version(version.strip())
    except InvalidVersion:
        return None


def latest_minor_of(version: str) -> str:
    """``5.0.8`` -> ``5.0.0``; prereleases are pinned exactly."""
    parsed = _parse(version)
    if parsed is None or parsed.is_prerelease:
        return version
    return f"{parsed.major}.{parsed.minor}.0"


async def fetch_latest_version(config: Config) -> str:
    url = f"{config.registry.rstrip('/')}/{CLI_PACKAGE.replace('/', '%2F')}/latest"
    async with httpx.AsyncClient(timeout=httpx.Timeout(config.remote_timeout)) as client:
        response = await client.get(url)
        response.raise_for_status()
        return str(response.json()["version"])


async def get_versions(config: Config, store: RcStore) -> VersionInfo:
    """Return the running, latest and latest-minor CLI versions.

    Registry lookups are cached in the rc file for a day. A failed lookup
    falls back to the cached (or running) version with a warning, since the
    result is only a pinning default. Test/debug runs never touch the network.
    """
    local = CLI_VERSION
    if config.is_test_or_debug:
        return VersionInfo(current=local, latest=local, latest_minor=local)

    saved = store.load_options()
    extra = saved.model_extra or {}
    cached = str(extra.get("latestVersion") or local)
    last_checked = float(extra.get("lastChecked") or 0)

    latest = cached
    if time.time() - last_checked > _CHECK_INTERVAL:
        try:
            latest = await fetch_latest_version(config)
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            print_warning(f"Could not check the latest {CLI_PACKAGE} version: {exc}")
        else:
            try:
                store.save_options({"latestVersion": latest, "lastChecked": time.time()})
            except OSError:
                pass  # cache only

    local_parsed, latest_parsed = _parse(local), _parse(latest)
    if (
        local_parsed is not None
        and not local_parsed.is_prerelease
        and latest_parsed is not None
        and local_parsed > latest_parsed
    ):
        latest = local

    return VersionInfo(current=local, latest=latest, latest_minor=latest_minor_of(latest))
