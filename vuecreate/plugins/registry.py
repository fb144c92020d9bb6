"""Plugin capability registry.

Maps plugin ids to a ``PluginCapability`` pair: the generator entry point
(what ``<id>/generator`` provides) and the optional follow-up prompts (what
``<id>/prompts`` provides). Capabilities come from three places, checked in
order:

* capabilities registered explicitly (the built-in plugins);
* preset directories: an id that is a local directory containing
  ``generator.py`` / ``prompts.py``;
* installed distributions exposing the ``vuecreate.plugins`` entry-point group.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from importlib.metadata import entry_points
from pathlib import Path
from types import ModuleType
from typing import Any

from ..utils import CreatorError

ENTRY_POINT_GROUP = "vuecreate.plugins"

GeneratorFn = Callable[..., Any]


class PluginLoadError(CreatorError):
    """Raised when a plugin module exists but cannot be loaded."""


@dataclass(frozen=True)
class PluginCapability:
    generate: GeneratorFn | None = None
    # A question list, a callable (manifest, engine) -> questions, or an
    # object exposing get_prompts(manifest, engine).
    prompts: Any = None


def is_official_plugin(plugin_id: str) -> bool:
    return plugin_id.startswith("@vue/cli-plugin-")


def _load_module(path: Path, name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Cannot load plugin module {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise PluginLoadError(f"Failed to load plugin module {path}: {exc}") from exc
    return module


def load_directory_capability(directory: Path) -> PluginCapability | None:
    """Load ``generator.py`` / ``prompts.py`` from a preset directory.

    ``generator.py`` must define ``generate(api, options, root_options)``.
    ``prompts.py`` may define ``get_prompts(manifest, engine)`` or a
    ``prompts`` list.
    """
    generator_file = directory / "generator.py"
    prompts_file = directory / "prompts.py"
    if not generator_file.exists() and not prompts_file.exists():
        return None

    slug = "".join(ch if ch.isalnum() else "_" for ch in directory.name)
    generate = None
    prompts = None
    if generator_file.exists():
        generate = getattr(_load_module(generator_file, f"vuecreate_preset_{slug}_generator"), "generate", None)
    if prompts_file.exists():
        module = _load_module(prompts_file, f"vuecreate_preset_{slug}_prompts")
        prompts = module if hasattr(module, "get_prompts") else getattr(module, "prompts", None)
    return PluginCapability(generate=generate, prompts=prompts)


def _as_capability(obj: Any) -> PluginCapability:
    if isinstance(obj, PluginCapability):
        return obj
    return PluginCapability(
        generate=getattr(obj, "generate", None),
        prompts=getattr(obj, "prompts", None),
    )


class PluginRegistry:
    """Resolves plugin ids to their capabilities.

    Lookups are cached, including misses, so a plugin is discovered at most
    once per registry.
    """

    def __init__(
        self,
        capabilities: Mapping[str, PluginCapability] | None = None,
        *,
        discover_entry_points: bool = True,
    ) -> None:
        self._capabilities: dict[str, PluginCapability] = dict(capabilities or {})
        self._misses: set[str] = set()
        self._discover_entry_points = discover_entry_points

    @classmethod
    def with_builtins(cls, **kwargs: Any) -> "PluginRegistry":
        from .builtin import BUILTIN_PLUGINS

        return cls(BUILTIN_PLUGINS, **kwargs)

    def register(self, plugin_id: str, capability: PluginCapability) -> None:
        self._capabilities[plugin_id] = capability
        self._misses.discard(plugin_id)

    def __contains__(self, plugin_id: str) -> bool:
        return self.resolve(plugin_id) is not None

    def resolve(self, plugin_id: str) -> PluginCapability | None:
        if plugin_id in self._capabilities:
            return self._capabilities[plugin_id]
        if plugin_id in self._misses:
            return None

        capability = None
        candidate = Path(plugin_id)
        if candidate.is_absolute() and candidate.is_dir():
            capability = load_directory_capability(candidate)
        if capability is None and self._discover_entry_points:
            capability = self._from_entry_points(plugin_id)

        if capability is None:
            self._misses.add(plugin_id)
        else:
            self._capabilities[plugin_id] = capability
        return capability

    def resolve_generator(self, plugin_id: str) -> GeneratorFn | None:
        capability = self.resolve(plugin_id)
        return capability.generate if capability else None

    def resolve_prompts(self, plugin_id: str) -> Any:
        capability = self.resolve(plugin_id)
        return capability.prompts if capability else None

    @staticmethod
    def _from_entry_points(plugin_id: str) -> PluginCapability | None:
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name == plugin_id:
                return _as_capability(ep.load())
        return None
