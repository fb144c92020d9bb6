"""Expansion of a preset's plugin map into invocable plugin descriptors."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..config import Config
from ..options import CORE_SERVICE_ID
from ..prompts.engine import PromptEngine, Question
from ..utils import log, log_debug, sort_object
from .registry import PluginRegistry


@dataclass
class PluginDescriptor:
    id: str
    apply: Callable[..., Any]
    options: dict[str, Any] = field(default_factory=dict)


def _noop_generator(api: Any, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    return None


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _collect_questions(
    capability: Any,
    manifest: Mapping[str, Any],
    engine: PromptEngine,
) -> list[Question]:
    """Normalise a prompts capability into a list of questions.

    Accepts a plain question sequence, a callable ``(manifest, engine)``
    or an object exposing ``get_prompts(manifest, engine)``; the callables
    may be coroutines.
    """
    if hasattr(capability, "get_prompts"):
        questions = await _maybe_await(capability.get_prompts(manifest, engine))
    elif callable(capability):
        questions = await _maybe_await(capability(manifest, engine))
    else:
        questions = capability
    return list(questions or [])


class PluginExpander:
    """Resolves plugin generators and runs per-plugin follow-up prompts.

    Attributes:
        registry: Where plugin capabilities are looked up.
        engine: Prompt engine used for the follow-up sessions.
        config: Run configuration (debug output).
    """

    def __init__(self, registry: PluginRegistry, engine: PromptEngine, config: Config) -> None:
        self.registry = registry
        self.engine = engine
        self.config = config

    async def expand(
        self,
        raw_plugins: Mapping[str, Mapping[str, Any]],
        manifest: Mapping[str, Any],
    ) -> list[PluginDescriptor]:
        """Turn ``{id: options}`` into ordered descriptors, core service first.

        Every id yields exactly one descriptor. A plugin without a generator
        gets a no-op ``apply``; a plugin whose options request ``prompts`` has
        its options replaced by the answers of a fresh prompt session.
        """
        ordered = sort_object(raw_plugins, [CORE_SERVICE_ID], dont_sort_by_unicode=True)
        descriptors: list[PluginDescriptor] = []

        for plugin_id, raw_options in ordered.items():
            options = dict(raw_options or {})
            apply = self.registry.resolve_generator(plugin_id) or _noop_generator

            if options.get("prompts"):
                options = await self._prompt_options(plugin_id, options, manifest)

            descriptors.append(PluginDescriptor(id=plugin_id, apply=apply, options=options))

        log_debug("vuecreate:plugins", [d.id for d in descriptors], self.config)
        return descriptors

    async def _prompt_options(
        self,
        plugin_id: str,
        options: dict[str, Any],
        manifest: Mapping[str, Any],
    ) -> dict[str, Any]:
        capability = self.registry.resolve_prompts(plugin_id)
        if capability is None:
            return options

        questions: Sequence[Question] = await _collect_questions(capability, manifest, self.engine)
        if options.get("_isPreset"):
            log("\n[bold]Preset options:[/bold]")
        else:
            log(f"\n[bold cyan]{plugin_id}[/bold cyan]")
        return dict(await self.engine.prompt(questions))
