"""Creation pipeline.

``Creator.create`` turns a preset into a populated, installed and
version-controlled project directory. The steps run strictly in order:

1.  preset acquisition (``PresetResolver``)
2.  legacy field expansion (``normalize_preset``)
3.  package-manager selection
4.  ``creating``
5.  version discovery
6.  ``package.json`` synthesis (first filesystem write)
7.  ``.npmrc`` for pnpm
8.  ``git-init``
9.  ``plugins-install``
10. ``invoking-generators``
11. ``deps-install``
12. ``completion-hooks``
13. README fallback
14. initial commit
15. summary and ``done``
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import Config, CreateOptions
from .events import CreationEvent, EventBus, LifecycleEvent
from .generator import Generator, Hook
from .git import GitError, commit_all, has_git, has_project_git, init_repository
from .options import CORE_SERVICE_ID, ROUTER_PLUGIN_ID, VUEX_PLUGIN_ID, Preset, RcStore
from .package_manager import (
    PackageManager,
    available_alternatives,
    pnpm_config,
    resolve_package_manager,
    run_script_command,
)
from .plugins.expander import PluginDescriptor, PluginExpander
from .plugins.registry import PluginRegistry, is_official_plugin
from .preset.resolver import PresetResolver
from .prompts.composer import PromptComposer, PromptModule
from .prompts.engine import PromptEngine
from .readme import generate_readme
from .utils import (
    clear_console,
    dump_json,
    load_json,
    log,
    log_debug,
    print_success,
    print_warning,
    write_file_tree,
)
from .versions import get_versions

PINNED_PACKAGES = (CORE_SERVICE_ID, "@vue/babel-preset-env")


@dataclass
class CreationResult:
    name: str
    context: Path
    package_manager: str
    preset: Preset
    plugins: list[PluginDescriptor]
    git_initialized: bool = False
    git_commit_failed: bool = False
    events: list[LifecycleEvent] = field(default_factory=list)


def normalize_preset(preset: Preset, name: str, bare: bool = False) -> Preset:
    """Return a copy of *preset* with the core service and legacy fields expanded.

    * ``@vue/cli-service`` receives the whole preset body plus ``projectName``.
    * ``bare`` is forwarded to the service.
    * ``router`` / ``vuex`` add their plugins unless the preset already
      lists them; ``routerHistoryMode`` turns on ``historyMode``.
    """
    result = preset.model_copy(deep=True)
    body = result.to_dict()

    service_options: dict[str, Any] = {"projectName": name, **body}
    if bare:
        service_options["bare"] = True
    result.plugins[CORE_SERVICE_ID] = service_options

    if result.router and ROUTER_PLUGIN_ID not in result.plugins:
        result.plugins[ROUTER_PLUGIN_ID] = {"historyMode": True} if result.router_history_mode else {}
    if result.vuex and VUEX_PLUGIN_ID not in result.plugins:
        result.plugins[VUEX_PLUGIN_ID] = {}
    return result


def build_manifest(
    name: str,
    plugins: Mapping[str, Mapping[str, Any]],
    latest_minor: str,
    existing: Mapping[str, Any] | None = None,
    is_test_or_debug: bool = False,
) -> dict[str, Any]:
    """Synthesize the initial ``package.json``.

    Fields of an *existing* manifest override the generated ones. Every
    plugin lands in ``devDependencies`` except preset-local ones
    (``_isPreset``); an explicit ``version`` option is kept as is.
    """
    pkg: dict[str, Any] = {
        "name": name,
        "version": "0.1.0",
        "private": True,
        "devDependencies": {},
        **(existing or {}),
    }
    dev_dependencies = dict(pkg.get("devDependencies") or {})
    for plugin_id, options in plugins.items():
        if options.get("_isPreset"):
            continue
        version = options.get("version")
        if not version:
            if is_official_plugin(plugin_id) or plugin_id in PINNED_PACKAGES:
                version = "latest" if is_test_or_debug else f"~{latest_minor}"
            else:
                version = "latest"
        dev_dependencies[plugin_id] = version
    pkg["devDependencies"] = dev_dependencies
    return pkg


def read_existing_manifest(context: Path) -> dict[str, Any]:
    path = context / "package.json"
    if not path.is_file():
        return {}
    return load_json(path)


def should_init_git(options: CreateOptions, context: str | Path) -> bool:
    if not has_git():
        return False
    if options.force_git:
        return True
    if options.git is False or options.git == "false":
        return False
    return not has_project_git(context)


async def _run_hooks(hooks: Iterable[Hook]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result


class Creator:
    """Orchestrates one project creation.

    Attributes:
        name: Project (package) name.
        context: Target directory.
        events: Bus receiving the lifecycle events.
        composer: Prompt composer, built from the prompt modules when creation starts.
        resolver: Preset resolver sharing the composer and prompt engine.
        expander: Plugin expander for the generation step.
    """

    def __init__(
        self,
        name: str,
        context: str | Path,
        prompt_modules: Iterable[PromptModule],
        *,
        config: Config,
        engine: PromptEngine,
        store: RcStore | None = None,
        registry: PluginRegistry | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.name = name
        self.context = Path(context)
        self.config = config
        self.engine = engine
        self.store = store or RcStore(config.rc_path)
        self.registry = registry or PluginRegistry.with_builtins()
        self.events = events or EventBus()

        self.prompt_modules = list(prompt_modules)
        self.composer: PromptComposer | None = None
        self.resolver: PresetResolver | None = None
        self.expander = PluginExpander(self.registry, engine, config)

        self.after_invoke_cbs: list[Hook] = []
        self.after_any_invoke_cbs: list[Hook] = []

    async def create(
        self,
        options: CreateOptions | None = None,
        preset: Preset | dict[str, Any] | None = None,
    ) -> CreationResult:
        options = options or CreateOptions()
        emitted: list[LifecycleEvent] = []

        def record(event: CreationEvent) -> None:
            emitted.append(event.event)

        unsubscribe = self.events.subscribe(record)
        try:
            return await self._create(options, preset, emitted)
        finally:
            unsubscribe()

    async def _build_resolver(self) -> PresetResolver:
        """Compose the prompts once installed package managers are known."""
        saved = self.store.load_options()
        alternatives = [] if saved.package_manager else await available_alternatives()
        self.composer = PromptComposer.from_modules(
            self.prompt_modules, self.store.get_presets(), alternatives
        )
        self.resolver = PresetResolver(self.config, self.store, self.composer, self.engine, self.events)
        return self.resolver

    async def _create(
        self,
        options: CreateOptions,
        preset: Preset | dict[str, Any] | None,
        emitted: list[LifecycleEvent],
    ) -> CreationResult:
        config = self.config
        resolver = await self._build_resolver()
        resolved = await resolver.resolve(options, explicit_preset=preset)
        normalized = normalize_preset(resolved, self.name, bare=options.bare)
        log_debug("vuecreate:preset", normalized.to_dict(), config)

        package_manager = await resolve_package_manager(
            options.package_manager, self.store.load_options().package_manager
        )
        pm = PackageManager(self.context, package_manager, config)

        clear_console(config)
        log(f"Creating project in [yellow]{self.context}[/yellow].")
        self.events.emit(LifecycleEvent.CREATING)

        versions = await get_versions(config, self.store)
        pkg = build_manifest(
            self.name,
            normalized.plugins,
            versions.latest_minor,
            existing=read_existing_manifest(self.context),
            is_test_or_debug=config.is_test_or_debug,
        )
        await write_file_tree(self.context, {"package.json": dump_json(pkg)})

        if package_manager == "pnpm":
            await write_file_tree(self.context, {".npmrc": await pnpm_config()})

        git_initialized = should_init_git(options, self.context)
        if git_initialized:
            log("Initializing git repository...")
            self.events.emit(LifecycleEvent.GIT_INIT)
            await init_repository(self.context)

        log("Installing CLI plugins. This might take a while...")
        log()
        self.events.emit(LifecycleEvent.PLUGINS_INSTALL)
        if config.skip_plugin_install:
            log_debug("vuecreate:install", "dev project setup, skipping plugin install", config)
        else:
            await pm.install()

        log("Invoking generators...")
        self.events.emit(LifecycleEvent.INVOKING_GENERATORS)
        plugins = await self.expander.expand(normalized.plugins, pkg)
        generator = Generator(
            self.context,
            pkg=pkg,
            plugins=plugins,
            after_invoke_cbs=self.after_invoke_cbs,
            after_any_invoke_cbs=self.after_any_invoke_cbs,
        )
        await generator.generate(extract_config_files=normalized.use_config_files)

        log("Installing additional dependencies...")
        self.events.emit(LifecycleEvent.DEPS_INSTALL)
        log()
        if not config.skip_deps_install:
            await pm.install()

        log("Running completion hooks...")
        self.events.emit(LifecycleEvent.COMPLETION_HOOKS)
        await _run_hooks(self.after_invoke_cbs)
        await _run_hooks(self.after_any_invoke_cbs)

        if "README.md" not in generator.files:
            log()
            log("Generating README.md...")
            await write_file_tree(
                self.context, {"README.md": generate_readme(generator.pkg, package_manager)}
            )

        git_commit_failed = False
        if git_initialized:
            message = options.git if isinstance(options.git, str) else "init"
            try:
                await commit_all(self.context, message, test_identity=config.is_test_or_debug)
            except GitError as exc:
                log_debug("vuecreate:git", exc.stderr, config)
                git_commit_failed = True

        log()
        print_success(f"Successfully created project [yellow]{self.name}[/yellow].")
        if not options.skip_get_started:
            lines = ["Get started with the following commands:", ""]
            if self.context.resolve() != config.cwd.resolve():
                lines.append(f" [dim]$[/dim] [cyan]cd {self.name}[/cyan]")
            lines.append(f" [dim]$[/dim] [cyan]{run_script_command(package_manager, 'serve')}[/cyan]")
            log("\n".join(lines))
        log()
        self.events.emit(LifecycleEvent.DONE)

        if git_commit_failed:
            print_warning(
                "Skipped git commit due to missing username and email in git config, "
                "or failed to sign commit.\n"
                "You will need to perform the initial commit yourself.\n"
            )

        generator.print_exit_logs()

        return CreationResult(
            name=self.name,
            context=self.context,
            package_manager=package_manager,
            preset=normalized,
            plugins=plugins,
            git_initialized=git_initialized,
            git_commit_failed=git_commit_failed,
            events=list(emitted),
        )
