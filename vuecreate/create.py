"""Top-level ``create`` entry: name validation, target-directory handling, creation."""

from __future__ import annotations

from rich.console import Console

from .config import Config, CreateOptions
from .creator import CreationResult, Creator
from .directory import DirectoryAction, DirectoryConflictResolver, validate_project_name
from .events import EventBus
from .options import RcStore
from .plugins.registry import PluginRegistry
from .prompts.engine import PromptEngine, QuestionaryEngine
from .prompts.features import get_prompt_modules
from .utils import ExitRequested, console, exit_process, print_error

_err_console = Console(stderr=True)


async def _create(
    project_name: str,
    options: CreateOptions,
    config: Config,
    engine: PromptEngine,
    registry: PluginRegistry | None,
    events: EventBus | None,
) -> CreationResult | None:
    in_current = project_name == "."
    name = config.cwd.resolve().name if in_current else project_name
    target_dir = (config.cwd / (project_name or ".")).resolve()

    result = validate_project_name(name)
    if not result.valid_for_new_packages:
        _err_console.print(f'[red]Invalid project name: "{name}"[/red]')
        for err in result.errors:
            _err_console.print(f"[dim red]Error: {err}[/dim red]")
        for warning in result.warnings:
            _err_console.print(f"[dim red]Warning: {warning}[/dim red]")
        exit_process(1, config, f'Invalid project name: "{name}"')

    action = await DirectoryConflictResolver(config, engine).resolve(target_dir, options, in_current)
    if action is DirectoryAction.ABORT:
        return None

    creator = Creator(
        name,
        target_dir,
        get_prompt_modules(),
        config=config,
        engine=engine,
        store=RcStore(config.rc_path),
        registry=registry,
        events=events,
    )
    return await creator.create(options)


async def create(
    project_name: str,
    options: CreateOptions | None = None,
    config: Config | None = None,
    *,
    engine: PromptEngine | None = None,
    registry: PluginRegistry | None = None,
    events: EventBus | None = None,
) -> CreationResult | None:
    """Create a project named *project_name* (``"."`` creates it in place).

    Returns ``None`` when the user cancels at the directory-conflict prompt.
    Any failure is printed; outside test mode the process then exits with
    status 1, under test mode the exception propagates.
    """
    options = options or CreateOptions()
    config = config or Config.from_env()
    engine = engine or QuestionaryEngine()

    try:
        return await _create(project_name, options, config, engine, registry, events)
    except ExitRequested:
        raise
    except Exception as exc:
        # KeyboardInterrupt is a BaseException and still propagates.
        print_error(str(exc) or type(exc).__name__)
        if config.debug and exc.__cause__ is not None:
            console.print(f"[dim]caused by: {exc.__cause__!r}[/dim]")
        if config.test:
            raise
        exit_process(1, config, str(exc))
