"""Preset resolution.

Turns the CLI inputs into one validated ``Preset``. Sources are tried in a
fixed order and the first match wins:

1. an explicit preset handed to :meth:`PresetResolver.resolve`
2. ``--preset <name>``: saved / built-in name, local path or remote reference
3. ``--default``: the built-in default preset
4. ``--inlinePreset <json>``
5. an interactive session composed from the prompt modules
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from rich.markup import escape

from ..config import Config, CreateOptions
from ..events import EventBus, LifecycleEvent
from ..options import DEFAULT_PRESET_NAME, Preset, PresetValidationError, RcStore, validate_preset
from ..prompts.composer import MANUAL_PRESET, PromptComposer
from ..prompts.engine import Answers, PromptEngine
from ..utils import clear_console, exit_process, log, log_debug, print_error, print_success, print_warning
from .loaders import (
    RemotePresetError,
    is_local_reference,
    load_local_preset,
    load_remote_preset,
    parse_inline_preset,
)


class PresetResolver:
    """Obtains a normalised preset from any supported source.

    Attributes:
        config: Run configuration (test mode decides how fatal errors exit).
        store: The user-level rc store holding saved presets and preferences.
        composer: Prompt composer used for the interactive session.
        engine: Prompt engine rendering the interactive session.
        events: Bus receiving ``fetch-remote-preset``.
    """

    def __init__(
        self,
        config: Config,
        store: RcStore,
        composer: PromptComposer,
        engine: PromptEngine,
        events: EventBus | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.composer = composer
        self.engine = engine
        self.events = events or EventBus()

    async def resolve(
        self,
        options: CreateOptions,
        explicit_preset: Preset | dict[str, Any] | None = None,
    ) -> Preset:
        if explicit_preset is not None:
            return self._validated(explicit_preset)
        if options.preset:
            return await self.resolve_by_name(options.preset, clone=options.clone)
        if options.default:
            return self._validated(self.store.get_presets()[DEFAULT_PRESET_NAME])
        if options.inline_preset:
            try:
                raw = parse_inline_preset(options.inline_preset)
            except ValueError:
                print_error(f"CLI inline preset is not valid JSON: {options.inline_preset}")
                exit_process(1, self.config, "Inline preset is not valid JSON")
            return self._validated(raw)
        return await self.prompt_and_resolve()

    async def resolve_by_name(self, name: str, clone: bool = False) -> Preset:
        """Look a preset up by saved name, path or remote reference.

        A name that matches nothing is a hard stop: the available presets are
        listed and the process exits with status 1.
        """
        presets = self.store.get_presets()
        preset: Preset | dict[str, Any] | None = None

        if name in presets:
            preset = presets[name]
        elif name == "default":
            preset = presets[DEFAULT_PRESET_NAME]
        elif is_local_reference(name):
            preset = await load_local_preset(Path(name).resolve())
        elif "/" in name:
            log(f"Fetching remote preset [cyan]{name}[/cyan]...")
            self.events.emit(LifecycleEvent.FETCH_REMOTE_PRESET)
            try:
                preset = await load_remote_preset(
                    name, clone=clone, timeout=self.config.remote_timeout
                )
            except Exception as exc:
                print_error(f"Failed fetching remote preset [cyan]{name}[/cyan]: {escape(str(exc))}")
                raise RemotePresetError(name) from exc

        if preset is None:
            print_error(f'preset "{name}" not found.')
            saved = list(self.store.load_options().presets)
            if saved:
                log()
                log("available presets:\n" + "\n".join(saved))
            else:
                log("you don't seem to have any saved preset.")
                log("run vuecreate in manual mode to create a preset.")
            exit_process(1, self.config, f'preset "{name}" not found')

        return self._validated(preset)

    async def prompt_and_resolve(self, answers: Answers | None = None) -> Preset:
        """Run the interactive session (unless *answers* are supplied) and build a preset."""
        if answers is None:
            clear_console(self.config)
            answers = await self.engine.prompt(self.composer.compose_final())
        log_debug("vuecreate:answers", answers, self.config)

        if answers.get("packageManager"):
            self._save_package_manager(answers["packageManager"])

        if answers.get("preset") and answers["preset"] != MANUAL_PRESET:
            return await self.resolve_by_name(answers["preset"])

        preset = Preset(useConfigFiles=answers.get("useConfigFiles") == "files", plugins={})
        answers = {**answers, "features": answers.get("features") or []}
        for callback in self.composer.completion_callbacks:
            callback(answers, preset)

        preset = self._validated(preset)

        if answers.get("save") and answers.get("saveName"):
            self._save_preset(answers["saveName"], preset)

        log_debug("vuecreate:preset", preset.to_dict(), self.config)
        return preset

    # ------------------------------------------------------------------

    def _validated(self, preset: Preset | dict[str, Any]) -> Preset:
        try:
            return validate_preset(preset)
        except PresetValidationError as exc:
            print_error("Preset validation failed:")
            for message in exc.errors:
                log(f"  [red]- {message}[/red]")
            exit_process(1, self.config, str(exc))

    def _save_package_manager(self, package_manager: str) -> None:
        try:
            self.store.save_options({"packageManager": package_manager})
        except OSError as exc:
            print_warning(f"Could not save preferences to {self.store.path}: {exc}")

    def _save_preset(self, name: str, preset: Preset) -> None:
        try:
            self.store.save_preset(name, preset)
        except OSError as exc:
            print_warning(f"Could not save preset {name} to {self.store.path}: {exc}")
            return
        log()
        print_success(f"Preset [yellow]{name}[/yellow] saved in [yellow]{self.store.path}[/yellow]")
