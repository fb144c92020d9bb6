"""Preset model, built-in defaults and the user-level rc store.

The rc store (``~/.vuerc`` by default) is a JSON object holding the saved
package-manager preference and any presets saved from a manual session::

    {
      "packageManager": "yarn",
      "presets": {
        "my-preset": {"useConfigFiles": true, "plugins": {...}}
      }
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .utils import CreatorError, dump_json

CORE_SERVICE_ID = "@vue/cli-service"
ROUTER_PLUGIN_ID = "@vue/cli-plugin-router"
VUEX_PLUGIN_ID = "@vue/cli-plugin-vuex"

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")


class PresetValidationError(CreatorError):
    """Raised when a preset does not have the expected structure."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid preset: " + "; ".join(errors))


class Preset(BaseModel):
    """A declarative bundle of plugin selections and top-level project choices.

    Field names follow Python conventions; aliases match the JSON format used
    by saved, local, remote and inline presets. Unknown keys are preserved.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    use_config_files: bool = Field(default=False, alias="useConfigFiles")
    plugins: dict[str, dict[str, Any]] = Field(default_factory=dict)
    vue_version: str | None = Field(default=None, alias="vueVersion")
    css_preprocessor: str | None = Field(default=None, alias="cssPreprocessor")
    router: bool | None = None
    vuex: bool | None = None
    router_history_mode: bool | None = Field(default=None, alias="routerHistoryMode")

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready body using the aliased key names, without unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _default_preset(vue_version: str) -> Preset:
    return Preset(
        vueVersion=vue_version,
        useConfigFiles=False,
        plugins={
            "@vue/cli-plugin-babel": {},
            "@vue/cli-plugin-eslint": {
                "config": "base",
                "lintOn": ["save"],
            },
        },
    )


DEFAULT_PRESET_NAME = "Default (Vue 3)"

DEFAULT_PRESETS: dict[str, Preset] = {
    "Default (Vue 3)": _default_preset("3"),
    "Default (Vue 2)": _default_preset("2"),
}


def default_presets() -> dict[str, Preset]:
    """Fresh copies of the built-in presets."""
    return {name: preset.model_copy(deep=True) for name, preset in DEFAULT_PRESETS.items()}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_BOOL_FIELDS = ("useConfigFiles", "router", "vuex", "routerHistoryMode")
_STR_FIELDS = ("vueVersion", "cssPreprocessor")


def validate_preset(data: Preset | Mapping[str, Any]) -> Preset:
    """Check the structure of a preset and return it as a ``Preset``.

    Every problem is collected before raising, so the user sees all of them
    at once.

    Raises:
        PresetValidationError: If the preset is malformed or has no plugins.
    """
    raw = data.to_dict() if isinstance(data, Preset) else data
    errors: list[str] = []

    if not isinstance(raw, Mapping):
        raise PresetValidationError([f"preset must be an object, got {type(raw).__name__}"])

    plugins = raw.get("plugins")
    if not isinstance(plugins, Mapping):
        errors.append("'plugins' must be an object mapping plugin ids to options")
    else:
        if not plugins:
            errors.append("'plugins' must contain at least one plugin")
        for plugin_id, options in plugins.items():
            if not isinstance(plugin_id, str) or not plugin_id:
                errors.append(f"plugin id {plugin_id!r} must be a non-empty string")
            if options is not None and not isinstance(options, Mapping):
                errors.append(f"options for '{plugin_id}' must be an object")
            elif options and "version" in options and not isinstance(options["version"], str):
                errors.append(f"version for '{plugin_id}' must be a string")

    for key in _BOOL_FIELDS:
        if key in raw and raw[key] is not None and not isinstance(raw[key], bool):
            errors.append(f"'{key}' must be a boolean")
    for key in _STR_FIELDS:
        if key in raw and raw[key] is not None and not isinstance(raw[key], str):
            errors.append(f"'{key}' must be a string")

    if errors:
        raise PresetValidationError(errors)

    normalized = dict(raw)
    normalized["plugins"] = {pid: dict(opts or {}) for pid, opts in plugins.items()}
    try:
        return Preset.model_validate(normalized)
    except ValidationError as exc:
        raise PresetValidationError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        ) from exc


# ---------------------------------------------------------------------------
# rc store
# ---------------------------------------------------------------------------


class SavedOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    package_manager: str | None = Field(default=None, alias="packageManager")
    presets: dict[str, dict[str, Any]] = Field(default_factory=dict)


class RcStore:
    """Reads and writes the user-level rc file.

    A missing or unreadable rc file behaves like an empty one; writes raise
    so callers can decide whether a failed save is fatal.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load_options(self) -> SavedOptions:
        if not self.path.exists():
            return SavedOptions()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return SavedOptions.model_validate(raw)
        except (OSError, ValueError, ValidationError):
            return SavedOptions()

    def save_options(self, updates: Mapping[str, Any]) -> SavedOptions:
        """Shallow-merge *updates* (JSON key names) into the rc file."""
        current = self.load_options().model_dump(by_alias=True, exclude_none=True)
        current.update(updates)
        options = SavedOptions.model_validate(current)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            dump_json(options.model_dump(by_alias=True, exclude_none=True)),
            encoding="utf-8",
        )
        return options

    def save_preset(self, name: str, preset: Preset) -> None:
        validated = validate_preset(preset)
        presets = dict(self.load_options().presets)
        presets[name] = validated.to_dict()
        self.save_options({"presets": presets})

    def saved_presets(self) -> dict[str, Preset]:
        """Saved presets that validate; broken entries are left out."""
        result: dict[str, Preset] = {}
        for name, body in self.load_options().presets.items():
            try:
                result[name] = validate_preset(body)
            except PresetValidationError:
                continue
        return result

    def get_presets(self) -> dict[str, Preset]:
        """Saved presets followed by the built-in defaults (defaults win on clashes)."""
        presets = self.saved_presets()
        presets.update(default_presets())
        return presets
