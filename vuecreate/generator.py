"""Default generation engine.

Runs every plugin's generator against a shared in-memory file tree and
``package.json``, then writes the result to the project directory. Plugins
talk to the engine exclusively through :class:`GeneratorAPI`.
"""

from __future__ import annotations

import copy
import inspect
import json
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .templates import TemplateRenderer
from .utils import console, dump_json, sort_object, write_file_tree

if TYPE_CHECKING:
    from .plugins.expander import PluginDescriptor

Hook = Callable[[], Awaitable[None] | None]

PACKAGE_KEY_ORDER = (
    "name",
    "version",
    "private",
    "description",
    "author",
    "scripts",
    "main",
    "module",
    "browser",
    "files",
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "vue",
    "babel",
    "eslintConfig",
    "prettier",
    "postcss",
    "browserslist",
    "jest",
)

_DEPENDENCY_KEYS = ("dependencies", "devDependencies", "peerDependencies")

# package.json key -> dedicated config file used when config files are extracted.
CONFIG_FILES = {
    "babel": "babel.config.js",
    "eslintConfig": ".eslintrc.js",
    "postcss": "postcss.config.js",
    "jest": "jest.config.js",
    "browserslist": ".browserslistrc",
}


def _merge_package(target: dict[str, Any], fields: dict[str, Any]) -> None:
    for key, value in fields.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            _merge_package(existing, value)
        elif isinstance(existing, list) and isinstance(value, list):
            target[key] = existing + [item for item in value if item not in existing]
        else:
            target[key] = copy.deepcopy(value)


def _render_config_file(key: str, value: Any) -> str:
    if key == "browserslist":
        lines = value if isinstance(value, list) else [str(value)]
        return "\n".join(lines) + "\n"
    return f"module.exports = {json.dumps(value, indent=2)}\n"


class GeneratorAPI:
    """The surface a plugin generator uses to contribute to the project.

    Attributes:
        id: Id of the plugin being invoked.
        options: That plugin's options.
        root_options: Options of the core service plugin, i.e. the whole
            preset body plus ``projectName``.
    """

    def __init__(
        self,
        plugin_id: str,
        generator: "Generator",
        options: dict[str, Any],
        root_options: dict[str, Any],
    ) -> None:
        self.id = plugin_id
        self.generator = generator
        self.options = options
        self.root_options = root_options

    @property
    def context(self) -> Path:
        return self.generator.context

    @property
    def entry_file(self) -> str:
        if "src/main.ts" in self.generator.files:
            return "src/main.ts"
        return "src/main.js"

    def has_plugin(self, plugin_id: str) -> bool:
        if plugin_id in self.generator.plugin_ids:
            return True
        pkg = self.generator.pkg
        return any(plugin_id in pkg.get(key, {}) for key in _DEPENDENCY_KEYS)

    def extend_package(self, fields: dict[str, Any]) -> None:
        """Deep-merge *fields* into ``package.json`` (lists are unioned)."""
        _merge_package(self.generator.pkg, fields)

    def render(self, template_prefix: str, context: dict[str, Any] | None = None) -> None:
        """Render a template tree into the project, overwriting earlier files."""
        merged = {
            "project_name": self.root_options.get("projectName", self.generator.pkg.get("name", "")),
            "root_options": self.root_options,
            "options": self.options,
            **(context or {}),
        }
        self.generator.files.update(self.generator.renderer.render_tree(template_prefix, merged))

    def render_file(self, path: str, content: str) -> None:
        self.generator.files[path] = content

    def remove_file(self, path: str) -> None:
        self.generator.files.pop(path, None)

    def after_invoke(self, hook: Hook) -> None:
        """Run *hook* once dependencies are installed, for this invocation only."""
        self.generator.after_invoke_cbs.append(hook)

    def after_any_invoke(self, hook: Hook) -> None:
        """Run *hook* once dependencies are installed, on every invocation."""
        self.generator.after_any_invoke_cbs.append(hook)

    def exit_log(self, message: str, kind: str = "log") -> None:
        self.generator.exit_logs.append((self.id, message, kind))


class Generator:
    """Invokes plugin generators and writes their output.

    Attributes:
        files: ``{relative_path: content}`` produced by the generators.
        pkg: The ``package.json`` being built.
        exit_logs: Messages printed once creation is complete.
    """

    def __init__(
        self,
        context: str | Path,
        *,
        pkg: dict[str, Any],
        plugins: Sequence["PluginDescriptor"],
        after_invoke_cbs: list[Hook] | None = None,
        after_any_invoke_cbs: list[Hook] | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.context = Path(context)
        self.original_pkg = copy.deepcopy(pkg)
        self.pkg = copy.deepcopy(pkg)
        self.plugins = list(plugins)
        self.plugin_ids = [plugin.id for plugin in self.plugins]
        self.after_invoke_cbs = after_invoke_cbs if after_invoke_cbs is not None else []
        self.after_any_invoke_cbs = after_any_invoke_cbs if after_any_invoke_cbs is not None else []
        self.renderer = renderer or TemplateRenderer()
        self.files: dict[str, str] = {}
        self.exit_logs: list[tuple[str, str, str]] = []

    def _root_options(self) -> dict[str, Any]:
        for plugin in self.plugins:
            if plugin.id == "@vue/cli-service":
                return plugin.options
        return {}

    async def generate(self, extract_config_files: bool = False) -> None:
        """Invoke every plugin generator in order, then write the results."""
        root_options = self._root_options()
        for plugin in self.plugins:
            api = GeneratorAPI(plugin.id, self, plugin.options, root_options)
            result = plugin.apply(api, plugin.options, root_options)
            if inspect.isawaitable(result):
                await result

        self._extract_config_files(extract_all=extract_config_files)

        self._sort_package()
        await write_file_tree(self.context, {**self.files, "package.json": dump_json(self.pkg)})

    def _extract_config_files(self, extract_all: bool) -> None:
        # babel.config.js is extracted regardless of extract_all.
        keys = CONFIG_FILES if extract_all else ("babel",)
        for key in keys:
            filename = CONFIG_FILES[key]
            if key in self.pkg and filename not in self.files:
                self.files[filename] = _render_config_file(key, self.pkg.pop(key))

    def _sort_package(self) -> None:
        for key in _DEPENDENCY_KEYS:
            if isinstance(self.pkg.get(key), dict):
                self.pkg[key] = sort_object(self.pkg[key])
        self.pkg = sort_object(self.pkg, PACKAGE_KEY_ORDER, dont_sort_by_unicode=True)

    def print_exit_logs(self) -> None:
        if not self.exit_logs:
            return
        styles = {"warn": "yellow", "error": "red", "done": "green"}
        console.print()
        for plugin_id, message, kind in self.exit_logs:
            style = styles.get(kind, "cyan")
            console.print(f"[{style}]{plugin_id}[/{style}] {message}")
