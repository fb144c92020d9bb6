"""Jinja2 template rendering for generated project files.

Templates live under ``vuecreate/templates/`` and are rendered into strings;
the generation engine decides when (and whether) they reach the disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateRenderer:
    """Renders ``.j2`` templates with a project context.

    Rendering is strict: a variable missing from the context is an error
    rather than an empty string.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"service/src/main.js.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_tree(self, template_prefix: str, context: dict[str, Any]) -> dict[str, str]:
        """Render every ``*.j2`` file under *template_prefix*.

        Returns a ``{relative_output_path: content}`` mapping with the
        ``.j2`` suffix stripped. A leading underscore in a file name becomes
        a dot (``_gitignore`` -> ``.gitignore``) so dotfiles survive packaging.
        """
        prefix_path = self.template_dir / template_prefix
        if not prefix_path.is_dir():
            return {}

        rendered: dict[str, str] = {}
        for template_file in sorted(prefix_path.rglob("*.j2")):
            rel = template_file.relative_to(prefix_path)
            output = rel.with_name(_dotfile_name(rel.name[: -len(".j2")]))
            key = f"{template_prefix}/{rel.as_posix()}"
            rendered[output.as_posix()] = self.render(key, context)
        return rendered


def _dotfile_name(name: str) -> str:
    return "." + name[1:] if name.startswith("_") else name
