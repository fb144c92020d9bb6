"""Fallback README for projects whose generators did not produce one."""

from __future__ import annotations

from typing import Any

from .package_manager import run_script_command
from .templates import TemplateRenderer

SCRIPT_DESCRIPTIONS = {
    "build": "Compiles and minifies for production",
    "serve": "Compiles and hot-reloads for development",
    "lint": "Lints and fixes files",
    "test:e2e": "Run your end-to-end tests",
    "test:unit": "Run your unit tests",
}


def generate_readme(
    pkg: dict[str, Any],
    package_manager: str,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render a README listing the setup command and the known scripts of *pkg*."""
    renderer = renderer or TemplateRenderer()
    scripts = [
        (SCRIPT_DESCRIPTIONS[name], run_script_command(package_manager, name))
        for name in pkg.get("scripts", {})
        if name in SCRIPT_DESCRIPTIONS
    ]
    return renderer.render(
        "readme/README.md.j2",
        {
            "project_name": pkg.get("name", ""),
            "package_manager": package_manager,
            "scripts": scripts,
        },
    )
