"""vuecreate configuration.

Centralised, typed configuration for a creation run. The process-wide
switches (test/debug mode, install gates, rc file location) are captured once
into a ``Config`` snapshot and passed explicitly to every component, so no
step reads ambient environment state on its own.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _truthy(value: str | None) -> bool:
    return bool(value) and value.strip().lower() not in ("0", "false", "no", "")


class Config(BaseModel):
    """Global vuecreate configuration.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and then handed to ``create`` / ``Creator``.
    """

    cwd: Path = Field(default_factory=Path.cwd)
    test: bool = Field(default=False, description="VUE_CLI_TEST: harness mode")
    debug: bool = Field(default=False, description="VUE_CLI_DEBUG: verbose output, no installs")
    do_install_plugin: bool = Field(
        default=False,
        description="Force the plugin install even in test/debug mode",
    )
    do_install_deps: bool = Field(
        default=False,
        description="Force the additional-deps install even in test/debug mode",
    )
    rc_path: Path = Field(default_factory=lambda: Path.home() / ".vuerc")
    registry: str = Field(default="https://registry.npmjs.org")
    remote_timeout: float = Field(default=30.0, gt=0, description="Remote preset fetch timeout in seconds")
    install_timeout: int = Field(default=1800, ge=10, description="Package install timeout in seconds")

    # ------------------------------------------------------------------
    # Derived switches
    # ------------------------------------------------------------------

    @property
    def is_test_or_debug(self) -> bool:
        return self.test or self.debug

    @property
    def skip_plugin_install(self) -> bool:
        """Whether the primary plugin install is replaced by a dev setup."""
        return self.is_test_or_debug and not self.do_install_plugin

    @property
    def skip_deps_install(self) -> bool:
        """Whether the additional-deps install after generation is skipped.

        Gated independently of :attr:`skip_plugin_install`.
        """
        return self.is_test_or_debug and not self.do_install_deps

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            VUE_CLI_TEST, VUE_CLI_DEBUG, VUE_CLI_TEST_DO_INSTALL_PLUGIN,
            VUE_CLI_TEST_DO_INSTALL_DEPS, VUE_CLI_CONFIG_PATH, VUE_CLI_REGISTRY.
        """
        kwargs: dict[str, Any] = {
            "test": _truthy(os.environ.get("VUE_CLI_TEST")),
            "debug": _truthy(os.environ.get("VUE_CLI_DEBUG")),
            "do_install_plugin": _truthy(os.environ.get("VUE_CLI_TEST_DO_INSTALL_PLUGIN")),
            "do_install_deps": _truthy(os.environ.get("VUE_CLI_TEST_DO_INSTALL_DEPS")),
        }
        if os.environ.get("VUE_CLI_CONFIG_PATH"):
            kwargs["rc_path"] = Path(os.environ["VUE_CLI_CONFIG_PATH"])
        if os.environ.get("VUE_CLI_REGISTRY"):
            kwargs["registry"] = os.environ["VUE_CLI_REGISTRY"]
        kwargs.update(overrides)
        return cls(**kwargs)


class CreateOptions(BaseModel):
    """CLI-level inputs for one ``create`` invocation."""

    model_config = ConfigDict(populate_by_name=True)

    preset: str | None = Field(default=None, description="Saved preset name, path or remote reference")
    default: bool = Field(default=False, description="Skip prompts and use the default preset")
    inline_preset: str | None = Field(default=None, alias="inlinePreset")
    package_manager: str | None = Field(default=None, alias="packageManager")
    force_git: bool = Field(default=False, alias="forceGit")
    # False disables git; a string becomes the initial commit message.
    git: bool | str | None = Field(default=None)
    merge: bool = False
    force: bool = False
    clone: bool = Field(default=False, description="Use git clone when fetching remote presets")
    bare: bool = Field(default=False, description="Scaffold without beginner instructions")
    skip_get_started: bool = Field(default=False, alias="skipGetStarted")
