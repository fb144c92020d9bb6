"""Aggregation of prompt-module contributions into one question sequence.

Prompt modules are plain callables taking the composer. During construction
each one registers feature choices, follow-up questions and completion
callbacks; ``compose_final()`` then freezes the composer and returns the
ordered sequence rendered by the prompt engine::

    intro    preset choice, feature checklist
    injected module questions, only visible in manual mode
    outro    config placement, save as preset, save name, package manager
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from ..options import CORE_SERVICE_ID, Preset
from ..utils import CreatorError
from .engine import Answers, Choice, Predicate, Question

MANUAL_PRESET = "__manual__"

CompletionCallback = Callable[[Answers, Preset], None]
PromptModule = Callable[["PromptComposer"], None]


class PromptComposerError(CreatorError):
    """Raised when the composer is modified after it has been frozen."""


def is_manual_mode(answers: Answers) -> bool:
    return answers.get("preset") == MANUAL_PRESET


def manual_only(original: Predicate | None) -> Predicate:
    """Wrap *original* so the question only shows in manual mode."""

    def when(answers: Answers) -> bool:
        return is_manual_mode(answers) and (original is None or bool(original(answers)))

    return when


def to_short_plugin_id(plugin_id: str) -> str:
    """``@vue/cli-plugin-babel`` -> ``babel``; ``vue-cli-plugin-foo`` -> ``foo``."""
    for prefix in ("@vue/cli-plugin-", "vue-cli-plugin-"):
        if plugin_id.startswith(prefix):
            return plugin_id[len(prefix):]
    return plugin_id.replace("/vue-cli-plugin-", "/")


def format_features(preset: Preset) -> str:
    """Short label of a preset's contents, e.g. ``[Vue 3] babel, eslint``."""
    features: list[str] = []
    if preset.router:
        features.append("router")
    if preset.vuex:
        features.append("vuex")
    if preset.css_preprocessor:
        features.append(preset.css_preprocessor)
    features += [
        to_short_plugin_id(plugin_id)
        for plugin_id in preset.plugins
        if plugin_id != CORE_SERVICE_ID
    ]
    return f"[Vue {preset.vue_version or '2'}] " + ", ".join(features)


class PromptComposer:
    """Builder that accumulates prompt-module contributions.

    Attributes:
        presets: Presets offered in the intro question, saved ones first.
        package_manager_choices: Managers offered in the outro; empty when a
            preference is stored or only npm is available.
    """

    def __init__(
        self,
        presets: Mapping[str, Preset],
        package_manager_choices: Iterable[str] = (),
    ) -> None:
        self.presets = dict(presets)
        self.package_manager_choices = list(package_manager_choices)
        self._features: list[Choice] = []
        self._injected: list[Question] = []
        self._callbacks: list[CompletionCallback] = []
        self._frozen: tuple[Question, ...] | None = None

    @classmethod
    def from_modules(
        cls,
        modules: Iterable[PromptModule],
        presets: Mapping[str, Preset],
        package_manager_choices: Iterable[str] = (),
    ) -> "PromptComposer":
        composer = cls(presets, package_manager_choices)
        for module in modules:
            module(composer)
        return composer

    # -- Registration ------------------------------------------------------

    def _check_open(self) -> None:
        if self._frozen is not None:
            raise PromptComposerError("Prompts were already composed; no further injection allowed")

    def inject_feature(self, choice: Choice) -> None:
        self._check_open()
        self._features.append(choice)

    def inject_prompt(self, question: Question) -> None:
        self._check_open()
        self._injected.append(question)

    def on_prompt_complete(self, callback: CompletionCallback) -> None:
        self._check_open()
        self._callbacks.append(callback)

    @property
    def features(self) -> tuple[Choice, ...]:
        return tuple(self._features)

    @property
    def completion_callbacks(self) -> tuple[CompletionCallback, ...]:
        return tuple(self._callbacks)

    # -- Composition -------------------------------------------------------

    def compose_final(self) -> tuple[Question, ...]:
        """Freeze the composer and return the ordered question sequence.

        Injected questions are returned as copies whose ``when`` wraps the
        predicate they were registered with, so repeated calls are idempotent.
        """
        if self._frozen is None:
            self._frozen = (
                self._preset_prompt(),
                self._feature_prompt(),
                *(q.with_when(manual_only(q.when)) for q in self._injected),
                *self._outro_prompts(),
            )
        return self._frozen

    def _preset_prompt(self) -> Question:
        choices = []
        for name, preset in self.presets.items():
            display = "Default" if name.startswith("Default (Vue ") else name
            choices.append(Choice(name=f"{display} ({format_features(preset)})", value=name))
        choices.append(Choice(name="Manually select features", value=MANUAL_PRESET))
        return Question(
            name="preset",
            type="list",
            message="Please pick a preset:",
            choices=choices,
        )

    def _feature_prompt(self) -> Question:
        return Question(
            name="features",
            type="checkbox",
            message="Check the features needed for your project:",
            choices=list(self._features),
            when=is_manual_mode,
        )

    def _outro_prompts(self) -> list[Question]:
        outro = [
            Question(
                name="useConfigFiles",
                type="list",
                message="Where do you prefer placing config for Babel, ESLint, etc.?",
                choices=[
                    Choice(name="In dedicated config files", value="files"),
                    Choice(name="In package.json", value="pkg"),
                ],
                when=is_manual_mode,
            ),
            Question(
                name="save",
                type="confirm",
                message="Save this as a preset for future projects?",
                default=False,
                when=is_manual_mode,
            ),
            Question(
                name="saveName",
                type="input",
                message="Save preset as:",
                when=lambda answers: bool(answers.get("save")),
            ),
        ]
        if self.package_manager_choices:
            labels = {"yarn": "Yarn", "pnpm": "PNPM", "npm": "NPM"}
            managers = [m for m in self.package_manager_choices if m != "npm"] + ["npm"]
            outro.append(
                Question(
                    name="packageManager",
                    type="list",
                    message="Pick the package manager to use when installing dependencies:",
                    choices=[
                        Choice(name=f"Use {labels[m]}", value=m)
                        for m in managers
                    ],
                )
            )
        return outro
