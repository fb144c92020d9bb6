"""Built-in prompt modules.

Each module registers one selectable feature, the follow-up questions that
refine it, and a completion callback that turns the answers into plugin
entries on the manual preset.
"""

from __future__ import annotations

from ..options import Preset
from .composer import PromptComposer, PromptModule
from .engine import Answers, Choice, Question


def _has_feature(name: str):
    def when(answers: Answers) -> bool:
        return name in (answers.get("features") or [])

    return when


def vue_version(cli: PromptComposer) -> None:
    cli.inject_prompt(
        Question(
            name="vueVersion",
            type="list",
            message="Choose a version of Vue.js that you want to start the project with",
            choices=[Choice(name="3.x", value="3"), Choice(name="2.x", value="2")],
            default="3",
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if answers.get("vueVersion"):
            preset.vue_version = answers["vueVersion"]

    cli.on_prompt_complete(on_complete)


def babel(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Babel",
            value="babel",
            description="Transpile modern JavaScript to older versions (for compatibility)",
            link="https://babeljs.io/",
            checked=True,
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        features = answers.get("features") or []
        if "ts" in features:
            if not answers.get("useTsWithBabel"):
                return
        elif "babel" not in features:
            return
        preset.plugins["@vue/cli-plugin-babel"] = {}

    cli.on_prompt_complete(on_complete)


def typescript(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="TypeScript",
            value="ts",
            description="Add support for the TypeScript language",
        )
    )
    cli.inject_prompt(
        Question(
            name="tsClassComponent",
            type="confirm",
            message="Use class-style component syntax?",
            when=_has_feature("ts"),
            default=lambda answers: answers.get("vueVersion") != "3",
        )
    )
    cli.inject_prompt(
        Question(
            name="useTsWithBabel",
            type="confirm",
            message=(
                "Use Babel alongside TypeScript (required for modern mode, "
                "auto-detected polyfills, transpiling JSX)?"
            ),
            when=_has_feature("ts"),
            default=lambda answers: "babel" in (answers.get("features") or []),
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if "ts" not in (answers.get("features") or []):
            return
        options: dict = {"classComponent": bool(answers.get("tsClassComponent"))}
        if answers.get("useTsWithBabel"):
            options["useTsWithBabel"] = True
        preset.plugins["@vue/cli-plugin-typescript"] = options

    cli.on_prompt_complete(on_complete)


def pwa(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Progressive Web App (PWA) Support",
            value="pwa",
            description="Improve performances with features like Web manifest and Service workers",
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if "pwa" in (answers.get("features") or []):
            preset.plugins["@vue/cli-plugin-pwa"] = {}

    cli.on_prompt_complete(on_complete)


def router(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Router",
            value="router",
            description="Structure the app with dynamic pages",
            link="https://router.vuejs.org/",
        )
    )
    cli.inject_prompt(
        Question(
            name="historyMode",
            type="confirm",
            message=(
                "Use history mode for router? "
                "(Requires proper server setup for index fallback in production)"
            ),
            when=_has_feature("router"),
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if "router" in (answers.get("features") or []):
            preset.plugins["@vue/cli-plugin-router"] = {
                "historyMode": bool(answers.get("historyMode")),
            }

    cli.on_prompt_complete(on_complete)


def vuex(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Vuex",
            value="vuex",
            description="Manage the app state with a centralized store",
            link="https://vuex.vuejs.org/",
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if "vuex" in (answers.get("features") or []):
            preset.plugins["@vue/cli-plugin-vuex"] = {}

    cli.on_prompt_complete(on_complete)


def css_preprocessors(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="CSS Pre-processors",
            value="css-preprocessor",
            description="Add support for CSS pre-processors like Sass, Less or Stylus",
        )
    )
    cli.inject_prompt(
        Question(
            name="cssPreprocessor",
            type="list",
            message=(
                "Pick a CSS pre-processor (PostCSS, Autoprefixer and CSS Modules "
                "are supported by default):"
            ),
            when=_has_feature("css-preprocessor"),
            choices=[
                Choice(name="Sass/SCSS (with dart-sass)", value="dart-sass"),
                Choice(name="Less", value="less"),
                Choice(name="Stylus", value="stylus"),
            ],
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if answers.get("cssPreprocessor"):
            preset.css_preprocessor = answers["cssPreprocessor"]

    cli.on_prompt_complete(on_complete)


def linter(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Linter / Formatter",
            value="linter",
            description="Check and enforce code quality with ESLint or Prettier",
            checked=True,
        )
    )
    cli.inject_prompt(
        Question(
            name="eslintConfig",
            type="list",
            message="Pick a linter / formatter config:",
            when=_has_feature("linter"),
            choices=[
                Choice(name="ESLint with error prevention only", value="base"),
                Choice(name="ESLint + Airbnb config", value="airbnb"),
                Choice(name="ESLint + Standard config", value="standard"),
                Choice(name="ESLint + Prettier", value="prettier"),
            ],
        )
    )
    cli.inject_prompt(
        Question(
            name="lintOn",
            type="checkbox",
            message="Pick additional lint features:",
            when=_has_feature("linter"),
            choices=[
                Choice(name="Lint on save", value="save", checked=True),
                Choice(name="Lint and fix on commit", value="commit"),
            ],
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if "linter" in (answers.get("features") or []):
            preset.plugins["@vue/cli-plugin-eslint"] = {
                "config": answers.get("eslintConfig") or "base",
                "lintOn": list(answers.get("lintOn") or []),
            }

    cli.on_prompt_complete(on_complete)


def unit(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="Unit Testing",
            value="unit",
            description="Add a Unit Testing solution like Jest or Mocha",
        )
    )
    cli.inject_prompt(
        Question(
            name="unit",
            type="list",
            message="Pick a unit testing solution:",
            when=_has_feature("unit"),
            choices=[
                Choice(name="Jest", value="jest"),
                Choice(name="Mocha + Chai", value="mocha"),
            ],
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        if answers.get("unit") == "mocha":
            preset.plugins["@vue/cli-plugin-unit-mocha"] = {}
        elif answers.get("unit") == "jest":
            preset.plugins["@vue/cli-plugin-unit-jest"] = {}

    cli.on_prompt_complete(on_complete)


def e2e(cli: PromptComposer) -> None:
    cli.inject_feature(
        Choice(
            name="E2E Testing",
            value="e2e",
            description="Add an End-to-End testing solution to the app like Cypress or Nightwatch",
        )
    )
    cli.inject_prompt(
        Question(
            name="e2e",
            type="list",
            message="Pick an E2E testing solution:",
            when=_has_feature("e2e"),
            choices=[
                Choice(name="Cypress (Chrome only)", value="cypress"),
                Choice(name="Nightwatch (WebDriver-based)", value="nightwatch"),
                Choice(name="WebdriverIO (WebDriver/DevTools based)", value="webdriverio"),
            ],
        )
    )
    cli.inject_prompt(
        Question(
            name="webdrivers",
            type="checkbox",
            message="Pick browsers to run end-to-end test on",
            when=lambda answers: answers.get("e2e") in ("nightwatch", "webdriverio"),
            choices=[
                Choice(name="Chrome", value="chrome", checked=True),
                Choice(name="Firefox", value="firefox"),
            ],
        )
    )

    def on_complete(answers: Answers, preset: Preset) -> None:
        choice = answers.get("e2e")
        if choice == "cypress":
            preset.plugins["@vue/cli-plugin-e2e-cypress"] = {}
        elif choice in ("nightwatch", "webdriverio"):
            preset.plugins[f"@vue/cli-plugin-e2e-{choice}"] = {
                "webdrivers": list(answers.get("webdrivers") or []),
            }

    cli.on_prompt_complete(on_complete)


def get_prompt_modules() -> list[PromptModule]:
    """Prompt modules in the order their questions are asked."""
    return [
        vue_version,
        babel,
        typescript,
        pwa,
        router,
        vuex,
        css_preprocessors,
        linter,
        unit,
        e2e,
    ]
