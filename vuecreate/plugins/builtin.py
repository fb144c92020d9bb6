"""Generators of the plugins that ship with vuecreate.

Each generator has the signature ``(api, options, root_options)`` and talks
to the generation engine only through :class:`~vuecreate.generator.GeneratorAPI`.
"""

from __future__ import annotations

from typing import Any

from ..generator import GeneratorAPI
from ..options import CORE_SERVICE_ID, ROUTER_PLUGIN_ID, VUEX_PLUGIN_ID
from .registry import PluginCapability

BABEL_PLUGIN_ID = "@vue/cli-plugin-babel"
ESLINT_PLUGIN_ID = "@vue/cli-plugin-eslint"

BROWSERSLIST = ["> 1%", "last 2 versions", "not dead"]

_CSS_PREPROCESSOR_DEPS: dict[str, dict[str, str]] = {
    "sass": {"sass": "^1.32.7", "sass-loader": "^12.0.0"},
    "dart-sass": {"sass": "^1.32.7", "sass-loader": "^12.0.0"},
    "less": {"less": "^4.0.0", "less-loader": "^8.0.0"},
    "stylus": {"stylus": "^0.55.0", "stylus-loader": "^6.1.0"},
}

_CSS_LANG = {"sass": "scss", "dart-sass": "scss", "less": "less", "stylus": "stylus"}


def _is_vue3(root_options: dict[str, Any]) -> bool:
    return str(root_options.get("vueVersion") or "3").startswith("3")


def generate_service(api: GeneratorAPI, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    vue3 = _is_vue3(root_options)
    bare = bool(options.get("bare"))
    css_preprocessor = options.get("cssPreprocessor")

    api.render(
        "service",
        {
            "vue3": vue3,
            "bare": bare,
            "router": api.has_plugin(ROUTER_PLUGIN_ID),
            "vuex": api.has_plugin(VUEX_PLUGIN_ID),
            "css_lang": _CSS_LANG.get(css_preprocessor or "", ""),
        },
    )
    if bare:
        api.remove_file("src/components/HelloWorld.vue")

    dev_dependencies: dict[str, str] = {}
    if not vue3:
        dev_dependencies["vue-template-compiler"] = "^2.6.14"
    if css_preprocessor:
        dev_dependencies.update(_CSS_PREPROCESSOR_DEPS.get(css_preprocessor, {}))

    api.extend_package(
        {
            "scripts": {
                "serve": "vue-cli-service serve",
                "build": "vue-cli-service build",
            },
            "dependencies": {"vue": "^3.2.13" if vue3 else "^2.6.14"},
            "devDependencies": dev_dependencies,
            "browserslist": BROWSERSLIST + (["not ie 11"] if vue3 else []),
        }
    )


def generate_babel(api: GeneratorAPI, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    api.extend_package(
        {
            "babel": {"presets": ["@vue/cli-plugin-babel/preset"]},
            "dependencies": {"core-js": "^3.8.3"},
        }
    )


_ESLINT_EXTENDS = {
    "airbnb": "@vue/airbnb",
    "standard": "@vue/standard",
    "prettier": "plugin:prettier/recommended",
}

_ESLINT_CONFIG_DEPS = {
    "airbnb": {
        "@vue/eslint-config-airbnb": "^6.0.0",
        "eslint-plugin-import": "^2.25.3",
        "eslint-plugin-vuejs-accessibility": "^1.1.0",
    },
    "standard": {
        "@vue/eslint-config-standard": "^6.1.0",
        "eslint-plugin-import": "^2.25.3",
        "eslint-plugin-node": "^11.1.0",
        "eslint-plugin-promise": "^5.1.0",
    },
    "prettier": {
        "eslint-config-prettier": "^8.3.0",
        "eslint-plugin-prettier": "^4.0.0",
        "prettier": "^2.4.1",
    },
}


def generate_eslint(api: GeneratorAPI, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    config = options.get("config") or "base"
    lint_on = options.get("lintOn") or []

    extends = ["plugin:vue/vue3-essential" if _is_vue3(root_options) else "plugin:vue/essential"]
    extends.append("eslint:recommended")
    if config in _ESLINT_EXTENDS:
        extends.append(_ESLINT_EXTENDS[config])

    eslint_config: dict[str, Any] = {
        "root": True,
        "env": {"node": True},
        "extends": extends,
        "parserOptions": {"ecmaVersion": 2020},
        "rules": {},
    }
    dev_dependencies = {"eslint": "^7.32.0", "eslint-plugin-vue": "^8.0.3"}
    if api.has_plugin(BABEL_PLUGIN_ID):
        eslint_config["parserOptions"] = {"parser": "@babel/eslint-parser"}
        dev_dependencies["@babel/eslint-parser"] = "^7.12.16"
    dev_dependencies.update(_ESLINT_CONFIG_DEPS.get(config, {}))

    fields: dict[str, Any] = {
        "scripts": {"lint": "vue-cli-service lint"},
        "devDependencies": dev_dependencies,
        "eslintConfig": eslint_config,
    }
    if "save" not in lint_on:
        fields["vue"] = {"lintOnSave": False}
    if "commit" in lint_on:
        fields["devDependencies"]["lint-staged"] = "^11.1.2"
        fields["gitHooks"] = {"pre-commit": "lint-staged"}
        fields["lint-staged"] = {"*.{js,jsx,vue}": "vue-cli-service lint"}
    api.extend_package(fields)


def generate_router(api: GeneratorAPI, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    vue3 = _is_vue3(root_options)
    history_mode = bool(options.get("historyMode"))
    api.render(
        "router",
        {
            "vue3": vue3,
            "bare": bool(root_options.get("bare")),
            "history_mode": history_mode,
            "history_fn": "createWebHistory" if history_mode else "createWebHashHistory",
        },
    )
    api.extend_package({"dependencies": {"vue-router": "^4.0.3" if vue3 else "^3.5.1"}})


def generate_vuex(api: GeneratorAPI, options: dict[str, Any], root_options: dict[str, Any]) -> None:
    vue3 = _is_vue3(root_options)
    api.render("vuex", {"vue3": vue3})
    api.extend_package({"dependencies": {"vuex": "^4.0.0" if vue3 else "^3.6.2"}})


BUILTIN_PLUGINS: dict[str, PluginCapability] = {
    CORE_SERVICE_ID: PluginCapability(generate=generate_service),
    BABEL_PLUGIN_ID: PluginCapability(generate=generate_babel),
    ESLINT_PLUGIN_ID: PluginCapability(generate=generate_eslint),
    ROUTER_PLUGIN_ID: PluginCapability(generate=generate_router),
    VUEX_PLUGIN_ID: PluginCapability(generate=generate_vuex),
}
