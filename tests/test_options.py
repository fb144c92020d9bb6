"""Tests for the preset model, validation and rc store (vuecreate.options)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vuecreate.options import (
    DEFAULT_PRESET_NAME,
    DEFAULT_PRESETS,
    Preset,
    PresetValidationError,
    RcStore,
    default_presets,
    validate_preset,
)

pytestmark = pytest.mark.unit


class TestPreset:
    def test_aliases_round_trip(self):
        preset = Preset.model_validate(
            {
                "useConfigFiles": True,
                "plugins": {"@vue/cli-plugin-babel": {}},
                "vueVersion": "2",
                "cssPreprocessor": "less",
                "routerHistoryMode": True,
            }
        )
        assert preset.use_config_files is True
        assert preset.vue_version == "2"
        assert preset.css_preprocessor == "less"
        assert preset.router_history_mode is True
        assert preset.to_dict()["useConfigFiles"] is True

    def test_to_dict_drops_unset_optionals(self):
        body = Preset(plugins={"a": {}}).to_dict()
        assert body == {"useConfigFiles": False, "plugins": {"a": {}}}

    def test_extra_keys_preserved(self):
        preset = Preset.model_validate({"plugins": {"a": {}}, "configs": {"vue": {}}})
        assert preset.to_dict()["configs"] == {"vue": {}}


class TestDefaultPresets:
    def test_names(self):
        assert set(DEFAULT_PRESETS) == {"Default (Vue 3)", "Default (Vue 2)"}
        assert DEFAULT_PRESET_NAME == "Default (Vue 3)"

    def test_default_plugins(self):
        preset = DEFAULT_PRESETS[DEFAULT_PRESET_NAME]
        assert list(preset.plugins) == ["@vue/cli-plugin-babel", "@vue/cli-plugin-eslint"]
        assert preset.plugins["@vue/cli-plugin-eslint"] == {"config": "base", "lintOn": ["save"]}
        assert preset.vue_version == "3"

    def test_copies_are_independent(self):
        copy = default_presets()[DEFAULT_PRESET_NAME]
        copy.plugins["@vue/cli-plugin-eslint"]["lintOn"].append("commit")
        assert DEFAULT_PRESETS[DEFAULT_PRESET_NAME].plugins["@vue/cli-plugin-eslint"]["lintOn"] == ["save"]


class TestValidatePreset:
    def test_valid_dict(self):
        preset = validate_preset({"plugins": {"@vue/cli-plugin-babel": None}})
        assert preset.plugins == {"@vue/cli-plugin-babel": {}}

    def test_accepts_model(self):
        preset = validate_preset(DEFAULT_PRESETS[DEFAULT_PRESET_NAME])
        assert isinstance(preset, Preset)

    def test_empty_plugins_rejected(self):
        with pytest.raises(PresetValidationError, match="at least one plugin"):
            validate_preset({"plugins": {}})

    def test_missing_plugins_rejected(self):
        with pytest.raises(PresetValidationError):
            validate_preset({"useConfigFiles": True})

    def test_collects_every_error(self):
        with pytest.raises(PresetValidationError) as exc_info:
            validate_preset(
                {
                    "plugins": {"a": "not-an-object", "b": {"version": 3}},
                    "useConfigFiles": "yes",
                    "vueVersion": 3,
                }
            )
        errors = exc_info.value.errors
        assert len(errors) == 4
        assert any("options for 'a'" in e for e in errors)
        assert any("version for 'b'" in e for e in errors)
        assert any("useConfigFiles" in e for e in errors)
        assert any("vueVersion" in e for e in errors)

    def test_non_object_rejected(self):
        with pytest.raises(PresetValidationError):
            validate_preset(["plugins"])  # type: ignore[arg-type]


class TestRcStore:
    def test_missing_file_is_empty(self, tmp_path: Path):
        store = RcStore(tmp_path / ".vuerc")
        options = store.load_options()
        assert options.package_manager is None
        assert options.presets == {}

    def test_corrupt_file_is_empty(self, tmp_path: Path):
        path = tmp_path / ".vuerc"
        path.write_text("{broken", encoding="utf-8")
        assert RcStore(path).load_options().presets == {}

    def test_save_options_merges(self, tmp_path: Path):
        store = RcStore(tmp_path / ".vuerc")
        store.save_options({"packageManager": "yarn"})
        store.save_options({"latestVersion": "5.0.8"})
        raw = json.loads((tmp_path / ".vuerc").read_text())
        assert raw == {"packageManager": "yarn", "presets": {}, "latestVersion": "5.0.8"}

    def test_save_preset(self, tmp_path: Path):
        store = RcStore(tmp_path / "nested" / ".vuerc")
        store.save_preset("mine", Preset(plugins={"@vue/cli-plugin-babel": {}}, vueVersion="3"))
        saved = store.saved_presets()
        assert list(saved) == ["mine"]
        assert saved["mine"].vue_version == "3"

    def test_save_invalid_preset_raises(self, tmp_path: Path):
        store = RcStore(tmp_path / ".vuerc")
        with pytest.raises(PresetValidationError):
            store.save_preset("empty", Preset(plugins={}))
        assert not (tmp_path / ".vuerc").exists()

    def test_broken_saved_preset_skipped(self, tmp_path: Path):
        path = tmp_path / ".vuerc"
        path.write_text(
            json.dumps({"presets": {"bad": {"plugins": {}}, "good": {"plugins": {"x": {}}}}}),
            encoding="utf-8",
        )
        assert list(RcStore(path).saved_presets()) == ["good"]

    def test_get_presets_saved_first_defaults_win(self, tmp_path: Path):
        path = tmp_path / ".vuerc"
        path.write_text(
            json.dumps(
                {
                    "presets": {
                        "mine": {"plugins": {"x": {}}},
                        "Default (Vue 3)": {"plugins": {"y": {}}},
                    }
                }
            ),
            encoding="utf-8",
        )
        presets = RcStore(path).get_presets()
        assert list(presets)[0] == "mine"
        assert "@vue/cli-plugin-babel" in presets["Default (Vue 3)"].plugins
