"""Tests for the creation pipeline (vuecreate.creator).

Covers:
- Legacy preset expansion and package.json synthesis
- Git initialisation policy
- Full runs with git disabled: lifecycle order, install gates, hooks,
  README fallback and the pnpm ``.npmrc``
- A failed initial commit downgraded to a warning
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from vuecreate.config import Config, CreateOptions
from vuecreate.creator import Creator, build_manifest, normalize_preset, should_init_git
from vuecreate.events import LifecycleEvent
from vuecreate.git import GitError
from vuecreate.options import Preset
from vuecreate.package_manager import PackageManager
from vuecreate.plugins.registry import PluginCapability, PluginRegistry
from vuecreate.prompts.features import get_prompt_modules

PIPELINE = [
    LifecycleEvent.CREATING,
    LifecycleEvent.PLUGINS_INSTALL,
    LifecycleEvent.INVOKING_GENERATORS,
    LifecycleEvent.DEPS_INSTALL,
    LifecycleEvent.COMPLETION_HOOKS,
    LifecycleEvent.DONE,
]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestNormalizePreset:
    def test_service_receives_preset_body(self):
        preset = Preset(plugins={"@vue/cli-plugin-babel": {}}, vueVersion="2")
        result = normalize_preset(preset, "app")
        service = result.plugins["@vue/cli-service"]
        assert service["projectName"] == "app"
        assert service["vueVersion"] == "2"
        assert "bare" not in service
        assert "@vue/cli-service" not in preset.plugins

    def test_legacy_router_and_vuex(self):
        preset = Preset(plugins={"a": {}}, router=True, routerHistoryMode=True, vuex=True)
        result = normalize_preset(preset, "app")
        assert result.plugins["@vue/cli-plugin-router"] == {"historyMode": True}
        assert result.plugins["@vue/cli-plugin-vuex"] == {}

    def test_listed_router_not_overwritten(self):
        preset = Preset(
            plugins={"@vue/cli-plugin-router": {"version": "1.0.0"}},
            router=True,
            routerHistoryMode=True,
        )
        result = normalize_preset(preset, "app")
        assert result.plugins["@vue/cli-plugin-router"] == {"version": "1.0.0"}

    def test_bare(self):
        result = normalize_preset(Preset(plugins={"a": {}}), "app", bare=True)
        assert result.plugins["@vue/cli-service"]["bare"] is True


@pytest.mark.unit
class TestBuildManifest:
    def test_versions(self):
        plugins = {
            "@vue/cli-service": {},
            "@vue/cli-plugin-babel": {},
            "vue-cli-plugin-community": {},
            "pinned": {"version": "^1.2.3"},
            "/abs/preset": {"_isPreset": True},
        }
        pkg = build_manifest("app", plugins, "5.0.0")
        assert pkg["name"] == "app"
        assert pkg["version"] == "0.1.0"
        assert pkg["private"] is True
        assert pkg["devDependencies"] == {
            "@vue/cli-service": "~5.0.0",
            "@vue/cli-plugin-babel": "~5.0.0",
            "vue-cli-plugin-community": "latest",
            "pinned": "^1.2.3",
        }

    def test_latest_under_test_or_debug(self):
        pkg = build_manifest("app", {"@vue/cli-plugin-babel": {}}, "5.0.0", is_test_or_debug=True)
        assert pkg["devDependencies"] == {"@vue/cli-plugin-babel": "latest"}

    def test_existing_manifest_wins(self):
        existing = {"name": "kept", "version": "2.0.0", "devDependencies": {"jest": "^27.0.0"}}
        pkg = build_manifest("app", {"@vue/cli-service": {}}, "5.0.0", existing=existing)
        assert pkg["name"] == "kept"
        assert pkg["version"] == "2.0.0"
        assert pkg["devDependencies"] == {"jest": "^27.0.0", "@vue/cli-service": "~5.0.0"}


@pytest.mark.unit
class TestShouldInitGit:
    def test_no_git_binary(self, tmp_path: Path):
        with patch("vuecreate.creator.has_git", return_value=False):
            assert should_init_git(CreateOptions(force_git=True), tmp_path) is False

    @pytest.mark.parametrize(
        "options, in_repo, expected",
        [
            (CreateOptions(force_git=True), True, True),
            (CreateOptions(git=False), False, False),
            (CreateOptions(git="false"), False, False),
            (CreateOptions(), True, False),
            (CreateOptions(), False, True),
            (CreateOptions(git="first commit"), False, True),
        ],
    )
    def test_policy(self, tmp_path: Path, options: CreateOptions, in_repo: bool, expected: bool):
        with patch("vuecreate.creator.has_git", return_value=True), \
                patch("vuecreate.creator.has_project_git", return_value=in_repo):
            assert should_init_git(options, tmp_path) is expected


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def _creator(config: Config, engine, rc_store, events=None, registry=None) -> Creator:
    return Creator(
        "app",
        config.cwd / "app",
        get_prompt_modules(),
        config=config,
        engine=engine,
        store=rc_store,
        registry=registry or PluginRegistry.with_builtins(discover_entry_points=False),
        events=events,
    )


@pytest.fixture
def no_git():
    with patch("vuecreate.creator.has_git", return_value=False):
        yield


@pytest.mark.unit
@pytest.mark.usefixtures("no_git")
class TestCreate:
    @pytest.mark.asyncio
    async def test_default_preset(self, test_config, rc_store, scripted_engine, event_log):
        events, received = event_log
        creator = _creator(test_config, scripted_engine(), rc_store, events)
        result = await creator.create(CreateOptions(default=True))

        assert received == PIPELINE
        assert result.events == PIPELINE
        assert result.git_initialized is False
        assert result.package_manager == "npm"
        assert [p.id for p in result.plugins] == [
            "@vue/cli-service",
            "@vue/cli-plugin-babel",
            "@vue/cli-plugin-eslint",
        ]

        project = test_config.cwd / "app"
        pkg = json.loads((project / "package.json").read_text(encoding="utf-8"))
        assert pkg["devDependencies"]["@vue/cli-service"] == "latest"
        assert pkg["devDependencies"]["@vue/cli-plugin-babel"] == "latest"
        assert pkg["devDependencies"]["@vue/cli-plugin-eslint"] == "latest"
        assert pkg["dependencies"]["vue"] == "^3.2.13"
        assert (project / "src" / "main.js").exists()
        assert (project / "babel.config.js").exists()
        readme = (project / "README.md").read_text(encoding="utf-8")
        assert "# app" in readme and "npm run serve" in readme

    @pytest.mark.asyncio
    async def test_recorder_unsubscribed(self, test_config, rc_store, scripted_engine, event_log):
        events, received = event_log
        creator = _creator(test_config, scripted_engine(), rc_store, events)
        await creator.create(CreateOptions(default=True))
        events.emit(LifecycleEvent.DONE)
        assert received[-2:] == [LifecycleEvent.DONE, LifecycleEvent.DONE]
        assert len(events._listeners) == 1

    @pytest.mark.asyncio
    async def test_installs_skipped_in_test_mode(self, test_config, rc_store, scripted_engine):
        with patch.object(PackageManager, "install", new=AsyncMock()) as mock_install:
            await _creator(test_config, scripted_engine(), rc_store).create(CreateOptions(default=True))
        mock_install.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"do_install_plugin": True}, {"do_install_deps": True}],
    )
    async def test_install_gates_are_independent(
        self, test_config, rc_store, scripted_engine, overrides
    ):
        config = test_config.model_copy(update=overrides)
        with patch.object(PackageManager, "install", new=AsyncMock()) as mock_install:
            await _creator(config, scripted_engine(), rc_store).create(CreateOptions(default=True))
        mock_install.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_both_installs(self, test_config, rc_store, scripted_engine):
        config = test_config.model_copy(update={"do_install_plugin": True, "do_install_deps": True})
        with patch.object(PackageManager, "install", new=AsyncMock()) as mock_install:
            await _creator(config, scripted_engine(), rc_store).create(CreateOptions(default=True))
        assert mock_install.await_count == 2

    @pytest.mark.asyncio
    async def test_explicit_preset_with_interactive_engine(self, test_config, rc_store, scripted_engine):
        engine = scripted_engine()
        result = await _creator(test_config, engine, rc_store).create(
            preset={"plugins": {"@vue/cli-plugin-vuex": {}}}
        )
        assert engine.sessions == []
        assert (test_config.cwd / "app" / "src" / "store" / "index.js").exists()
        assert result.preset.plugins["@vue/cli-service"]["projectName"] == "app"

    @pytest.mark.asyncio
    async def test_hooks_run_after_generation(self, test_config, rc_store, scripted_engine, event_log):
        events, received = event_log
        order: list[str] = []

        async def hook():
            order.append("after-invoke")
            assert (test_config.cwd / "app" / "package.json").exists()

        def generate(api, options, root_options):
            api.after_invoke(hook)
            api.after_any_invoke(lambda: order.append("after-any"))

        registry = PluginRegistry.with_builtins(discover_entry_points=False)
        registry.register("custom", PluginCapability(generate=generate))
        await _creator(test_config, scripted_engine(), rc_store, events, registry).create(
            preset={"plugins": {"custom": {}}}
        )
        assert order == ["after-invoke", "after-any"]

    @pytest.mark.asyncio
    async def test_hook_failure_propagates(self, test_config, rc_store, scripted_engine, event_log):
        events, received = event_log

        def failing():
            raise RuntimeError("hook broke")

        def generate(api, options, root_options):
            api.after_invoke(failing)

        registry = PluginRegistry.with_builtins(discover_entry_points=False)
        registry.register("custom", PluginCapability(generate=generate))
        with pytest.raises(RuntimeError, match="hook broke"):
            await _creator(test_config, scripted_engine(), rc_store, events, registry).create(
                preset={"plugins": {"custom": {}}}
            )
        assert received[-1] == LifecycleEvent.COMPLETION_HOOKS
        assert LifecycleEvent.DONE not in received

    @pytest.mark.asyncio
    async def test_generated_readme_kept(self, test_config, rc_store, scripted_engine):
        def generate(api, options, root_options):
            api.render_file("README.md", "custom readme\n")

        registry = PluginRegistry.with_builtins(discover_entry_points=False)
        registry.register("custom", PluginCapability(generate=generate))
        await _creator(test_config, scripted_engine(), rc_store, registry=registry).create(
            preset={"plugins": {"custom": {}}}
        )
        assert (test_config.cwd / "app" / "README.md").read_text() == "custom readme\n"

    @pytest.mark.asyncio
    async def test_pnpm_npmrc(self, test_config, rc_store, scripted_engine):
        result = await _creator(test_config, scripted_engine(), rc_store).create(
            CreateOptions(default=True, package_manager="pnpm")
        )
        assert result.package_manager == "pnpm"
        assert (test_config.cwd / "app" / ".npmrc").read_text() == "shamefully-flatten=true\n"

    @pytest.mark.asyncio
    async def test_existing_manifest_merged(self, test_config, rc_store, scripted_engine):
        project = test_config.cwd / "app"
        project.mkdir()
        (project / "package.json").write_text(json.dumps({"name": "app", "author": "me"}))
        await _creator(test_config, scripted_engine(), rc_store).create(CreateOptions(default=True))
        pkg = json.loads((project / "package.json").read_text())
        assert pkg["author"] == "me"
        assert "@vue/cli-service" in pkg["devDependencies"]


@pytest.mark.unit
class TestGitSteps:
    @pytest.mark.asyncio
    async def test_commit_failure_is_a_warning(self, test_config, rc_store, scripted_engine, event_log):
        events, received = event_log
        init = AsyncMock()
        commit = AsyncMock(side_effect=GitError("commit failed", stderr="no identity"))
        with patch("vuecreate.creator.has_git", return_value=True), \
                patch("vuecreate.creator.init_repository", new=init), \
                patch("vuecreate.creator.commit_all", new=commit), \
                patch("vuecreate.creator.print_warning") as mock_warn:
            result = await _creator(test_config, scripted_engine(), rc_store, events).create(
                CreateOptions(default=True, force_git=True, git="first")
            )

        assert result.git_initialized is True
        assert result.git_commit_failed is True
        assert received[:2] == [LifecycleEvent.CREATING, LifecycleEvent.GIT_INIT]
        assert received[-1] == LifecycleEvent.DONE
        init.assert_awaited_once()
        assert commit.call_args.args[1] == "first"
        assert commit.call_args.kwargs == {"test_identity": True}
        assert "initial commit yourself" in mock_warn.call_args.args[0]

    @pytest.mark.asyncio
    async def test_default_commit_message(self, test_config, rc_store, scripted_engine):
        commit = AsyncMock()
        with patch("vuecreate.creator.has_git", return_value=True), \
                patch("vuecreate.creator.init_repository", new=AsyncMock()), \
                patch("vuecreate.creator.commit_all", new=commit):
            result = await _creator(test_config, scripted_engine(), rc_store).create(
                CreateOptions(default=True, force_git=True, git=True)
            )
        assert result.git_commit_failed is False
        assert commit.call_args.args[1] == "init"
