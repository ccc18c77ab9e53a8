"""
Tests for the built-in plugins.

Tests verify that:
- Built-ins register in a fixed order with valid dependencies
- Each plugin's contributions render from its options
- Configuration flows read answers from the UI
"""

import json as _json
import pathlib as _pathlib

import pytest as _pytest

import initforge.builtin as builtin
import initforge.builtin.git as git
import initforge.builtin.language as language
import initforge.builtin.project as project
import initforge.config.types as config_types
import initforge.plugins.context as context
import initforge.plugins.ordering as ordering
import initforge.plugins.registry as registry
import tests.conftest as conftest


def _config(**options: object) -> config_types.PluginConfig:
    return config_types.PluginConfig(enabled=True, options=dict(options))


def _configuration_context(
    ui: conftest.ScriptedUI, logger: conftest.RecordingLogger
) -> context.ConfigurationContext:
    return context.ConfigurationContext(
        project_name="demo-project",
        project_root=_pathlib.Path("/tmp/demo-project"),
        other_plugins={},
        ui=ui,
        logger=logger,
    )


class TestRegistration:
    """Tests for register_builtin_plugins."""

    def test_registration_order(self, plugin_registry: registry.PluginRegistry) -> None:
        builtin.register_builtin_plugins(plugin_registry)

        assert [p.meta.name for p in plugin_registry.get_all()] == [
            "project",
            "language-settings",
            "git",
        ]

    def test_dependencies_resolve(self, plugin_registry: registry.PluginRegistry) -> None:
        builtin.register_builtin_plugins(plugin_registry)

        order = ordering.sort_plugins(plugin_registry.get_all())

        assert order[0].meta.name == "project"


class TestProjectPlugin:
    """Tests for the project plugin."""

    def test_execute_publishes_identity(self, plugin_ctx: context.PluginContext) -> None:
        plugin = project.create_plugin()

        plugin.hooks.execute(plugin_ctx)

        assert plugin_ctx.shared[project.SHARED_KEY] == {
            "name": "demo-project",
            "root": str(plugin_ctx.project_root),
        }

    def test_overview_section(self, plugin_ctx: context.PluginContext) -> None:
        plugin = project.create_plugin()

        bare = plugin.prompt.generate(_config(), plugin_ctx)
        described = plugin.prompt.generate(_config(description="A demo."), plugin_ctx)

        assert bare == "## Project Overview\n\n**Project**: demo-project"
        assert described.endswith("\n\nA demo.")

    def test_config_output(self, project_dir: _pathlib.Path) -> None:
        ctx = context.create_plugin_context(
            project_dir,
            plugin_configs={"git": config_types.PluginConfig(enabled=False)},
            logger=conftest.RecordingLogger(),
        )

        (output,) = project.create_plugin().outputs.generate(_config(), ctx)

        assert output.path == "config.json"
        assert output.format == "json"
        assert output.merge is True
        data = _json.loads(output.content)
        assert data["project"] == {"name": "demo-project"}
        assert data["plugins"]["git"]["enabled"] is False


class TestGitPlugin:
    """Tests for the git plugin."""

    def test_default_rules(self, plugin_ctx: context.PluginContext) -> None:
        rules = git.create_plugin().rules.generate(_config(), plugin_ctx)

        assert rules.startswith("# Git Rules")
        assert "not committed automatically" in rules
        assert "must not run git operations" in rules
        assert "- `.agent/temp/`" in rules

    def test_permissive_rules(self, plugin_ctx: context.PluginContext) -> None:
        config = _config(auto_commit=True, ai_git_operations=True, ignore_patterns=[])

        rules = git.create_plugin().rules.generate(config, plugin_ctx)

        assert "committed automatically after initialization" in rules
        assert "--no-verify" in rules
        assert "## Ignored Paths" not in rules

    def test_gitignore_patterns(self) -> None:
        plugin = git.create_plugin()

        assert plugin.gitignore.get_patterns(_config()) == list(git.DEFAULT_IGNORE_PATTERNS)
        assert plugin.gitignore.get_patterns(_config(ignore_patterns=["tmp/"])) == ["tmp/"]

    def test_slash_command(self) -> None:
        (command,) = git.create_plugin().slash_commands
        assert command.name == "git-commit"
        assert command.template_path == "commands/git/commit.md"

    def test_summary(self) -> None:
        summary = git.create_plugin().configuration.get_summary(_config(auto_commit=True))
        assert summary == ["Auto-commit: on", "Agent git operations: forbidden"]

    @_pytest.mark.asyncio
    async def test_configure(self, logger: conftest.RecordingLogger) -> None:
        ui = conftest.ScriptedUI([True, False])

        config = await git.create_plugin().configuration.configure(
            _configuration_context(ui, logger)
        )

        assert len(ui.asked) == 2
        assert config.options["auto_commit"] is True
        assert config.options["ai_git_operations"] is False


class TestLanguagePlugin:
    """Tests for the language-settings plugin."""

    def test_language_name(self) -> None:
        assert language.language_name("zh") == "Chinese"
        assert language.language_name("EN") == "English"
        assert language.language_name("Klingon") == "Klingon"

    def test_section_and_rules(self, plugin_ctx: context.PluginContext) -> None:
        plugin = language.create_plugin()
        config = _config(user_language="ja", think_language="English")

        section = plugin.prompt.generate(config, plugin_ctx)
        rules = plugin.rules.generate(config, plugin_ctx)

        assert "- **Internal thinking**: English" in section
        assert "- **Final outputs**: Japanese" in section
        assert "Write every user-facing answer and document in Japanese." in rules

    def test_summary_defaults(self) -> None:
        summary = language.create_plugin().configuration.get_summary(_config())
        assert summary == ["Reasoning: English", "Answers: English"]

    @_pytest.mark.asyncio
    async def test_configure(self, logger: conftest.RecordingLogger) -> None:
        ui = conftest.ScriptedUI(["French", "French"])

        config = await language.create_plugin().configuration.configure(
            _configuration_context(ui, logger)
        )

        assert config.options == {"user_language": "French", "think_language": "French"}
        assert logger.messages("info")[0].startswith("Detected language:")
