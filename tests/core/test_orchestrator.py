"""
Tests for the initialization run.

Tests verify that:
- A full run with the built-in plugins writes every artifact
- Phases and hooks run in lifecycle order
- Explicit configs win over configuration flows
- Hook and dependency errors abort the run; artifact failures do not
"""

import json as _json
import pathlib as _pathlib

import pytest as _pytest

import initforge.builtin as builtin
import initforge.config.settings as settings
import initforge.config.types as config_types
import initforge.constants as constants
import initforge.core.marker as marker
import initforge.core.orchestrator as orchestrator
import initforge.plugins.context as context
import initforge.plugins.loader as loader
import initforge.plugins.ordering as ordering
import initforge.plugins.registry as registry
import initforge.plugins.types as types
import tests.conftest as conftest


def _orchestrator(
    project_dir: _pathlib.Path,
    reg: registry.PluginRegistry,
    logger: conftest.RecordingLogger,
    **kwargs: object,
) -> orchestrator.Orchestrator:
    config = settings.Settings.load(project_dir)
    return orchestrator.Orchestrator(reg, config, logger=logger, **kwargs)  # type: ignore[arg-type]


def _registry(*plugins: types.Plugin) -> registry.PluginRegistry:
    reg = registry.PluginRegistry()
    for plugin in plugins:
        reg.register(plugin)
    return reg


class TestBuiltinRun:
    """End-to-end run with the built-in plugins."""

    @_pytest.mark.asyncio
    async def test_writes_all_artifacts(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        reg = registry.PluginRegistry()
        builtin.register_builtin_plugins(reg)
        runner = _orchestrator(project_dir, reg, logger)
        root = runner.router.project_root

        report = await runner.run()

        assert report.plugins == ["project", "language-settings", "git"]
        assert report.summary.failed == 0, report.failures

        rules = sorted(p.name for p in (root / ".claude" / "rules").iterdir())
        assert rules == ["00-project.md", "20-language.md", "30-git.md"]
        assert (root / ".claude" / "commands" / "git-commit.md").is_file()
        assert ".agent/temp/" in (root / ".gitignore").read_text()

        record = _json.loads((root / ".agent" / "config.json").read_text())
        assert record["project"]["name"] == "demo-project"
        assert set(record["plugins"]) == {"project", "language-settings", "git"}

        document = (root / "AGENT.md").read_text()
        assert report.document == root / "AGENT.md"
        assert document.startswith("# demo-project\n")
        assert "## Project Overview" in document
        assert "## Language Convention" in document
        assert "{{" not in document

    @_pytest.mark.asyncio
    async def test_second_run_is_stable(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """Re-running leaves .gitignore and the run record without duplicates."""
        reg = registry.PluginRegistry()
        builtin.register_builtin_plugins(reg)

        await _orchestrator(project_dir, reg, logger).run()
        runner = _orchestrator(project_dir, reg, logger)
        await runner.run()

        root = runner.router.project_root
        assert (root / ".gitignore").read_text().count(".agent/temp/") == 1
        record = _json.loads((root / ".agent" / "config.json").read_text())
        assert record["project"] == {"name": "demo-project"}

    @_pytest.mark.asyncio
    async def test_disabled_plugin_leaves_no_artifacts(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        reg = registry.PluginRegistry()
        builtin.register_builtin_plugins(reg)
        runner = _orchestrator(
            project_dir,
            reg,
            logger,
            run_config={"git": config_types.PluginConfig(enabled=False)},
        )
        root = runner.router.project_root

        report = await runner.run()

        assert "git" not in report.plugins
        assert not (root / ".claude" / "rules" / "30-git.md").exists()
        assert not (root / ".claude" / "commands" / "git-commit.md").exists()
        assert not (root / ".gitignore").exists()


class TestLifecycle:
    """Tests for phase and hook ordering."""

    @_pytest.mark.asyncio
    async def test_hook_order(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """Each hook fires for every plugin, in dependency order, per phase."""
        calls: list[str] = []

        def hooks(name: str) -> types.PluginHooks:
            return types.PluginHooks(
                before_init=lambda ctx: calls.append(f"{name}.before_init"),
                execute=lambda ctx: calls.append(f"{name}.execute"),
                after_init=lambda ctx: calls.append(f"{name}.after_init"),
                cleanup=lambda ctx: calls.append(f"{name}.cleanup"),
            )

        reg = _registry(
            conftest.make_plugin("child", dependencies=["base"], hooks=hooks("child")),
            conftest.make_plugin("base", hooks=hooks("base")),
        )

        await _orchestrator(project_dir, reg, logger).run()

        assert calls == [
            "base.before_init",
            "child.before_init",
            "base.execute",
            "child.execute",
            "base.after_init",
            "child.after_init",
            "base.cleanup",
            "child.cleanup",
        ]

    @_pytest.mark.asyncio
    async def test_execute_sees_final_configs(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """Configs are complete before the execute hooks run."""
        seen: dict[str, object] = {}

        async def configure(ctx: context.ConfigurationContext) -> config_types.PluginConfig:
            return config_types.PluginConfig(options={"answer": 42})

        def execute(ctx: context.PluginContext) -> None:
            seen.update(ctx.config.plugins["asker"].options)

        reg = _registry(
            conftest.make_plugin(
                "asker",
                configuration=types.ConfigurationFlow(
                    configure=configure, get_summary=lambda config: ["Answer: 42"]
                ),
                hooks=types.PluginHooks(execute=execute),
            )
        )

        await _orchestrator(project_dir, reg, logger).run()

        assert seen == {"answer": 42}
        assert "  Answer: 42" in logger.messages("info")


class TestConfigure:
    """Tests for configuration precedence."""

    @_pytest.mark.asyncio
    async def test_precedence(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """Explicit config wins; flows see earlier configs; others get defaults."""
        observed: list[list[str]] = []

        def flow() -> types.ConfigurationFlow:
            async def configure(ctx: context.ConfigurationContext) -> config_types.PluginConfig:
                observed.append(list(ctx.other_plugins))
                return config_types.PluginConfig(options={"from": "flow"})

            return types.ConfigurationFlow(configure=configure, get_summary=lambda config: [])

        explicit = conftest.make_plugin("explicit", configuration=flow())
        asked = conftest.make_plugin("asked", configuration=flow())
        plain = conftest.make_plugin("plain")
        skipped = conftest.make_plugin(
            "skipped",
            configuration=types.ConfigurationFlow(
                configure=lambda ctx: config_types.PluginConfig(options={"from": "flow"}),
                get_summary=lambda config: [],
                needs_configuration=False,
            ),
        )
        reg = _registry(explicit, asked, plain, skipped)
        runner = _orchestrator(
            project_dir,
            reg,
            logger,
            run_config={"explicit": config_types.PluginConfig(options={"from": "file"})},
        )
        ctx = runner.create_context()

        configs = await runner.configure([explicit, asked, plain, skipped], ctx)

        assert configs["explicit"].options == {"from": "file"}
        assert configs["asked"].options == {"from": "flow"}
        assert configs["plain"] == config_types.PluginConfig()
        assert configs["skipped"] == config_types.PluginConfig()
        assert observed == [["explicit"]]

    @_pytest.mark.asyncio
    async def test_settings_file_config(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """Plugin configs from .initforge/config.yaml reach the run."""
        config_dir = project_dir / ".initforge"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            "plugins:\n  enabled:\n    extra: false\n"
        )
        reg = _registry(conftest.make_plugin("main"), conftest.make_plugin("extra"))

        report = await _orchestrator(project_dir, reg, logger).run()

        assert report.plugins == ["main"]

    @_pytest.mark.asyncio
    async def test_flow_can_disable_plugin(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """A plugin its configuration flow turns off is never loaded."""
        fired: list[str] = []
        reg = _registry(
            conftest.make_plugin(
                "alpha",
                configuration=types.ConfigurationFlow(
                    configure=lambda ctx: config_types.PluginConfig(enabled=False),
                    get_summary=lambda config: [],
                ),
                hooks=types.PluginHooks(
                    before_init=lambda ctx: fired.append("before_init"),
                    execute=lambda ctx: fired.append("execute"),
                ),
                rules=types.RuleContribution("alpha", lambda config, ctx: "# Alpha"),
            ),
            conftest.make_plugin("beta"),
        )
        runner = _orchestrator(project_dir, reg, logger)

        report = await runner.run()

        assert fired == []
        assert report.plugins == ["beta"]
        assert report.configs["alpha"].enabled is False
        assert not (runner.router.rules_dir() / "90-alpha.md").exists()

    @_pytest.mark.asyncio
    async def test_dependent_of_disabled_plugin_aborts(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        reg = _registry(
            conftest.make_plugin(
                "base",
                configuration=types.ConfigurationFlow(
                    configure=lambda ctx: config_types.PluginConfig(enabled=False),
                    get_summary=lambda config: [],
                ),
            ),
            conftest.make_plugin("child", dependencies=["base"]),
        )

        with _pytest.raises(ordering.MissingDependencyError):
            await _orchestrator(project_dir, reg, logger).run()

    @_pytest.mark.asyncio
    async def test_before_init_sees_configs(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        seen: list[str] = []

        def before_init(ctx: context.PluginContext) -> None:
            seen.extend(sorted(ctx.config.plugins))

        reg = _registry(
            conftest.make_plugin("main", hooks=types.PluginHooks(before_init=before_init)),
            conftest.make_plugin("extra"),
        )

        await _orchestrator(project_dir, reg, logger).run()

        assert seen == ["extra", "main"]


class TestFailures:
    """Tests for fatal and non-fatal failures."""

    @_pytest.mark.asyncio
    async def test_hook_failure_aborts(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        def boom(ctx: context.PluginContext) -> None:
            raise RuntimeError("nope")

        reg = _registry(
            conftest.make_plugin(
                "bad",
                hooks=types.PluginHooks(execute=boom),
                rules=types.RuleContribution("bad", lambda config, ctx: "# Bad"),
            )
        )
        runner = _orchestrator(project_dir, reg, logger)

        with _pytest.raises(loader.PluginHookError, match="'bad' failed in hook 'execute'"):
            await runner.run()

        assert not (runner.router.rules_dir() / "90-bad.md").exists()

    @_pytest.mark.asyncio
    async def test_missing_dependency_aborts(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        reg = _registry(conftest.make_plugin("git", dependencies=["project"]))

        with _pytest.raises(ordering.MissingDependencyError):
            await _orchestrator(project_dir, reg, logger).run()

    @_pytest.mark.asyncio
    async def test_artifact_failure_is_reported(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        """A missing command template is a failed result, not an exception."""
        reg = _registry(
            conftest.make_plugin(
                "cmds",
                slash_commands=[
                    types.SlashCommand("ghost", "Ghost", "commands/does-not-exist.md")
                ],
            )
        )

        report = await _orchestrator(project_dir, reg, logger).run()

        assert [r.name for r in report.failures] == ["ghost"]
        assert report.by_type("slash-command")[0].success is False
        assert report.document is not None
        assert report.to_dict()["failed"] == 1

    @_pytest.mark.asyncio
    async def test_missing_template_fails_document(
        self,
        project_dir: _pathlib.Path,
        logger: conftest.RecordingLogger,
        tmp_path: _pathlib.Path,
    ) -> None:
        config = settings.Settings.load(project_dir)
        config.output.template = str(tmp_path / "missing.template")
        runner = orchestrator.Orchestrator(registry.PluginRegistry(), config, logger=logger)

        report = await runner.run()

        assert report.document is None
        assert report.failures[0].name == "AGENT.md"


class TestDocument:
    """Tests for root document options."""

    @_pytest.mark.asyncio
    async def test_custom_template_and_document_name(
        self,
        project_dir: _pathlib.Path,
        logger: conftest.RecordingLogger,
        tmp_path: _pathlib.Path,
    ) -> None:
        template = tmp_path / "custom.template"
        template.write_text("# {{PROJECT_NAME}} v{{VERSION}}\n\n{{EXTRA}}\n\n{{UNUSED}}\n")
        reg = _registry(
            conftest.make_plugin(
                "extra", prompt=types.PromptContribution("EXTRA", lambda config, ctx: "Extra!")
            )
        )
        config = settings.Settings.load(project_dir)
        config.output.template = str(template)
        config.output.document = "CLAUDE.md"
        runner = orchestrator.Orchestrator(reg, config, logger=logger)

        report = await runner.run()

        assert report.document == runner.router.project_root / "CLAUDE.md"
        assert report.document.read_text() == "# demo-project v1.0.0\n\nExtra!\n"


class TestInitializationMarker:
    """Tests for the marker written at the end of a run."""

    @_pytest.mark.asyncio
    async def test_run_writes_marker(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        runner = _orchestrator(project_dir, registry.PluginRegistry(), logger)
        root = runner.router.project_root

        report = await runner.run()

        info = await marker.get_marker_info(root)
        assert info is not None
        assert info.project_name == "demo-project"
        assert info.base_dir == ".agent"
        result = report.by_type("data-file")[-1]
        assert (result.name, result.success) == (constants.MARKER_FILENAME, True)

    @_pytest.mark.asyncio
    async def test_marker_follows_project_data_dir(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        config = settings.Settings.load(project_dir)
        config.output.project_data = ".ai"
        runner = orchestrator.Orchestrator(registry.PluginRegistry(), config, logger=logger)

        await runner.run()

        assert await marker.is_project_initialized(runner.router.project_root, ".ai")


@_pytest.mark.slow
class TestProtectedFiles:
    """Tests for the protected-file pass."""

    @_pytest.mark.asyncio
    async def test_init_command_output_merged(
        self, project_dir: _pathlib.Path, logger: conftest.RecordingLogger
    ) -> None:
        reg = _registry(
            conftest.make_plugin(
                "tool",
                protected_files=[types.ProtectedFile("NOTES.md", "prepend")],
                protected_command="echo theirs > NOTES.md",
            )
        )
        runner = _orchestrator(project_dir, reg, logger)
        notes = runner.router.project_root / "NOTES.md"
        notes.write_text("mine\n")

        report = await runner.run()

        assert [r.success for r in report.by_type("protected-file")] == [True]
        assert notes.read_text() == "theirs\n\n---\n\nmine\n"
