"""
Resource writer for plugin-declared artifacts.

Plugins declare slash commands, skills and data files; the writer loads
templates, resolves target paths through the output router and writes
the files. Every attempted artifact yields a WriteResult. Failures are
recorded and logged as warnings, never raised, so one bad artifact does
not stop the pass.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.config.types as config_types
import initforge.core.merge as merge
import initforge.core.output_router as output_router
import initforge.core.template_engine as template_engine
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.utils.file_ops as file_ops

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

_logger = _logging.getLogger(__name__)

WriteType = _typing.Literal[
    "slash-command",
    "skill",
    "data-file",
    "rule",
    "external-service",
    "gitignore",
    "protected-file",
]

PluginConfigs = _typing.Mapping[str, config_types.PluginConfig]


@_dataclasses.dataclass
class WriteResult:
    """Outcome of one attempted artifact write."""

    type: WriteType
    name: str
    path: str
    """Target path (or the full command line for external services)."""

    success: bool
    error: str | None = None
    scope: str | None = None
    """Registration scope (external services only)."""

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, _typing.Any] = {
            "type": self.type,
            "name": self.name,
            "path": self.path,
            "success": self.success,
        }
        if self.error is not None:
            result["error"] = self.error
        if self.scope is not None:
            result["scope"] = self.scope
        return result


@_dataclasses.dataclass(frozen=True)
class WriteSummary:
    """Success and failure counts for a list of results."""

    succeeded: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @classmethod
    def from_results(cls, results: _typing.Iterable[WriteResult]) -> WriteSummary:
        succeeded = failed = 0
        for result in results:
            if result.success:
                succeeded += 1
            else:
                failed += 1
        return cls(succeeded=succeeded, failed=failed)

    def __str__(self) -> str:
        return f"{self.succeeded} succeeded, {self.failed} failed"


def summarize(results: _typing.Iterable[WriteResult]) -> WriteSummary:
    """Count successes and failures."""
    return WriteSummary.from_results(results)


def is_active(plugin: types.Plugin, configs: PluginConfigs) -> bool:
    """Whether a plugin has a run config and it is enabled."""
    plugin_config = configs.get(plugin.meta.name)
    return plugin_config is not None and plugin_config.enabled


class ResourceWriter:
    """Writes slash commands, skills and data files declared by plugins."""

    def __init__(
        self,
        router: output_router.OutputRouter,
        template_loader: template_engine.TemplateLoader,
        logger: console.Logger,
    ) -> None:
        self._router = router
        self._templates = template_loader
        self._logger = logger

    async def write_all_resources(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[WriteResult]:
        """
        Write every resource: slash commands, then skills, then data files.

        Args:
            plugins: Plugins in execution order.
            configs: Run config per plugin name.
            ctx: Plugin context passed to output generators.

        Returns:
            One result per attempted artifact.
        """
        results: list[WriteResult] = []
        results.extend(await self.write_slash_commands(plugins, configs))
        results.extend(await self.write_skills(plugins, configs))
        results.extend(await self.write_data_files(plugins, configs, ctx))
        return results

    async def write_slash_commands(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
    ) -> list[WriteResult]:
        results = []
        for command in self.collect_slash_commands(plugins, configs):
            target = self._router.slash_command_path(command.name)
            results.append(
                await self._write_template(
                    "slash-command", command.name, command.template_path, target
                )
            )
        return results

    async def write_skills(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
    ) -> list[WriteResult]:
        results = []
        for skill in self.collect_skills(plugins, configs):
            target = self._router.skill_path(skill.name)
            results.append(
                await self._write_template("skill", skill.name, skill.template_path, target)
            )
        return results

    async def write_data_files(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[WriteResult]:
        """
        Write the data files each plugin's ``outputs.generate`` returns.

        A plugin whose generator raises is logged and skipped; none of its
        files are attempted.
        """
        results: list[WriteResult] = []
        for plugin in plugins:
            if plugin.outputs is None or not is_active(plugin, configs):
                continue

            plugin_config = configs[plugin.meta.name]
            try:
                outputs = await types.resolve(plugin.outputs.generate(plugin_config, ctx))
            except Exception as e:
                self._logger.warning(
                    f"Failed to generate outputs for {plugin.meta.name}: {e}"
                )
                _logger.warning(
                    "outputs.generate failed for %s", plugin.meta.name, exc_info=True
                )
                continue

            for output in outputs:
                results.append(await self._write_data_file(output))
        return results

    def collect_slash_commands(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
    ) -> list[types.SlashCommand]:
        """Slash commands of active plugins, in plugin then declaration order."""
        commands: list[types.SlashCommand] = []
        for plugin in plugins:
            if plugin.slash_commands and is_active(plugin, configs):
                commands.extend(plugin.slash_commands)
        return commands

    def collect_skills(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: PluginConfigs,
    ) -> list[types.Skill]:
        """Skills of active plugins, in plugin then declaration order."""
        skills: list[types.Skill] = []
        for plugin in plugins:
            if plugin.skills and is_active(plugin, configs):
                skills.extend(plugin.skills)
        return skills

    async def _write_template(
        self,
        kind: WriteType,
        name: str,
        template_path: str,
        target: _pathlib.Path,
    ) -> WriteResult:
        try:
            content = await self._templates.load(template_path)
            await file_ops.write_file(target, content)
        except Exception as e:
            label = kind.replace("-", " ")
            self._logger.warning(f"Failed to create {label} {name}: {e}")
            return WriteResult(kind, name, str(target), False, str(e))

        self._logger.info(f"Created: {self._router.display_path(target)}")
        return WriteResult(kind, name, str(target), True)

    async def _write_data_file(self, output: types.DataFileOutput) -> WriteResult:
        target = self._router.data_file_path(output.path, output.scope)
        try:
            content = output.content
            if output.merge:
                content = await self._merge_existing(target, output)
            await file_ops.write_file(target, content)
        except Exception as e:
            self._logger.warning(f"Failed to create {output.path}: {e}")
            return WriteResult("data-file", output.path, str(target), False, str(e))

        self._logger.info(f"Created: {self._router.display_path(target)}")
        return WriteResult("data-file", output.path, str(target), True)

    async def _merge_existing(
        self, target: _pathlib.Path, output: types.DataFileOutput
    ) -> str:
        merger = merge.get_merger(output.format)
        if merger is None or not await file_ops.file_exists(target):
            return output.content
        prior = await file_ops.read_file(target)
        _logger.debug("Merging %s into existing %s", output.format, target)
        return merger(prior, output.content)
