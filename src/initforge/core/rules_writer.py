"""
Rules writer.

Writes each plugin's rules fragment to the rules directory as
``{priority:02d}-{base_name}.md`` (init.d style), so the agent reads
them in priority order.
"""

from __future__ import annotations

import datetime as _datetime
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.constants as constants
import initforge.core.output_router as output_router
import initforge.core.resource_writer as resource_writer
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.utils.file_ops as file_ops

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

_logger = _logging.getLogger(__name__)

PROJECT_RULES_BASE_NAME = "project"


def format_priority(priority: int) -> str:
    """Two-digit priority (``5`` -> ``"05"``)."""
    return f"{priority:02d}"


def rules_filename(priority: int, base_name: str) -> str:
    """Rules file name, e.g. ``30-git.md``."""
    return f"{format_priority(priority)}-{base_name}.md"


def add_paths_frontmatter(content: str, paths: str | None) -> str:
    """Prefix a ``paths`` frontmatter block when a path filter is given."""
    if not paths:
        return content
    return f"---\npaths: {paths}\n---\n\n{content}"


def project_rules_content(
    project_name: str,
    version: str,
    routes: output_router.OutputRoutes,
    *,
    today: _datetime.date | None = None,
) -> str:
    """Body of the ``00-project.md`` rules file."""
    updated = (today or _datetime.date.today()).isoformat()
    return (
        f"# {project_name}\n"
        f"\n"
        f"**Version**: {version}\n"
        f"**Last Updated**: {updated}\n"
        f"\n"
        f"This project uses initforge for structured AI agent configuration.\n"
        f"\n"
        f"## Project Structure\n"
        f"\n"
        f"- `{routes.rules}/` - Rules for agent behavior (this directory)\n"
        f"- `{routes.slash_commands}/` - Slash commands\n"
        f"- `{routes.skills}/` - Skill definitions\n"
        f"- `{routes.project_data}/` - Project data\n"
    )


class RulesWriter:
    """Writes plugin rules files into the rules directory."""

    def __init__(
        self,
        router: output_router.OutputRouter,
        logger: console.Logger,
    ) -> None:
        self._router = router
        self._logger = logger

    @property
    def rules_dir(self) -> _pathlib.Path:
        return self._router.rules_dir()

    async def write_plugin_rules(
        self,
        plugin: types.Plugin,
        plugin_config: types.PluginConfig,
        ctx: context.PluginContext,
    ) -> resource_writer.WriteResult | None:
        """
        Write one plugin's rules file.

        Returns:
            The write result, or None when there was nothing to write
            (no rules, plugin disabled, or empty content).
        """
        if plugin.rules is None or not plugin_config.enabled:
            return None

        name = plugin.meta.name
        filename = rules_filename(plugin.meta.rules_priority, plugin.rules.base_name)
        target = self.rules_dir / filename

        try:
            content = await types.resolve(plugin.rules.generate(plugin_config, ctx))
            if not content or not content.strip():
                _logger.debug("Rules for %s are empty; skipping", name)
                return None
            await file_ops.write_file(target, add_paths_frontmatter(content, plugin.rules.paths))
        except Exception as e:
            self._logger.warning(f"Failed to write rules for {name}: {e}")
            return resource_writer.WriteResult("rule", name, str(target), False, str(e))

        self._logger.success(f"Generated: {self._router.display_path(target)}")
        return resource_writer.WriteResult("rule", name, str(target), True)

    async def write_all_plugin_rules(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[resource_writer.WriteResult]:
        """
        Write rules for every plugin, lowest priority first.

        The sort is stable, so plugins with equal priority keep the order
        they are given in. Plugins without a run config are skipped.
        """
        results = []
        for plugin in sorted(plugins, key=lambda p: p.meta.rules_priority):
            plugin_config = configs.get(plugin.meta.name)
            if plugin_config is None:
                continue
            result = await self.write_plugin_rules(plugin, plugin_config, ctx)
            if result is not None:
                results.append(result)
        return results

    async def write_project_rules(
        self, project_name: str, version: str
    ) -> resource_writer.WriteResult:
        """Write ``00-project.md`` describing the project layout."""
        content = project_rules_content(project_name, version, self._router.routes)
        return await self._write_fixed(
            PROJECT_RULES_BASE_NAME, content, constants.RULES_PRIORITY_PROJECT
        )

    async def write_migrated_rules(
        self, plugin_name: str, content: str, priority: int
    ) -> resource_writer.WriteResult:
        """Write content moved out of another document as a plugin's rules file."""
        return await self._write_fixed(plugin_name, content, priority)

    async def _write_fixed(
        self, base_name: str, content: str, priority: int
    ) -> resource_writer.WriteResult:
        target = self.rules_dir / rules_filename(priority, base_name)
        try:
            await file_ops.write_file(target, content)
        except Exception as e:
            self._logger.warning(f"Failed to write rules for {base_name}: {e}")
            return resource_writer.WriteResult("rule", base_name, str(target), False, str(e))

        self._logger.success(f"Generated: {self._router.display_path(target)}")
        return resource_writer.WriteResult("rule", base_name, str(target), True)
