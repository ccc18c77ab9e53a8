"""
Gitignore contributions.

Plugins contribute ignore patterns. The writer renders them as a managed
block (one commented section per plugin) and reconciles the block into
the project's ``.gitignore`` with the ignore-file merge, so existing
entries are never removed or duplicated.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.constants as constants
import initforge.core.merge as merge
import initforge.core.resource_writer as resource_writer
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.utils.file_ops as file_ops

_logger = _logging.getLogger(__name__)

GITIGNORE_FILENAME = ".gitignore"


@_dataclasses.dataclass(frozen=True)
class GitignoreSection:
    """Patterns contributed by one plugin."""

    plugin: str
    patterns: tuple[str, ...]
    comment: str | None = None


class GitignoreWriter:
    """Collects plugin ignore patterns and writes them to .gitignore."""

    def __init__(self, logger: console.Logger) -> None:
        self._logger = logger
        self._sections: dict[str, GitignoreSection] = {}
        self._failures: list[resource_writer.WriteResult] = []

    @property
    def sections(self) -> list[GitignoreSection]:
        return list(self._sections.values())

    @property
    def failures(self) -> list[resource_writer.WriteResult]:
        """Plugins whose pattern accessor raised during collection."""
        return list(self._failures)

    def add_section(self, section: GitignoreSection) -> None:
        """Add (or replace) a plugin's section."""
        self._sections[section.plugin] = section

    def collect(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
    ) -> list[GitignoreSection]:
        """
        Add a section for every active plugin with gitignore patterns.

        A plugin whose ``get_patterns`` raises contributes no section and
        is recorded in ``failures``.
        """
        for plugin in plugins:
            if plugin.gitignore is None or not resource_writer.is_active(plugin, configs):
                continue
            name = plugin.meta.name
            try:
                patterns = tuple(plugin.gitignore.get_patterns(configs[name]))
            except Exception as e:
                self._logger.warning(f"Failed to collect gitignore patterns for {name}: {e}")
                self._failures.append(
                    resource_writer.WriteResult(
                        "gitignore", name, GITIGNORE_FILENAME, False, str(e)
                    )
                )
                continue
            if patterns:
                self.add_section(GitignoreSection(name, patterns, plugin.gitignore.comment))
        return self.sections

    def generate(self) -> str:
        """Render the managed block."""
        lines = [constants.GITIGNORE_HEADER, ""]
        for section in self._sections.values():
            lines.append(f"# {section.plugin} plugin")
            if section.comment:
                lines.append(f"# {section.comment}")
            lines.extend(section.patterns)
            lines.append("")
        return "\n".join(lines)

    async def write(
        self, target_dir: _pathlib.Path | str, filename: str = GITIGNORE_FILENAME
    ) -> resource_writer.WriteResult | None:
        """
        Merge the managed block into ``target_dir/filename``.

        Returns:
            The write result, or None when no plugin contributed patterns.
        """
        if not self._sections:
            return None

        target = _pathlib.Path(target_dir) / filename
        try:
            prior = await file_ops.read_file(target) if await file_ops.file_exists(target) else None
            content = merge.merge_ignore(
                prior, self.generate(), header=constants.GITIGNORE_HEADER
            )
            if content != prior:
                await file_ops.write_file(target, content)
            else:
                _logger.debug("%s already contains every pattern", target)
        except Exception as e:
            self._logger.warning(f"Failed to update {filename}: {e}")
            return resource_writer.WriteResult("gitignore", filename, str(target), False, str(e))

        self._logger.success(f"Updated: {filename}")
        return resource_writer.WriteResult("gitignore", filename, str(target), True)
