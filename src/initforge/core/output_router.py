"""
Output routing.

Maps logical artifact categories (slash command, skill, rule, project or
user data file) to concrete paths under the project root or the user's
home directory.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import initforge.constants as constants

if _typing.TYPE_CHECKING:
    import initforge.config.types as config_types


@_dataclasses.dataclass(frozen=True)
class OutputRoutes:
    """Directories for each artifact category."""

    slash_commands: str = f"{constants.CLAUDE_DIR}/{constants.COMMANDS_SUBDIR}"
    skills: str = f"{constants.CLAUDE_DIR}/{constants.SKILLS_SUBDIR}"
    rules: str = f"{constants.CLAUDE_DIR}/{constants.RULES_SUBDIR}"
    project_data: str = constants.DEFAULT_AGENT_DIR
    user_data: str = constants.DEFAULT_USER_DATA_DIR

    @classmethod
    def from_config(cls, output: config_types.OutputConfig) -> OutputRoutes:
        """Build routes from the ``output`` settings section."""
        return cls(
            slash_commands=output.slash_commands,
            skills=output.skills,
            rules=output.rules,
            project_data=output.project_data,
            user_data=output.user_data,
        )


class OutputRouter:
    """Resolves artifact paths for one project."""

    def __init__(
        self,
        project_root: _pathlib.Path | str,
        routes: OutputRoutes | None = None,
        *,
        home: _pathlib.Path | None = None,
    ) -> None:
        """
        Args:
            project_root: Project root directory.
            routes: Directory routes (defaults to OutputRoutes()).
            home: Home directory used for ``~`` (defaults to Path.home()).
        """
        self._root = _pathlib.Path(project_root)
        self._routes = routes or OutputRoutes()
        self._home = home

    @property
    def project_root(self) -> _pathlib.Path:
        return self._root

    @property
    def routes(self) -> OutputRoutes:
        return self._routes

    @property
    def home(self) -> _pathlib.Path:
        return self._home if self._home is not None else _pathlib.Path.home()

    def _expand(self, path: str) -> _pathlib.Path:
        if path == "~" or path.startswith("~/"):
            return self.home / path[2:]
        return _pathlib.Path(path)

    def slash_command_path(self, name: str) -> _pathlib.Path:
        """``<root>/<slash_commands>/<name>.md``"""
        return self._root / self._routes.slash_commands / f"{name}.md"

    def skill_path(self, name: str) -> _pathlib.Path:
        """``<root>/<skills>/<name>/SKILL.md``"""
        return self._root / self._routes.skills / name / constants.SKILL_FILENAME

    def rules_dir(self) -> _pathlib.Path:
        return self._root / self._routes.rules

    def project_data_path(self, relative_path: str) -> _pathlib.Path:
        return self._root / self._routes.project_data / relative_path

    def user_data_path(self, relative_path: str) -> _pathlib.Path:
        return self._expand(self._routes.user_data) / relative_path

    def data_file_path(self, relative_path: str, scope: str) -> _pathlib.Path:
        """Route a data file by scope (``project`` or ``user``)."""
        if scope == "user":
            return self.user_data_path(relative_path)
        return self.project_data_path(relative_path)

    def display_path(self, path: _pathlib.Path | str) -> str:
        """
        Short form of a path for messages.

        Project-relative when under the root, ``~``-prefixed when under
        the home directory, otherwise unchanged.
        """
        target = _pathlib.Path(path)
        if target.is_relative_to(self._root):
            return str(target.relative_to(self._root))
        if target.is_relative_to(self.home):
            return str(_pathlib.Path("~") / target.relative_to(self.home))
        return str(target)
