"""
initforge - plugin-driven project initialization for AI agents.

Plugins contribute rules, commands, skills, data files, service
registrations and sections of the root document; the core orders them
by dependency and writes everything into the project.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("initforge")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "initforge Contributors"

from initforge.config import Settings  # noqa: E402
from initforge.plugins import Plugin, PluginMeta, PluginRegistry  # noqa: E402

__all__ = ["__version__", "__version_info__", "Plugin", "PluginMeta", "PluginRegistry", "Settings"]
