"""
Built-in plugins.

Statically linked plugins registered by the CLI. Registration order is
the order of BUILTIN_PLUGINS.
"""

from initforge.builtin import git, language, project
from initforge.plugins.registry import PluginRegistry

BUILTIN_PLUGINS = (project.create_plugin, language.create_plugin, git.create_plugin)


def register_builtin_plugins(registry: PluginRegistry) -> None:
    """Register every built-in plugin."""
    for create_plugin in BUILTIN_PLUGINS:
        registry.register(create_plugin())


__all__ = ["BUILTIN_PLUGINS", "register_builtin_plugins"]
