"""
Plugin loading and lifecycle hook execution.

PluginLoader resolves a dependency-respecting order over the enabled
plugins and fires lifecycle hooks in that order. Hooks are fatal: the
first failure stops the pass and is reported with the plugin and hook
that raised it.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import initforge.config.types as config_types
import initforge.constants as constants
import initforge.plugins.context as context
import initforge.plugins.ordering as ordering
import initforge.plugins.registry as registry
import initforge.plugins.types as types

_logger = _logging.getLogger(__name__)


class PluginHookError(types.PluginError):
    """Raised when a lifecycle hook fails. ``__cause__`` is the original error."""

    def __init__(self, plugin: str, hook: str, error: BaseException) -> None:
        self.plugin = plugin
        self.hook = hook
        super().__init__(f"Plugin '{plugin}' failed in hook '{hook}': {error}")


class PluginLoader:
    """
    Loads enabled plugins in dependency order and runs their hooks.

    ``load`` records the ordered set without invoking any hook; hooks run
    only through ``execute_hook``.
    """

    def __init__(self, plugin_registry: registry.PluginRegistry) -> None:
        self._registry = plugin_registry
        self._loaded: list[types.Plugin] = []

    async def load(
        self,
        config: _typing.Mapping[str, config_types.PluginConfig],
        ctx: context.PluginContext,
    ) -> list[types.Plugin]:
        """
        Resolve and record the execution order of enabled plugins.

        Args:
            config: Run config per plugin name.
            ctx: Plugin context (used for progress logging).

        Returns:
            Enabled plugins in execution order.

        Raises:
            MissingDependencyError: If a dependency is not enabled.
            CircularDependencyError: If the dependencies form a cycle.
        """
        enabled = self._registry.get_enabled(config)
        ordered = self.sort_by_dependencies(enabled)

        for plugin in ordered:
            ctx.logger.info(f"Loading plugin: {plugin.meta.name}")

        self._loaded = ordered
        _logger.debug("Plugin order: %s", [p.meta.name for p in ordered])
        return list(ordered)

    async def execute_hook(self, hook_name: str, ctx: context.PluginContext) -> None:
        """
        Run a lifecycle hook on every loaded plugin that defines it.

        Args:
            hook_name: One of before_init, execute, after_init, cleanup.
            ctx: Plugin context passed to each hook.

        Raises:
            ValueError: If ``hook_name`` is not a lifecycle hook.
            PluginHookError: On the first hook that raises.
        """
        if hook_name not in constants.HOOK_NAMES:
            raise ValueError(
                f"Unknown hook '{hook_name}'. "
                f"Valid hooks: {', '.join(constants.HOOK_NAMES)}"
            )

        for plugin in self._loaded:
            hook = plugin.get_hook(hook_name)
            if hook is None:
                continue
            _logger.debug("Running %s hook for %s", hook_name, plugin.meta.name)
            try:
                await types.resolve(hook(ctx))
            except Exception as e:
                raise PluginHookError(plugin.meta.name, hook_name, e) from e

    def get_loaded_plugins(self) -> list[types.Plugin]:
        """Loaded plugins in execution order."""
        return list(self._loaded)

    def set_loaded_plugins(self, plugins: _typing.Sequence[types.Plugin]) -> None:
        """Replace the loaded set (already ordered)."""
        self._loaded = list(plugins)

    def clear(self) -> None:
        """Forget the loaded set."""
        self._loaded = []

    def sort_by_dependencies(
        self, plugins: _typing.Sequence[types.Plugin]
    ) -> list[types.Plugin]:
        """
        Sort plugins so each follows its dependencies.

        Raises:
            MissingDependencyError: If a dependency is not in ``plugins``.
            CircularDependencyError: If the dependencies form a cycle.
        """
        return ordering.sort_plugins(plugins)
