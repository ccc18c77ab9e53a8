"""
Plugin registry.

In-memory catalog of plugin descriptors, indexed by name and by command
name. Registration validates the descriptor; iteration follows
registration order.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import pydantic as _pydantic

import initforge.config.types as config_types
import initforge.constants as constants
import initforge.plugins.types as types

_logger = _logging.getLogger(__name__)


class PluginValidationError(types.PluginError, ValueError):
    """Raised when a plugin descriptor is missing fields or has bad types."""

    pass


class PluginConflictError(types.PluginError):
    """Raised when a plugin name or command name is already registered."""

    pass


class PluginNotFoundError(types.PluginError, KeyError):
    """Raised when a plugin is not registered."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class PluginRegistry:
    """
    Registry of plugin descriptors.

    Plugins are registered once at process start and live for the process.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, types.Plugin] = {}
        self._command_index: dict[str, str] = {}

    def register(self, plugin: types.Plugin) -> None:
        """
        Register a plugin.

        Args:
            plugin: Plugin descriptor.

        Raises:
            PluginValidationError: If the descriptor is invalid.
            PluginConflictError: If the name or command name is taken.
        """
        _validate_plugin(plugin)
        meta = plugin.meta

        if meta.name in self._plugins:
            raise PluginConflictError(
                f"Plugin with name '{meta.name}' is already registered"
            )

        if meta.command_name in self._command_index:
            existing = self._command_index[meta.command_name]
            raise PluginConflictError(
                f"Plugin commandName '{meta.command_name}' is already used "
                f"by plugin '{existing}'"
            )

        self._plugins[meta.name] = plugin
        self._command_index[meta.command_name] = meta.name
        _logger.debug("Registered plugin %s (%s)", meta.name, meta.version)

    def get(self, name: str) -> types.Plugin:
        """
        Get a plugin by name.

        Raises:
            PluginNotFoundError: If no plugin has this name.
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            raise PluginNotFoundError(f"Plugin '{name}' not found in registry")
        return plugin

    def get_by_command_name(self, command_name: str) -> types.Plugin | None:
        """Get a plugin by its command name, or None."""
        name = self._command_index.get(command_name)
        return self._plugins.get(name) if name is not None else None

    def get_all(self) -> list[types.Plugin]:
        """All plugins in registration order."""
        return list(self._plugins.values())

    def has(self, name: str) -> bool:
        """Whether a plugin with this name is registered."""
        return name in self._plugins

    def get_enabled(
        self,
        config: _typing.Mapping[str, config_types.PluginConfig],
    ) -> list[types.Plugin]:
        """
        Plugins not explicitly disabled by the run configuration.

        Plugins absent from ``config`` are enabled by default.

        Args:
            config: Mapping of plugin name to run config.

        Returns:
            Enabled plugins in registration order.
        """
        enabled = []
        for plugin in self._plugins.values():
            plugin_config = config.get(plugin.meta.name)
            if plugin_config is not None and plugin_config.enabled is False:
                continue
            enabled.append(plugin)
        return enabled

    def count(self) -> int:
        """Number of registered plugins."""
        return len(self._plugins)

    def clear(self) -> None:
        """Remove all plugins."""
        self._plugins.clear()
        self._command_index.clear()

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> _typing.Iterator[types.Plugin]:
        return iter(list(self._plugins.values()))

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert registry state to dictionary for JSON serialization."""
        return {
            "plugins": [p.to_dict() for p in self._plugins.values()],
            "count": len(self._plugins),
        }


def _validate_plugin(plugin: types.Plugin) -> None:
    """
    Validate a plugin descriptor.

    Raises:
        PluginValidationError: If validation fails.
    """
    if not isinstance(plugin, types.Plugin):
        raise PluginValidationError(
            f"Plugin must be a Plugin descriptor, got {type(plugin).__name__}"
        )

    meta = plugin.meta
    if isinstance(meta, _typing.Mapping):
        meta = _validate_meta(dict(meta), "<unnamed>")
        plugin.meta = meta
    elif isinstance(meta, types.PluginMeta):
        # Re-validate: model_construct() bypasses field checks
        _validate_meta(meta.model_dump(), meta.name if isinstance(meta.name, str) else "<unnamed>")
    else:
        raise PluginValidationError("Plugin must have metadata")

    name = meta.name

    if plugin.hooks is not None:
        if not isinstance(plugin.hooks, types.PluginHooks):
            raise PluginValidationError(f"Plugin '{name}' hooks must be PluginHooks")
        for hook_name in constants.HOOK_NAMES:
            hook_fn = getattr(plugin.hooks, hook_name)
            if hook_fn is not None and not callable(hook_fn):
                raise PluginValidationError(
                    f"Plugin '{name}' hook '{hook_name}' must be a function"
                )

    if plugin.configuration is not None:
        flow = plugin.configuration
        if not isinstance(flow.needs_configuration, bool):
            raise PluginValidationError(
                f"Plugin '{name}' configuration.needs_configuration must be a boolean"
            )
        if not callable(flow.configure):
            raise PluginValidationError(
                f"Plugin '{name}' configuration.configure must be a function"
            )
        if not callable(flow.get_summary):
            raise PluginValidationError(
                f"Plugin '{name}' configuration.get_summary must be a function"
            )

    _check_list(name, "slash_commands", plugin.slash_commands, types.SlashCommand)
    _check_list(name, "skills", plugin.skills, types.Skill)
    _check_list(
        name, "external_services", plugin.external_services, types.ExternalServiceConfig
    )
    _check_list(name, "protected_files", plugin.protected_files, types.ProtectedFile)

    for command in plugin.slash_commands:
        if not command.name or not command.description:
            raise PluginValidationError(
                f"Plugin '{name}' slash command must have a name and description"
            )

    for service in plugin.external_services:
        if service.condition is not None and not callable(service.condition):
            raise PluginValidationError(
                f"Plugin '{name}' service '{service.name}' condition must be a function"
            )

    accessors: dict[str, _typing.Any] = {
        "rules.generate": plugin.rules.generate if plugin.rules else None,
        "prompt.generate": plugin.prompt.generate if plugin.prompt else None,
        "outputs.generate": plugin.outputs.generate if plugin.outputs else None,
        "gitignore.get_patterns": plugin.gitignore.get_patterns if plugin.gitignore else None,
        "merge_file": plugin.merge_file,
    }
    for label, accessor in accessors.items():
        if accessor is not None and not callable(accessor):
            raise PluginValidationError(f"Plugin '{name}' {label} must be a function")

    if plugin.rules is not None and not plugin.rules.base_name:
        raise PluginValidationError(f"Plugin '{name}' rules must have a base_name")

    if plugin.prompt is not None and not plugin.prompt.placeholder:
        raise PluginValidationError(f"Plugin '{name}' prompt must have a placeholder")


def _validate_meta(data: dict[str, _typing.Any], label: str) -> types.PluginMeta:
    """Validate raw metadata, converting pydantic errors."""
    try:
        return types.PluginMeta.model_validate(data)
    except _pydantic.ValidationError as e:
        name = data.get("name")
        label = name if isinstance(name, str) and name else label
        raise PluginValidationError(f"Invalid metadata for plugin '{label}': {e}") from e


def _check_list(
    name: str,
    field: str,
    value: _typing.Any,
    item_type: type,
) -> None:
    """Check that a declaration field is a list of the expected type."""
    if not isinstance(value, (list, tuple)):
        raise PluginValidationError(f"Plugin '{name}' {field} must be a list")
    for item in value:
        if not isinstance(item, item_type):
            raise PluginValidationError(
                f"Plugin '{name}' {field} entries must be {item_type.__name__}"
            )
