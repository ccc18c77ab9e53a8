"""
Plugin context.

A per-run bundle of collaborator handles passed to every plugin call:
logger, file operations, templates, interactive UI, localization, and
the ``shared`` store through which earlier plugins publish data for
later ones.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import initforge.config.types as config_types
import initforge.core.template_engine as template_engine
import initforge.i18n as i18n
import initforge.ui.console as console
import initforge.ui.prompts as prompts
import initforge.utils.file_ops as file_ops

T = _typing.TypeVar("T")


class SharedStore(_abc.MutableMapping[str, _typing.Any]):
    """
    Run-scoped key-value store shared between plugins.

    Plugins run one at a time in dependency order, so a value written by
    a plugin is visible to every plugin that runs after it. A new store
    is created for each context.
    """

    def __init__(self, initial: _typing.Mapping[str, _typing.Any] | None = None) -> None:
        self._data: dict[str, _typing.Any] = dict(initial or {})

    def __getitem__(self, key: str) -> _typing.Any:
        return self._data[key]

    def __setitem__(self, key: str, value: _typing.Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SharedStore({self._data!r})"

    def require(self, key: str, expected: type[T]) -> T:
        """
        Get a value that an earlier plugin must have published.

        Raises:
            KeyError: If the key is absent.
            TypeError: If the value is not an instance of ``expected``.
        """
        if key not in self._data:
            raise KeyError(f"Shared value '{key}' has not been published")
        value = self._data[key]
        if not isinstance(value, expected):
            raise TypeError(
                f"Shared value '{key}' is {type(value).__name__}, "
                f"expected {expected.__name__}"
            )
        return value


@_dataclasses.dataclass
class SharedConfig:
    """Configuration visible to plugins during a run."""

    project_name: str
    project_root: _pathlib.Path
    plugins: dict[str, config_types.PluginConfig] = _dataclasses.field(
        default_factory=dict
    )
    language: config_types.LanguageConfig = _dataclasses.field(
        default_factory=config_types.LanguageConfig
    )

    def plugin_config(self, name: str) -> config_types.PluginConfig | None:
        """Run config for a plugin, or None if it has none yet."""
        return self.plugins.get(name)


@_dataclasses.dataclass
class PluginContext:
    """Collaborators and shared state for one run."""

    project_root: _pathlib.Path
    target_dir: _pathlib.Path
    config: SharedConfig
    logger: console.Logger
    fs: _typing.Any
    """File operations facade (see utils.file_ops.FileOperations)."""

    template: _typing.Any
    """Template facade (see core.template_engine.TemplateEngine)."""

    ui: prompts.UIComponents
    i18n: i18n.I18n
    shared: SharedStore = _dataclasses.field(default_factory=SharedStore)


@_dataclasses.dataclass
class ConfigurationContext:
    """What a plugin's configuration flow can see."""

    project_name: str
    project_root: _pathlib.Path
    other_plugins: _typing.Mapping[str, config_types.PluginConfig]
    """Configs gathered so far for plugins earlier in the order."""

    ui: prompts.UIComponents
    logger: console.Logger


def create_plugin_context(
    project_root: _pathlib.Path | str,
    *,
    target_dir: _pathlib.Path | str | None = None,
    project_name: str | None = None,
    plugin_configs: _typing.Mapping[str, config_types.PluginConfig] | None = None,
    language: config_types.LanguageConfig | None = None,
    logger: console.Logger | None = None,
    ui: prompts.UIComponents | None = None,
    translator: i18n.I18n | None = None,
    fs: _typing.Any = None,
    template: _typing.Any = None,
) -> PluginContext:
    """
    Create a plugin context.

    Collaborators that are not supplied get defaults: a console logger,
    real file operations, the template engine, a non-interactive UI and
    an identity translator.

    Args:
        project_root: Project root directory.
        target_dir: Directory being initialized (defaults to project_root).
        project_name: Project name (defaults to the root directory name).
        plugin_configs: Run config per plugin.
        language: Language preferences.
        logger: Structured logger.
        ui: Interactive UI.
        translator: Localization.
        fs: File operations facade.
        template: Template facade.

    Returns:
        A new context with an empty shared store.
    """
    root = _pathlib.Path(project_root)
    return PluginContext(
        project_root=root,
        target_dir=_pathlib.Path(target_dir) if target_dir is not None else root,
        config=SharedConfig(
            project_name=project_name or root.name,
            project_root=root,
            plugins=dict(plugin_configs or {}),
            language=language or config_types.LanguageConfig(),
        ),
        logger=logger or console.ConsoleLogger(),
        fs=fs or file_ops.FileOperations(),
        template=template or template_engine.TemplateEngine(),
        ui=ui or prompts.NonInteractiveUI(),
        i18n=translator or i18n.IdentityTranslator(),
        shared=SharedStore(),
    )
