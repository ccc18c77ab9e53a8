"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with INITFORGE_ prefix
3. Layered YAML config files:
   - Project config: .initforge/config.yaml (highest)
   - User config: ~/.config/initforge/config.yaml

Nested config uses double underscore delimiter:
  INITFORGE_REGISTRATION__TIMEOUT=60
  INITFORGE_LANGUAGE__USER=zh
"""

import contextvars as _contextvars
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import initforge.config.sources as sources
import initforge.config.types as types

# Project root used to locate .initforge/config.yaml while settings load
_project_root_var: _contextvars.ContextVar[_pathlib.Path | None] = _contextvars.ContextVar(
    "initforge_project_root", default=None
)


class Settings(_pydantic_settings.BaseSettings):
    """
    initforge configuration settings.

    All settings can be overridden via environment variables with INITFORGE_ prefix.
    For nested config, use double underscore: INITFORGE_OUTPUT__DOCUMENT=CLAUDE.md

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (INITFORGE_*)
    3. Project config (.initforge/config.yaml)
    4. User config (~/.config/initforge/config.yaml)
    5. Field defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="INITFORGE_",
        env_nested_delimiter="__",  # INITFORGE_REGISTRATION__TIMEOUT
        extra="allow",
    )

    project: types.ProjectConfig = _pydantic.Field(default_factory=types.ProjectConfig)
    output: types.OutputConfig = _pydantic.Field(default_factory=types.OutputConfig)
    registration: types.RegistrationConfig = _pydantic.Field(
        default_factory=types.RegistrationConfig
    )
    language: types.LanguageConfig = _pydantic.Field(default_factory=types.LanguageConfig)
    plugins: types.PluginsConfig = _pydantic.Field(default_factory=types.PluginsConfig)

    verbose: bool = False
    """Enable debug logging."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (INITFORGE_* env vars)
        3. yaml_settings (layered config.yaml)
        4. (defaults via Field definitions), lowest
        """
        project_root = _project_root_var.get() or _pathlib.Path.cwd()
        return (
            init_settings,
            env_settings,
            sources.YamlLayersSettingsSource(settings_cls, project_root),
            file_secret_settings,
        )

    @classmethod
    def load(
        cls,
        project_root: _pathlib.Path | str | None = None,
        **kwargs: _typing.Any,
    ) -> "Settings":
        """
        Load settings for a project directory.

        Args:
            project_root: Directory whose .initforge/config.yaml is read.
                Defaults to the current working directory.
            **kwargs: Explicit overrides (highest precedence).
        """
        root = _pathlib.Path(project_root) if project_root is not None else None
        token = _project_root_var.set(root)
        try:
            settings = cls(**kwargs)
        finally:
            _project_root_var.reset(token)
        if root is not None and settings.project.root is None:
            settings.project.root = str(root)
        return settings

    @property
    def project_root(self) -> _pathlib.Path:
        """Resolved project root directory."""
        if self.project.root:
            return _pathlib.Path(self.project.root).expanduser().resolve()
        return _pathlib.Path.cwd()

    @property
    def project_name(self) -> str:
        """Project name, defaulting to the root directory name."""
        return self.project.name or self.project_root.name

    def plugin_configs(self) -> dict[str, types.PluginConfig]:
        """
        Run configuration for every plugin mentioned in settings.

        Plugins not mentioned are absent and therefore enabled by default.
        """
        return self.plugins.to_run_config()

    def get_plugin_config(self, name: str) -> types.PluginConfig:
        """Effective config for one plugin (defaults if not configured)."""
        return self.plugins.get_plugin_config(name)


def load_run_config(path: _pathlib.Path | str) -> dict[str, types.PluginConfig]:
    """
    Load an explicit run configuration file.

    The file maps plugin names to ``{enabled, options}``, either at the top
    level or under a ``plugins`` key. An ``enabled`` mapping of quick
    toggles is accepted as in the settings file.

    Args:
        path: YAML file path.

    Returns:
        Mapping of plugin name to run config.

    Raises:
        ConfigFileError: If the file is missing, unreadable, malformed, or
            contains invalid plugin entries.
    """
    config_path = _pathlib.Path(path)
    if not config_path.is_file():
        raise sources.ConfigFileError(config_path, "file not found")

    data = sources.load_yaml_file(config_path) or {}
    section = data.get("plugins", data)
    if not isinstance(section, dict):
        raise sources.ConfigFileError(config_path, "'plugins' must be a mapping")

    try:
        plugins = types.PluginsConfig.model_validate(section)
    except _pydantic.ValidationError as e:
        raise sources.ConfigFileError(config_path, f"invalid plugin config: {e}") from e

    return plugins.to_run_config()
