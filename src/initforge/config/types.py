"""
Configuration types for initforge.

Pydantic models for each config section. These are composed by the
Settings class in settings.py.
"""

import typing as _typing

import pydantic as _pydantic

import initforge.constants as constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    All config types use `extra="allow"` so unknown fields are preserved
    rather than silently dropped. This enables auditing for typos.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}


# =============================================================================
# Project
# =============================================================================


class ProjectConfig(ConfigBase):
    """
    Project identity.

    YAML section: project.*
    """

    name: str = ""
    """Project name. Empty means: use the root directory name."""

    root: str | None = None
    """Project root. None means: the current working directory."""

    version: str = "1.0.0"
    """Version written into generated project rules."""


# =============================================================================
# Output routes
# =============================================================================


class OutputConfig(ConfigBase):
    """
    Where generated artifacts are written.

    YAML section: output.*

    Project-relative paths are joined to the project root; ``user_data``
    may start with ``~``.
    """

    slash_commands: str = f"{constants.CLAUDE_DIR}/{constants.COMMANDS_SUBDIR}"
    skills: str = f"{constants.CLAUDE_DIR}/{constants.SKILLS_SUBDIR}"
    rules: str = f"{constants.CLAUDE_DIR}/{constants.RULES_SUBDIR}"
    project_data: str = constants.DEFAULT_AGENT_DIR
    user_data: str = constants.DEFAULT_USER_DATA_DIR

    document: str = constants.DEFAULT_DOCUMENT_NAME
    """Assembled root document, relative to the project root."""

    template: str | None = None
    """Root document template. None means: the bundled template."""

    templates_dir: str | None = None
    """Directory that slash command and skill template paths resolve against."""


# =============================================================================
# External service registration
# =============================================================================


class RegistrationConfig(ConfigBase):
    """
    External service registration.

    YAML section: registration.*
    """

    command: str = constants.DEFAULT_REGISTRATION_COMMAND
    """Command prefix that registers one service."""

    timeout: float = _pydantic.Field(
        default=constants.DEFAULT_REGISTRATION_TIMEOUT, gt=0
    )
    """Seconds allowed per registration."""


# =============================================================================
# Language
# =============================================================================


class LanguageConfig(ConfigBase):
    """
    Language preferences.

    YAML section: language.*
    """

    user: str = "en"
    """Language used for user-facing output."""

    think: str = "en"
    """Language the agent is asked to reason in."""


# =============================================================================
# Plugins
# =============================================================================


class PluginConfig(_pydantic.BaseModel):
    """
    Run configuration for a single plugin.

    YAML section: plugins.<name>.*

    Keys:
        enabled: Whether plugin is enabled (bool)
        options: Plugin-specific settings, opaque to the core
    """

    model_config = _pydantic.ConfigDict(extra="forbid")

    enabled: bool = True
    """Whether this plugin is enabled."""

    options: dict[str, _typing.Any] = _pydantic.Field(default_factory=dict)
    """Plugin-specific options."""


class PluginsConfig(ConfigBase):
    """
    Plugin-related configuration.

    YAML section: plugins.*

    YAML shape (users write):
        plugins:
          enabled:
            git: false
          language-settings:
            options:
              user: zh

    Internal shape (after pre-validator):
        plugins:
          enabled: {...}
          instances:
            language-settings: PluginConfig(...)
    """

    enabled: dict[str, bool] = _pydantic.Field(default_factory=dict)
    """Quick enable/disable toggle per plugin."""

    instances: dict[str, PluginConfig] = _pydantic.Field(default_factory=dict)
    """Typed mapping of plugin name -> config. Populated by pre-validator."""

    @_pydantic.model_validator(mode="before")
    @classmethod
    def _move_dynamic_to_instances(
        cls,
        values: _typing.Any,
    ) -> _typing.Any:
        """Move dynamic plugin keys into the typed instances dict."""
        if not isinstance(values, dict):
            return values

        values = dict(values)
        reserved = {"enabled", "instances"}
        instances: dict[str, _typing.Any] = dict(values.pop("instances", {}) or {})

        for key in list(values.keys()):
            if key not in reserved:
                instances[key] = values.pop(key)

        values["instances"] = instances
        return values

    def get_plugin_config(self, name: str) -> PluginConfig:
        """
        Get the effective config for a plugin.

        A quick toggle in ``enabled`` overrides the instance flag.
        """
        config = self.instances.get(name, PluginConfig())
        if name in self.enabled:
            config = config.model_copy(update={"enabled": self.enabled[name]})
        return config

    def to_run_config(self) -> dict[str, PluginConfig]:
        """Effective config for every plugin mentioned in this section."""
        names = list(self.instances) + [n for n in self.enabled if n not in self.instances]
        return {name: self.get_plugin_config(name) for name in names}
