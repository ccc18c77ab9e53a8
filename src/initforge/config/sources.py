"""Custom pydantic-settings source for initforge configuration.

This module provides:

- YamlLayersSettingsSource: A pydantic-settings source that loads
  configuration from layered YAML files, merged with the deep merge used
  for structured files.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .initforge/config.yaml in project root
3. User config: ~/.config/initforge/config.yaml (or INITFORGE_CONFIG_DIR)

Environment variables:
- INITFORGE_CONFIG_DIR: Override user config directory (default: ~/.config/initforge)
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import initforge.core.merge as merge

_logger = _logging.getLogger(__name__)

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "INITFORGE_CONFIG_DIR"

PROJECT_CONFIG_DIR = ".initforge"
CONFIG_FILENAME = "config.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents, or None if file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or contains non-dict content at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class YamlLayersSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads from layered YAML config files.

    Each layer is loaded into a dict and deep-merged over the previous
    one: nested mappings merge per key, lists union, other values from
    the higher layer win. The merged dict is handed to pydantic for
    validation.

    Layers (lowest to highest precedence):
    1. User config (~/.config/initforge/config.yaml)
    2. Project config (.initforge/config.yaml)
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Optional project root path for project-level config.
            user_config_path: Override path for user config file (for testing).
                If not provided, uses INITFORGE_CONFIG_DIR or the XDG path.
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._data = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        layers: list[tuple[str, _pathlib.Path]] = [
            ("user", self._user_config_path or get_user_config_path()),
        ]
        if self._project_root is not None:
            layers.append(("project", get_project_config_path(self._project_root)))

        merged: dict[str, _typing.Any] = {}
        for layer_name, path in layers:
            # Missing layers are normal
            if not path.exists():
                continue
            content = load_yaml_file(path)
            if not content:
                continue
            merged = merge.deep_merge(merged, content)
            self._loaded_layers.append((layer_name, path))
            _logger.debug("Loaded %s config from %s", layer_name, path)

        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """
        Get info about layers that were actually loaded.

        Returns:
            List of (layer_name, path) tuples, lowest precedence first.
        """
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._data.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return merged config as a plain dict for pydantic validation."""
        return dict(self._data)


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects INITFORGE_CONFIG_DIR environment variable if set,
    otherwise uses XDG standard path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "initforge"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / CONFIG_FILENAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to .initforge/config.yaml within the project."""
    return project_root / PROJECT_CONFIG_DIR / CONFIG_FILENAME
