"""
Configuration module for initforge.

Uses pydantic-settings for environment variable loading.
"""

from initforge.config.settings import Settings, load_run_config
from initforge.config.sources import ConfigFileError
from initforge.config.types import PluginConfig, PluginsConfig

__all__ = ["ConfigFileError", "PluginConfig", "PluginsConfig", "Settings", "load_run_config"]
