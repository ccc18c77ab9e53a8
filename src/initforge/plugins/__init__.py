"""
Plugin system for initforge.

Plugins are statically linked descriptors that contribute:
- Lifecycle hooks (before_init, execute, after_init, cleanup)
- Interactive configuration
- Slash commands and skills
- Rules (priority-ordered policy fragments)
- Root document sections (prompt placeholders)
- Data files, gitignore patterns and external service registrations
"""

from initforge.plugins.context import (
    ConfigurationContext,
    PluginContext,
    SharedConfig,
    SharedStore,
    create_plugin_context,
)
from initforge.plugins.loader import PluginHookError, PluginLoader
from initforge.plugins.ordering import (
    CircularDependencyError,
    DependencyError,
    MissingDependencyError,
    resolve_order,
    sort_plugins,
)
from initforge.plugins.registry import (
    PluginConflictError,
    PluginNotFoundError,
    PluginRegistry,
    PluginValidationError,
)
from initforge.plugins.types import (
    ConfigurationFlow,
    DataFileOutput,
    ExternalServiceConfig,
    GitignoreContribution,
    OutputsContribution,
    Plugin,
    PluginError,
    PluginHooks,
    PluginMeta,
    PromptContribution,
    ProtectedFile,
    RuleContribution,
    Skill,
    SlashCommand,
)

__all__ = [
    # Descriptor
    "Plugin",
    "PluginHooks",
    "PluginMeta",
    "ConfigurationFlow",
    # Declarations
    "DataFileOutput",
    "ExternalServiceConfig",
    "GitignoreContribution",
    "OutputsContribution",
    "PromptContribution",
    "ProtectedFile",
    "RuleContribution",
    "Skill",
    "SlashCommand",
    # Registry and loading
    "PluginLoader",
    "PluginRegistry",
    "resolve_order",
    "sort_plugins",
    # Context
    "ConfigurationContext",
    "PluginContext",
    "SharedConfig",
    "SharedStore",
    "create_plugin_context",
    # Errors
    "CircularDependencyError",
    "DependencyError",
    "MissingDependencyError",
    "PluginConflictError",
    "PluginError",
    "PluginHookError",
    "PluginNotFoundError",
    "PluginValidationError",
]
