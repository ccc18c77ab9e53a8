"""
Plugin descriptor and declaration types.

A plugin is a single descriptor whose capabilities are optional fields,
checked by presence. Declarations describe artifacts for the core to
write; they never perform I/O themselves.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import inspect as _inspect
import typing as _typing

import pydantic as _pydantic

import initforge.config.types as config_types
import initforge.constants as constants

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as _context

T = _typing.TypeVar("T")

MaybeAwaitable = _typing.Union[T, _typing.Awaitable[T]]

PluginConfig = config_types.PluginConfig

Scope = _typing.Literal["project", "user"]

ContentGenerator = _typing.Callable[
    [config_types.PluginConfig, "_context.PluginContext"], MaybeAwaitable[str]
]
"""generate(config, context) -> text"""

HookFn = _typing.Callable[["_context.PluginContext"], MaybeAwaitable[None]]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if _inspect.isawaitable(value):
        return await value
    return value


class PluginError(Exception):
    """Base class for plugin system errors."""

    pass


# =============================================================================
# Descriptor metadata
# =============================================================================


class PluginMeta(_pydantic.BaseModel):
    """
    Static identity of a plugin.

    Required fields:
    - name: Unique plugin identifier
    - command_name: Unique CLI command name
    - version: Version string
    - description: What the plugin does

    Immutable once constructed.
    """

    model_config = _pydantic.ConfigDict(frozen=True, extra="forbid")

    name: str = _pydantic.Field(..., min_length=1, max_length=64)
    command_name: str = _pydantic.Field(..., min_length=1, max_length=64)
    version: str = _pydantic.Field(..., min_length=1)
    description: str = _pydantic.Field(..., min_length=1, max_length=1024)

    author: str = ""
    recommended: bool = False

    dependencies: tuple[str, ...] = ()
    """Names of plugins that must run before this one."""

    rules_priority: int = _pydantic.Field(
        default=constants.RULES_PRIORITY_CUSTOM, ge=0, le=99
    )
    """Rules file ordering (0-99), see constants.RULES_PRIORITY_*."""

    @_pydantic.field_validator("dependencies")
    @classmethod
    def _dedupe_dependencies(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Ordered set semantics
        return tuple(dict.fromkeys(value))


# =============================================================================
# Declarations
# =============================================================================


@_dataclasses.dataclass(frozen=True)
class SlashCommand:
    """A slash command whose body is copied from a template file."""

    name: str
    description: str
    template_path: str
    """Template path relative to the templates directory."""

    argument_hint: str | None = None


@_dataclasses.dataclass(frozen=True)
class Skill:
    """A skill written to ``<skills>/<name>/SKILL.md``."""

    name: str
    description: str
    version: str
    template_path: str


@_dataclasses.dataclass(frozen=True)
class RuleContribution:
    """
    A policy fragment written to ``<rules>/<priority>-<base_name>.md``.

    ``paths`` restricts where the rule applies and is embedded as a
    frontmatter header.
    """

    base_name: str
    generate: ContentGenerator
    paths: str | None = None


@_dataclasses.dataclass(frozen=True)
class PromptContribution:
    """A section substituted for ``{{placeholder}}`` in the root document."""

    placeholder: str
    generate: ContentGenerator


@_dataclasses.dataclass(frozen=True)
class DataFileOutput:
    """
    A generic data file.

    With ``merge=True`` an existing target is reconciled using the merge
    strategy for ``format`` instead of being overwritten.
    """

    path: str
    content: str
    format: str = "markdown"
    scope: Scope = "project"
    merge: bool = False


@_dataclasses.dataclass(frozen=True)
class OutputsContribution:
    """generate(config, context) -> data files to write."""

    generate: _typing.Callable[
        [config_types.PluginConfig, "_context.PluginContext"],
        MaybeAwaitable[_typing.Sequence[DataFileOutput]],
    ]


@_dataclasses.dataclass(frozen=True)
class ExternalServiceConfig:
    """
    A service registered through the external registration command.

    ``command`` may contain ``${PROJECT_ROOT}`` and ``${PROJECT_NAME}``.
    """

    name: str
    command: str
    scope: Scope = "project"
    args: tuple[str, ...] = ()
    description: str = ""
    condition: _typing.Callable[[config_types.PluginConfig], bool] | None = None


@_dataclasses.dataclass(frozen=True)
class GitignoreContribution:
    """Ignore patterns contributed to the project's .gitignore."""

    get_patterns: _typing.Callable[[config_types.PluginConfig], _typing.Sequence[str]]
    comment: str | None = None


ProtectedStrategy = _typing.Literal[
    "markdown", "json", "ignore", "append", "prepend", "custom"
]


@_dataclasses.dataclass(frozen=True)
class ProtectedFile:
    """A file reconciled after an external init command may have rewritten it."""

    path: str
    strategy: ProtectedStrategy = "append"


@_dataclasses.dataclass(frozen=True)
class ConfigurationFlow:
    """Interactive configuration step for a plugin."""

    configure: _typing.Callable[
        ["_context.ConfigurationContext"], MaybeAwaitable[config_types.PluginConfig]
    ]
    get_summary: _typing.Callable[[config_types.PluginConfig], list[str]]
    needs_configuration: bool = True


@_dataclasses.dataclass(frozen=True)
class PluginHooks:
    """Lifecycle hooks. Each may be a plain function or a coroutine function."""

    before_init: HookFn | None = None
    execute: HookFn | None = None
    after_init: HookFn | None = None
    cleanup: HookFn | None = None

    def get(self, name: str) -> HookFn | None:
        """Get a hook by name, None if not set or not a lifecycle hook."""
        if name not in constants.HOOK_NAMES:
            return None
        return _typing.cast("HookFn | None", getattr(self, name))

    def defined(self) -> list[str]:
        """Names of the hooks this plugin defines, in lifecycle order."""
        return [name for name in constants.HOOK_NAMES if getattr(self, name) is not None]


MergeFileFn = _typing.Callable[
    [str, "str | None", str, "_context.PluginContext"], MaybeAwaitable[str]
]
"""merge_file(path, prior, new, context) -> merged text"""


# =============================================================================
# Descriptor
# =============================================================================


@_dataclasses.dataclass
class Plugin:
    """
    A plugin descriptor.

    Only ``meta`` is required. Every other field is a capability the core
    checks by presence.
    """

    meta: PluginMeta

    hooks: PluginHooks | None = None
    configuration: ConfigurationFlow | None = None

    slash_commands: list[SlashCommand] = _dataclasses.field(default_factory=list)
    skills: list[Skill] = _dataclasses.field(default_factory=list)
    rules: RuleContribution | None = None
    prompt: PromptContribution | None = None
    outputs: OutputsContribution | None = None
    gitignore: GitignoreContribution | None = None
    external_services: list[ExternalServiceConfig] = _dataclasses.field(
        default_factory=list
    )

    protected_files: list[ProtectedFile] = _dataclasses.field(default_factory=list)
    protected_command: str | None = None
    """External init command that may rewrite ``protected_files``."""

    merge_file: MergeFileFn | None = None
    """Custom merge used by protected files with the ``custom`` strategy."""

    @property
    def name(self) -> str:
        """Plugin name from meta."""
        return self.meta.name

    @property
    def dependencies(self) -> tuple[str, ...]:
        """Plugin dependencies from meta."""
        return self.meta.dependencies

    def get_hook(self, name: str) -> HookFn | None:
        """Get a lifecycle hook by name, None if the plugin does not define it."""
        if self.hooks is None:
            return None
        return self.hooks.get(name)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.meta.name,
            "command_name": self.meta.command_name,
            "version": self.meta.version,
            "description": self.meta.description,
            "dependencies": list(self.meta.dependencies),
            "rules_priority": self.meta.rules_priority,
            "hooks": self.hooks.defined() if self.hooks else [],
            "slash_commands": [c.name for c in self.slash_commands],
            "skills": [s.name for s in self.skills],
            "rules": self.rules.base_name if self.rules else None,
            "prompt": self.prompt.placeholder if self.prompt else None,
            "outputs": self.outputs is not None,
            "gitignore": self.gitignore is not None,
            "external_services": [s.name for s in self.external_services],
            "protected_files": [f.path for f in self.protected_files],
        }
