"""
Shared constants for initforge.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

import typing as _typing

# Output directories
CLAUDE_DIR = ".claude"
"""Root directory for agent-facing resources inside a project."""

COMMANDS_SUBDIR = "commands"
SKILLS_SUBDIR = "skills"
RULES_SUBDIR = "rules"

DEFAULT_AGENT_DIR = ".agent"
"""Project-scoped data directory."""

MARKER_FILENAME = ".initforge-initialized"
"""Marker written inside the project data directory after a run."""

DEFAULT_USER_DATA_DIR = "~/.claude"
"""User-scoped data directory (``~`` is expanded at write time)."""

DEFAULT_DOCUMENT_NAME = "AGENT.md"
"""File name of the assembled root document."""

DEFAULT_TEMPLATE_NAME = "AGENT.md.template"
"""File name of the root document template."""

SKILL_FILENAME = "SKILL.md"

# Rules priority bands (init.d style; lower numbers sort first)
RULES_PRIORITY_PROJECT = 0
RULES_PRIORITY_SYSTEM = 10
RULES_PRIORITY_LANGUAGE = 20
RULES_PRIORITY_GIT = 30
RULES_PRIORITY_MEMORY = 40
RULES_PRIORITY_TASKS = 50
RULES_PRIORITY_EXTENSIONS = 60
RULES_PRIORITY_WORKFLOWS = 70
RULES_PRIORITY_HEAVYWEIGHT = 80
RULES_PRIORITY_CUSTOM = 90
"""Default priority for plugins that do not declare one."""

# Lifecycle hooks, in the order a run fires them
HOOK_NAMES: tuple[str, ...] = ("before_init", "execute", "after_init", "cleanup")

HookName = _typing.Literal["before_init", "execute", "after_init", "cleanup"]

# External service registration
DEFAULT_REGISTRATION_COMMAND = "claude mcp add"
DEFAULT_REGISTRATION_TIMEOUT = 30
"""Seconds allowed for a single external-service registration."""

DEFAULT_PROTECTED_COMMAND_TIMEOUT = 300
"""Seconds allowed for a protected-file init command."""

# Merge defaults
DEFAULT_MARKDOWN_SEPARATOR = "\n\n---\n\n"

GITIGNORE_HEADER = "# AI Agent - Auto-generated gitignore rules"
