"""
Git plugin.

Writes the git rules for the agent, contributes ignore patterns and ships
a commit slash command.
"""

from __future__ import annotations

import typing as _typing

import initforge.builtin.project as project
import initforge.config.types as config_types
import initforge.constants as constants
import initforge.plugins.types as types

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

NAME = "git"

DEFAULT_IGNORE_PATTERNS = (".agent/temp/", ".agent/.cache/")


def _options(config: types.PluginConfig) -> dict[str, _typing.Any]:
    options = dict(config.options)
    options.setdefault("auto_commit", False)
    options.setdefault("ai_git_operations", False)
    options.setdefault("ignore_patterns", list(DEFAULT_IGNORE_PATTERNS))
    return options


async def _configure(ctx: context.ConfigurationContext) -> types.PluginConfig:
    auto_commit = await ctx.ui.confirm("Commit generated files automatically?", False)
    ai_git = await ctx.ui.confirm("Allow the agent to run git operations?", False)
    return config_types.PluginConfig(
        enabled=True,
        options={
            "auto_commit": auto_commit,
            "ai_git_operations": ai_git,
            "ignore_patterns": list(DEFAULT_IGNORE_PATTERNS),
        },
    )


def _summary(config: types.PluginConfig) -> list[str]:
    options = _options(config)
    return [
        f"Auto-commit: {'on' if options['auto_commit'] else 'off'}",
        f"Agent git operations: {'allowed' if options['ai_git_operations'] else 'forbidden'}",
    ]


def _rules(config: types.PluginConfig, ctx: context.PluginContext) -> str:
    options = _options(config)
    lines = ["# Git Rules", ""]

    lines += ["## Auto-Commit", ""]
    if options["auto_commit"]:
        lines.append("Generated files are committed automatically after initialization.")
    else:
        lines.append("Generated files are not committed automatically.")
    lines.append("")

    lines += ["## Agent Git Operations", ""]
    if options["ai_git_operations"]:
        lines += [
            "The agent may run `git status`, `git add`, `git commit` and `git diff`.",
            "",
            "Never force push, hard reset, or skip hooks with `--no-verify`.",
        ]
    else:
        lines += [
            "The agent must not run git operations.",
            "When work is complete, list the affected files and leave version control to the user.",
        ]
    lines.append("")

    patterns = options["ignore_patterns"]
    if patterns:
        lines += ["## Ignored Paths", ""]
        lines += [f"- `{pattern}`" for pattern in patterns]

    return "\n".join(lines)


def _patterns(config: types.PluginConfig) -> list[str]:
    return list(_options(config)["ignore_patterns"])


def create_plugin() -> types.Plugin:
    return types.Plugin(
        meta=types.PluginMeta(
            name=NAME,
            command_name="git",
            version="1.0.0",
            description="Git rules, ignore patterns and commit command",
            dependencies=(project.NAME,),
            rules_priority=constants.RULES_PRIORITY_GIT,
        ),
        configuration=types.ConfigurationFlow(configure=_configure, get_summary=_summary),
        slash_commands=[
            types.SlashCommand(
                name="git-commit",
                description="Create a commit for the current changes",
                template_path="commands/git/commit.md",
                argument_hint="[message]",
            )
        ],
        rules=types.RuleContribution(base_name="git", generate=_rules),
        gitignore=types.GitignoreContribution(
            get_patterns=_patterns, comment="Agent temporary files"
        ),
    )
