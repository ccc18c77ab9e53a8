"""
Project plugin.

The base plugin every other built-in depends on. Publishes project
identity to the shared store, contributes the project overview section
of the root document and records the run configuration under the
project data directory.
"""

from __future__ import annotations

import json as _json
import typing as _typing

import initforge.plugins.types as types

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

NAME = "project"

SHARED_KEY = "project"
"""Shared store key holding ``{"name": ..., "root": ...}``."""

CONFIG_FILENAME = "config.json"


def _publish_project(ctx: context.PluginContext) -> None:
    ctx.shared[SHARED_KEY] = {
        "name": ctx.config.project_name,
        "root": str(ctx.project_root),
    }


def _overview(config: types.PluginConfig, ctx: context.PluginContext) -> str:
    description = config.options.get("description", "")
    lines = ["## Project Overview", "", f"**Project**: {ctx.config.project_name}"]
    if description:
        lines += ["", description]
    return "\n".join(lines)


def _outputs(
    config: types.PluginConfig, ctx: context.PluginContext
) -> list[types.DataFileOutput]:
    data = {
        "project": {"name": ctx.config.project_name},
        "plugins": {
            name: plugin_config.model_dump()
            for name, plugin_config in ctx.config.plugins.items()
        },
    }
    return [
        types.DataFileOutput(
            path=CONFIG_FILENAME,
            content=_json.dumps(data, indent=2, ensure_ascii=False),
            format="json",
            merge=True,
        )
    ]


def create_plugin() -> types.Plugin:
    return types.Plugin(
        meta=types.PluginMeta(
            name=NAME,
            command_name="project",
            version="1.0.0",
            description="Project identity, overview section and run record",
            recommended=True,
            rules_priority=0,
        ),
        hooks=types.PluginHooks(execute=_publish_project),
        prompt=types.PromptContribution("PROJECT_OVERVIEW", _overview),
        outputs=types.OutputsContribution(_outputs),
    )
