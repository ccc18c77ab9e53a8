"""
Root document assembly.

Builds the root document (AGENT.md) from a template by substituting
static variables and the sections plugins contribute through prompt
placeholders.
"""

from __future__ import annotations

import datetime as _datetime
import logging as _logging
import re as _re
import typing as _typing

import initforge.core.resource_writer as resource_writer
import initforge.core.template_engine as template_engine
import initforge.plugins.types as types
import initforge.utils.file_ops as file_ops

if _typing.TYPE_CHECKING:
    import initforge.config.settings as settings
    import initforge.plugins.context as context

_logger = _logging.getLogger(__name__)

STATIC_VARIABLES = ("PROJECT_NAME", "VERSION", "LAST_UPDATED", "USER_LANGUAGE", "THINK_LANGUAGE")

_BLANK_RUN_RE = _re.compile(r"\n{3,}")


def default_variables(
    config: settings.Settings,
    *,
    today: _datetime.date | None = None,
) -> dict[str, str]:
    """Static template variables derived from settings."""
    return {
        "PROJECT_NAME": config.project_name,
        "VERSION": config.project.version,
        "LAST_UPDATED": (today or _datetime.date.today()).isoformat(),
        "USER_LANGUAGE": config.language.user,
        "THINK_LANGUAGE": config.language.think,
    }


def normalize_whitespace(content: str) -> str:
    """
    Collapse runs of blank lines, strip trailing spaces, end with one newline.
    """
    content = _BLANK_RUN_RE.sub("\n\n", content)
    content = "\n".join(line.rstrip() for line in content.split("\n"))
    return content.rstrip() + "\n"


async def assemble_content(
    template: str,
    variables: _typing.Mapping[str, _typing.Any],
    plugins: _typing.Sequence[types.Plugin],
    configs: resource_writer.PluginConfigs,
    ctx: context.PluginContext,
) -> str:
    """
    Assemble template text that is already loaded.

    Steps, in order:
    1. Replace every static variable.
    2. Replace each plugin's prompt placeholder with its section. A plugin
       whose config is absent or disabled contributes an empty section.
    3. Drop placeholders nobody filled.
    4. Normalize whitespace.
    """
    content = template_engine.render_template(template, variables)

    for plugin in plugins:
        if plugin.prompt is None:
            continue
        plugin_config = configs.get(plugin.meta.name)
        if plugin_config is None or not plugin_config.enabled:
            section = ""
        else:
            section = await types.resolve(plugin.prompt.generate(plugin_config, ctx))
        content = content.replace(
            template_engine.placeholder(plugin.prompt.placeholder), section or ""
        )

    content = template_engine.PLACEHOLDER_RE.sub("", content)
    return normalize_whitespace(content)


async def assemble_document(
    template_path: file_ops.PathLike,
    variables: _typing.Mapping[str, _typing.Any],
    plugins: _typing.Sequence[types.Plugin],
    configs: resource_writer.PluginConfigs,
    ctx: context.PluginContext,
) -> str:
    """
    Load a template and assemble it (see ``assemble_content``).

    Raises:
        TemplateNotFoundError: If the template does not exist.
    """
    template = await template_engine.load_template(template_path)
    return await assemble_content(template, variables, plugins, configs, ctx)


def extract_placeholders(template: str) -> list[str]:
    """Placeholder names in a template, unique, in order of first appearance."""
    names: list[str] = []
    for match in template_engine.PLACEHOLDER_RE.finditer(template):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def validate_placeholders(
    template: str,
    plugins: _typing.Sequence[types.Plugin],
    static_names: _typing.Iterable[str] = STATIC_VARIABLES,
) -> list[str]:
    """
    Placeholders that no static variable or plugin prompt fills.

    Returns:
        Unhandled names in order of first appearance (empty if all handled).
    """
    handled = set(static_names)
    handled.update(p.prompt.placeholder for p in plugins if p.prompt is not None)
    return [name for name in extract_placeholders(template) if name not in handled]
