"""
Language settings plugin.

Sets the language the agent reasons in and the language it answers in.
The user language defaults to the one detected from the locale.
"""

from __future__ import annotations

import typing as _typing

import initforge.builtin.project as project
import initforge.config.types as config_types
import initforge.constants as constants
import initforge.i18n as i18n
import initforge.plugins.types as types
import initforge.ui.prompts as prompts

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

NAME = "language-settings"

LANGUAGES = {
    "en": "English",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt": "Portuguese",
    "ru": "Russian",
}


def language_name(code_or_name: str) -> str:
    """Full language name for a locale code; names pass through."""
    return LANGUAGES.get(code_or_name.lower(), code_or_name)


def _options(config: types.PluginConfig) -> tuple[str, str]:
    user = config.options.get("user_language", "English")
    think = config.options.get("think_language", "English")
    return language_name(user), language_name(think)


async def _configure(ctx: context.ConfigurationContext) -> types.PluginConfig:
    detected = language_name(i18n.detect_language())
    ctx.logger.info(f"Detected language: {detected}")

    user = await ctx.ui.radio_list(
        "Language for answers",
        [prompts.Option(name=name, value=name) for name in LANGUAGES.values()],
        default=detected,
    )
    think = await ctx.ui.radio_list(
        "Language for reasoning",
        [
            prompts.Option(name="English", value="English"),
            prompts.Option(name="Same as answers", value=user),
        ],
        default="English",
    )
    return config_types.PluginConfig(
        enabled=True, options={"user_language": user, "think_language": think}
    )


def _summary(config: types.PluginConfig) -> list[str]:
    user, think = _options(config)
    return [f"Reasoning: {think}", f"Answers: {user}"]


def _section(config: types.PluginConfig, ctx: context.PluginContext) -> str:
    user, think = _options(config)
    return "\n".join(
        [
            "## Language Convention",
            "",
            f"- **Internal thinking**: {think}",
            f"- **Final outputs**: {user}",
        ]
    )


def _rules(config: types.PluginConfig, ctx: context.PluginContext) -> str:
    user, think = _options(config)
    return "\n".join(
        [
            "# Language Rules",
            "",
            f"- Reason and search in {think}.",
            f"- Write every user-facing answer and document in {user}.",
            "- Keep code, identifiers and commit messages in English.",
        ]
    )


def create_plugin() -> types.Plugin:
    return types.Plugin(
        meta=types.PluginMeta(
            name=NAME,
            command_name="language",
            version="1.0.0",
            description="Agent reasoning and answer languages",
            recommended=True,
            dependencies=(project.NAME,),
            rules_priority=constants.RULES_PRIORITY_LANGUAGE,
        ),
        configuration=types.ConfigurationFlow(configure=_configure, get_summary=_summary),
        rules=types.RuleContribution(base_name="language", generate=_rules),
        prompt=types.PromptContribution("LANGUAGE_SECTION", _section),
    )
