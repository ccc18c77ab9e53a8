"""
Localization for user-facing messages.

Message catalogs are YAML files in ``locales/`` keyed by dotted message
id. Lookups fall back to English, then to the key itself, so a missing
translation never raises.
"""

from __future__ import annotations

import functools as _functools
import os as _os
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

DEFAULT_LANGUAGE = "en"

LOCALES_DIR = _pathlib.Path(__file__).parent / "locales"


class I18n(_typing.Protocol):
    """Localization interface handed to plugins."""

    @property
    def language(self) -> str: ...

    def t(self, key: str, **options: _typing.Any) -> str: ...


def _flatten(data: _typing.Mapping[str, _typing.Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested mappings into dotted keys."""
    flat: dict[str, str] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, _typing.Mapping):
            flat.update(_flatten(value, path))
        else:
            flat[path] = str(value)
    return flat


@_functools.lru_cache(maxsize=None)
def load_catalog(language: str) -> dict[str, str]:
    """
    Load the message catalog for a language.

    Returns:
        Flat mapping of message id to template. Empty if the language
        has no catalog.
    """
    path = LOCALES_DIR / f"{language}.yaml"
    if not path.is_file():
        return {}
    data = _yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return _flatten(data)


def available_languages() -> list[str]:
    """Languages that ship a catalog."""
    return sorted(p.stem for p in LOCALES_DIR.glob("*.yaml"))


def detect_language(environ: _typing.Mapping[str, str] | None = None) -> str:
    """
    Detect the user's language from the environment.

    Checks INITFORGE_LANG, then LC_ALL, LC_MESSAGES and LANG. Only the
    language part is used (``zh_CN.UTF-8`` -> ``zh``).
    """
    env = _os.environ if environ is None else environ
    for var in ("INITFORGE_LANG", "LC_ALL", "LC_MESSAGES", "LANG"):
        value = env.get(var, "")
        if value and value not in ("C", "POSIX"):
            language = value.split(".")[0].split("_")[0].split("-")[0].lower()
            if language in available_languages():
                return language
    return DEFAULT_LANGUAGE


class Translator:
    """Catalog-backed translator."""

    def __init__(self, language: str = DEFAULT_LANGUAGE) -> None:
        self._language = language

    @property
    def language(self) -> str:
        """Current language code."""
        return self._language

    def set_language(self, language: str) -> None:
        """Switch the current language."""
        self._language = language

    def t(self, key: str, **options: _typing.Any) -> str:
        """
        Translate a message id.

        Options are substituted into ``{name}`` fields of the template.
        Unknown ids return the id itself.
        """
        template = load_catalog(self._language).get(key)
        if template is None:
            template = load_catalog(DEFAULT_LANGUAGE).get(key, key)
        if not options:
            return template
        try:
            return template.format(**options)
        except (KeyError, IndexError, ValueError):
            return template


class IdentityTranslator:
    """Translator that returns message ids unchanged."""

    language = DEFAULT_LANGUAGE

    def t(self, key: str, **options: _typing.Any) -> str:
        return key
