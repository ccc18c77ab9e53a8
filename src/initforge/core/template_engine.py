"""
Template loading and variable rendering.

Templates use ``{{NAME}}`` placeholders: uppercase letters and
underscores wrapped in double braces.
"""

from __future__ import annotations

import pathlib as _pathlib
import re as _re
import typing as _typing

import initforge.utils.file_ops as file_ops

PLACEHOLDER_RE = _re.compile(r"\{\{([A-Z_]+)\}\}")
"""Matches a placeholder token; group 1 is the token name."""


class TemplateNotFoundError(FileNotFoundError):
    """Raised when a template file does not exist."""

    pass


def placeholder(name: str) -> str:
    """The token text for a placeholder name (``NAME`` -> ``{{NAME}}``)."""
    return f"{{{{{name}}}}}"


async def load_template(template_path: file_ops.PathLike) -> str:
    """
    Load template text from a file.

    Raises:
        TemplateNotFoundError: If the file does not exist.
    """
    path = _pathlib.Path(template_path)
    if not await file_ops.file_exists(path):
        raise TemplateNotFoundError(f"Template not found: {path}")
    return await file_ops.read_file(path)


def render_template(
    template: str,
    variables: _typing.Mapping[str, _typing.Any],
) -> str:
    """
    Replace every ``{{KEY}}`` occurrence for each key in ``variables``.

    Placeholders without a variable are left untouched.
    """
    result = template
    for key, value in variables.items():
        result = result.replace(placeholder(key), str(value))
    return result


async def load_and_render_template(
    template_path: file_ops.PathLike,
    variables: _typing.Mapping[str, _typing.Any],
) -> str:
    """Load a template and render ``variables`` into it."""
    return render_template(await load_template(template_path), variables)


class TemplateLoader:
    """Loads templates by path relative to a templates directory."""

    def __init__(self, templates_dir: file_ops.PathLike) -> None:
        self._templates_dir = _pathlib.Path(templates_dir)

    @property
    def templates_dir(self) -> _pathlib.Path:
        """Directory template paths are resolved against."""
        return self._templates_dir

    def resolve(self, template_path: str) -> _pathlib.Path:
        """Absolute path for a relative template path."""
        return self._templates_dir / template_path

    async def load(self, template_path: str) -> str:
        """
        Load a template by relative path.

        Raises:
            TemplateNotFoundError: If the file does not exist.
        """
        return await load_template(self.resolve(template_path))


class TemplateEngine:
    """Template facade handed to plugins through the context."""

    load_template = staticmethod(load_template)
    render_template = staticmethod(render_template)
    load_and_render_template = staticmethod(load_and_render_template)


def get_bundled_templates_dir() -> _pathlib.Path:
    """Directory of templates shipped with initforge."""
    return _pathlib.Path(__file__).parent.parent / "templates"
