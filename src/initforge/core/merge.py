"""
Merge strategies for reconciling generated content with content on disk.

Each strategy takes the prior content (``None`` when the file did not exist)
and the newly generated content, and returns the content to write. All
functions here are pure: no file access, no logging side effects beyond
debug traces.

Strategies:
- markdown: append new content under a separator, guarded against doubling
- json: deep merge objects, union arrays, new scalars win
- ignore: append unseen ignore-file entries, never remove existing ones
"""

from __future__ import annotations

import json as _json
import logging as _logging
import re as _re
import typing as _typing

import initforge.constants as constants

_logger = _logging.getLogger(__name__)

Merger = _typing.Callable[[str | None, str], str]
"""Signature shared by all configured merge functions."""

MERGE_FORMATS = ("markdown", "json", "ignore")


def safe_parse_json(content: str) -> _typing.Any | None:
    """
    Parse JSON, returning None instead of raising on invalid input.

    Args:
        content: JSON text.

    Returns:
        Parsed value, or None if the text is not valid JSON.
    """
    try:
        return _json.loads(content)
    except (_json.JSONDecodeError, TypeError):
        return None


def _contains(items: list[_typing.Any], value: _typing.Any) -> bool:
    # Equality plus type identity, so 1 and True stay distinct entries
    return any(type(item) is type(value) and item == value for item in items)


def union_lists(prior: list[_typing.Any], new: list[_typing.Any]) -> list[_typing.Any]:
    """Union two lists, keeping first-seen order and dropping duplicates."""
    result: list[_typing.Any] = []
    for item in [*prior, *new]:
        if not _contains(result, item):
            result.append(item)
    return result


def deep_merge(
    prior: _typing.Mapping[str, _typing.Any],
    new: _typing.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Deep merge two mappings.

    - Mappings present on both sides are merged recursively
    - Lists present on both sides are unioned (deduplicated)
    - Any other value from ``new`` replaces the prior value

    Neither input is modified.

    Args:
        prior: Base mapping.
        new: Mapping merged on top (takes precedence).

    Returns:
        A new merged dict.
    """
    result: dict[str, _typing.Any] = dict(prior)

    for key, new_value in new.items():
        prior_value = result.get(key)

        if isinstance(new_value, _typing.Mapping) and isinstance(
            prior_value, _typing.Mapping
        ):
            result[key] = deep_merge(prior_value, new_value)
        elif isinstance(new_value, list) and isinstance(prior_value, list):
            result[key] = union_lists(prior_value, new_value)
        else:
            result[key] = new_value

    return result


def merge_markdown(
    prior: str | None,
    new: str,
    *,
    separator: str = constants.DEFAULT_MARKDOWN_SEPARATOR,
    header: str | None = None,
    header_pattern: str | _re.Pattern[str] | None = None,
    header_replacement: str = "",
) -> str:
    """
    Merge markdown by appending the new content after the prior content.

    Args:
        prior: Existing content (None or empty if the file did not exist).
        new: Newly generated content.
        separator: Text placed between the two parts.
        header: Optional header inserted before the new part.
        header_pattern: Heading in the new content to rewrite before
            concatenation. A string matches literally, a compiled pattern
            as a regex. Only the first match is rewritten.
        header_replacement: Replacement for ``header_pattern``.

    Returns:
        Merged markdown.
    """
    if not prior:
        return new

    # Already merged on a previous run
    if prior.strip() in new:
        return new

    processed = new
    if header_pattern is not None:
        if isinstance(header_pattern, _re.Pattern):
            processed = header_pattern.sub(header_replacement, new, count=1)
        else:
            processed = new.replace(header_pattern, header_replacement, 1)

    header_section = f"{header}\n\n" if header else ""
    return f"{prior.rstrip()}{separator}{header_section}{processed.lstrip()}"


def merge_json(prior: str | None, new: str, indent: int = 2) -> str:
    """
    Merge JSON documents with a deep merge.

    An unparsable new side cannot be merged and is returned verbatim. An
    absent or unparsable prior side means the new side wins (reformatted).

    Args:
        prior: Existing JSON text (None if the file did not exist).
        new: Newly generated JSON text.
        indent: Indentation for the serialized result.

    Returns:
        Merged JSON text.
    """
    new_value = safe_parse_json(new)
    if new_value is None:
        _logger.debug("New JSON content is not parsable; keeping it verbatim")
        return new

    prior_value = safe_parse_json(prior) if prior else None
    if prior_value is None:
        return _json.dumps(new_value, indent=indent, ensure_ascii=False)

    if isinstance(prior_value, dict) and isinstance(new_value, dict):
        merged: _typing.Any = deep_merge(prior_value, new_value)
    elif isinstance(prior_value, list) and isinstance(new_value, list):
        merged = union_lists(prior_value, new_value)
    else:
        merged = new_value

    return _json.dumps(merged, indent=indent, ensure_ascii=False)


def _ignore_entries(content: str) -> list[str]:
    """Trimmed, non-empty, non-comment lines of an ignore file."""
    entries = []
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            entries.append(stripped)
    return entries


def merge_ignore(prior: str | None, new: str, *, header: str | None = None) -> str:
    """
    Merge ignore files by appending entries the prior content lacks.

    Existing entries are never removed or duplicated. When nothing new is
    found the prior content is returned unchanged.

    Args:
        prior: Existing ignore-file content (None if the file did not exist).
        new: Newly generated ignore-file content.
        header: Optional comment line placed above the appended entries.

    Returns:
        Merged ignore-file content.
    """
    if not prior:
        return new

    existing = set(_ignore_entries(prior))
    additions: list[str] = []
    for entry in _ignore_entries(new):
        if entry not in existing and entry not in additions:
            additions.append(entry)

    if not additions:
        return prior

    header_section = f"\n{header}\n" if header else "\n"
    return f"{prior.rstrip()}{header_section}" + "\n".join(additions) + "\n"


def make_markdown_merger(**options: _typing.Any) -> Merger:
    """Create a markdown merge function with preset options."""

    def merger(prior: str | None, new: str) -> str:
        return merge_markdown(prior, new, **options)

    return merger


def make_json_merger(indent: int = 2) -> Merger:
    """Create a JSON merge function with preset indentation."""

    def merger(prior: str | None, new: str) -> str:
        return merge_json(prior, new, indent)

    return merger


def make_ignore_merger(header: str | None = None) -> Merger:
    """Create an ignore-file merge function with a preset header."""

    def merger(prior: str | None, new: str) -> str:
        return merge_ignore(prior, new, header=header)

    return merger


def get_merger(fmt: str) -> Merger | None:
    """
    Look up the merge function for a content format.

    Args:
        fmt: Format name (``markdown``, ``json`` or ``ignore``).

    Returns:
        Merge function, or None when the format has no merge strategy.
    """
    mergers: dict[str, Merger] = {
        "markdown": make_markdown_merger(),
        "json": make_json_merger(),
        "ignore": make_ignore_merger(),
    }
    return mergers.get(fmt)
