"""
Initialization marker.

A small JSON file in the project data directory records that a project
was initialized, when, by which version and under which name. The CLI
reads it to detect a project it already initialized.
"""

from __future__ import annotations

import datetime as _datetime
import logging as _logging
import pathlib as _pathlib

import pydantic as _pydantic

import initforge
import initforge.constants as constants
import initforge.utils.file_ops as file_ops

_logger = _logging.getLogger(__name__)


class MarkerInfo(_pydantic.BaseModel):
    """Contents of the marker file."""

    initialized: bool = True
    version: str
    date: str
    """ISO date of the run (YYYY-MM-DD)."""

    base_dir: str
    project_name: str | None = None


def marker_path(
    target_dir: _pathlib.Path | str, base_dir: str = constants.DEFAULT_AGENT_DIR
) -> _pathlib.Path:
    return _pathlib.Path(target_dir) / base_dir / constants.MARKER_FILENAME


async def is_project_initialized(
    target_dir: _pathlib.Path | str, base_dir: str = constants.DEFAULT_AGENT_DIR
) -> bool:
    """Whether the marker file exists."""
    return await file_ops.file_exists(marker_path(target_dir, base_dir))


async def get_marker_info(
    target_dir: _pathlib.Path | str, base_dir: str = constants.DEFAULT_AGENT_DIR
) -> MarkerInfo | None:
    """
    Read the marker.

    Returns:
        The marker contents, or None if the file is missing, unreadable
        or not a valid marker.
    """
    path = marker_path(target_dir, base_dir)
    if not await file_ops.file_exists(path):
        return None
    try:
        return MarkerInfo.model_validate(await file_ops.read_json_file(path))
    except (OSError, ValueError) as e:
        _logger.debug("Ignoring unreadable marker %s: %s", path, e)
        return None


async def create_marker(
    target_dir: _pathlib.Path | str,
    base_dir: str = constants.DEFAULT_AGENT_DIR,
    project_name: str | None = None,
    *,
    today: _datetime.date | None = None,
) -> MarkerInfo:
    """Write (or overwrite) the marker and return what was written."""
    info = MarkerInfo(
        version=initforge.__version__,
        date=(today or _datetime.date.today()).isoformat(),
        base_dir=base_dir,
        project_name=project_name,
    )
    await file_ops.write_json_file(
        marker_path(target_dir, base_dir), info.model_dump(exclude_none=True)
    )
    return info


async def remove_marker(
    target_dir: _pathlib.Path | str, base_dir: str = constants.DEFAULT_AGENT_DIR
) -> None:
    """Delete the marker if present."""
    await file_ops.remove_file(marker_path(target_dir, base_dir))
