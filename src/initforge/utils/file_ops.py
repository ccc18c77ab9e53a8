"""
Asynchronous file operations.

Thin wrappers over pathlib that run in a worker thread so callers can
await them. No implicit retries: every error propagates to the caller.
"""

from __future__ import annotations

import asyncio as _asyncio
import json as _json
import pathlib as _pathlib
import shutil as _shutil
import typing as _typing

PathLike = _typing.Union[str, _pathlib.Path]


async def ensure_dir(path: PathLike) -> None:
    """Create a directory and its parents. Idempotent."""
    await _asyncio.to_thread(_pathlib.Path(path).mkdir, parents=True, exist_ok=True)


async def read_file(path: PathLike) -> str:
    """Read a UTF-8 text file."""
    return await _asyncio.to_thread(_pathlib.Path(path).read_text, encoding="utf-8")


async def write_file(path: PathLike, content: str) -> None:
    """
    Write a UTF-8 text file, creating parent directories as needed.

    Existing content is replaced.
    """

    def _write() -> None:
        target = _pathlib.Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    await _asyncio.to_thread(_write)


async def copy_file(src: PathLike, dest: PathLike) -> None:
    """Copy a file, creating the destination directory as needed."""

    def _copy() -> None:
        target = _pathlib.Path(dest)
        target.parent.mkdir(parents=True, exist_ok=True)
        _shutil.copyfile(src, target)

    await _asyncio.to_thread(_copy)


async def remove_file(path: PathLike) -> None:
    """Remove a file if it exists."""
    await _asyncio.to_thread(_pathlib.Path(path).unlink, missing_ok=True)


async def file_exists(path: PathLike) -> bool:
    """Whether ``path`` is an existing regular file."""
    return await _asyncio.to_thread(_pathlib.Path(path).is_file)


async def dir_exists(path: PathLike) -> bool:
    """Whether ``path`` is an existing directory."""
    return await _asyncio.to_thread(_pathlib.Path(path).is_dir)


async def read_json_file(path: PathLike) -> _typing.Any:
    """
    Read and parse a JSON file.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
    """
    content = await read_file(path)
    return _json.loads(content)


async def write_json_file(path: PathLike, data: _typing.Any, indent: int = 2) -> None:
    """Serialize ``data`` as JSON and write it with a trailing newline."""
    content = _json.dumps(data, indent=indent, ensure_ascii=False) + "\n"
    await write_file(path, content)


class FileOperations:
    """
    File operations facade handed to plugins through the context.

    Bound to the module functions above; tests may substitute any object
    with the same coroutine methods.
    """

    ensure_dir = staticmethod(ensure_dir)
    read_file = staticmethod(read_file)
    write_file = staticmethod(write_file)
    copy_file = staticmethod(copy_file)
    remove_file = staticmethod(remove_file)
    file_exists = staticmethod(file_exists)
    dir_exists = staticmethod(dir_exists)
    read_json_file = staticmethod(read_json_file)
    write_json_file = staticmethod(write_json_file)
