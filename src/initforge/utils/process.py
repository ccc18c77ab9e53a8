"""
Shell command execution.

Runs one command line through the shell with a timeout. Used for
external-service registration and protected-file init commands.
"""

from __future__ import annotations

import asyncio as _asyncio
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib

_logger = _logging.getLogger(__name__)


class CommandTimeoutError(TimeoutError):
    """Raised when a command does not finish within its timeout."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout:g}s: {command}")


class CommandFailedError(RuntimeError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        detail = f": {output}" if output else ""
        super().__init__(f"Command failed (exit {returncode}){detail}")


@_dataclasses.dataclass(frozen=True)
class ProcessResult:
    """Exit status and decoded output of a finished command."""

    returncode: int
    stdout: str
    stderr: str


async def run_shell(
    command: str,
    *,
    cwd: _pathlib.Path | str | None = None,
    timeout: float | None = None,
    check: bool = True,
) -> ProcessResult:
    """
    Run a command line through the shell.

    Args:
        command: Command line (shell syntax, e.g. ``$(pwd)``, is evaluated).
        cwd: Working directory.
        timeout: Seconds to wait before killing the command. None waits
            indefinitely.
        check: Raise CommandFailedError on a non-zero exit status.

    Returns:
        The finished command's status and output.

    Raises:
        CommandTimeoutError: If the timeout expires.
        CommandFailedError: If ``check`` is set and the exit status is non-zero.
    """
    _logger.debug("Running: %s (cwd=%s, timeout=%s)", command, cwd, timeout)
    proc = await _asyncio.create_subprocess_shell(
        command,
        stdout=_asyncio.subprocess.PIPE,
        stderr=_asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd is not None else None,
    )

    try:
        stdout, stderr = await _asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        raise CommandTimeoutError(command, timeout or 0) from None

    result = ProcessResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )

    if check and result.returncode != 0:
        output = result.stderr.strip() or result.stdout.strip()
        raise CommandFailedError(command, result.returncode, output)

    return result
