"""
Console logger for user-facing progress output.

Implements the structured logger handed to plugins: info, success,
error, warning, step and blank. Output goes through a Rich console;
every message is mirrored to the stdlib logger at debug level so it
shows up in log files as well.
"""

import logging as _logging
import typing as _typing

import rich.console as _rich_console
import rich.markup as _rich_markup

_logger = _logging.getLogger(__name__)

ICON_SUCCESS = "✓"
ICON_FAILURE = "✗"
ICON_WARNING = "⚠"
ICON_INFO = "•"


class Logger(_typing.Protocol):
    """Structured logger interface used by the core and by plugins."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def step(self, number: int, message: str) -> None: ...

    def blank(self) -> None: ...


class ConsoleLogger:
    """
    Rich-backed console logger.

    Messages are escaped before printing, so plugin text containing
    square brackets is shown literally.
    """

    def __init__(
        self,
        console: _rich_console.Console | None = None,
        *,
        quiet: bool = False,
    ) -> None:
        """
        Initialize the console logger.

        Args:
            console: Rich Console instance (created on stderr if not provided).
            quiet: Suppress info and step output.
        """
        self._console = console or _rich_console.Console(stderr=True)
        self._quiet = quiet

    @property
    def console(self) -> _rich_console.Console:
        """The underlying Rich console."""
        return self._console

    def _print(self, markup: str, message: str) -> None:
        self._console.print(markup.format(_rich_markup.escape(message)), soft_wrap=True)

    def info(self, message: str) -> None:
        _logger.debug("info: %s", message)
        if not self._quiet:
            self._print(f"[blue]{ICON_INFO}[/blue] {{}}", message)

    def success(self, message: str) -> None:
        _logger.debug("success: %s", message)
        self._print(f"[green]{ICON_SUCCESS}[/green] {{}}", message)

    def error(self, message: str) -> None:
        _logger.debug("error: %s", message)
        self._print(f"[bold red]{ICON_FAILURE}[/bold red] {{}}", message)

    def warning(self, message: str) -> None:
        _logger.debug("warning: %s", message)
        self._print(f"[yellow]{ICON_WARNING}[/yellow] {{}}", message)

    def step(self, number: int, message: str) -> None:
        _logger.debug("step %d: %s", number, message)
        if not self._quiet:
            self._print(f"\n[bold cyan]Step {number}:[/bold cyan] {{}}", message)

    def blank(self) -> None:
        if not self._quiet:
            self._console.print()
