"""
Interactive prompt primitives.

Four primitives are exposed to plugins: multi-select (checkbox_list),
single-select (radio_list), confirm and free text (input). Each call
suspends until answered. There is no timeout; only an interrupt of the
whole process cancels a pending prompt.
"""

from __future__ import annotations

import asyncio as _asyncio
import dataclasses as _dataclasses
import typing as _typing

import rich.console as _rich_console
import rich.prompt as _rich_prompt

Validator = _typing.Callable[[str], "bool | str"]


@_dataclasses.dataclass(frozen=True)
class Option:
    """A selectable option."""

    name: str
    """Label shown to the user."""

    value: str
    """Value returned when selected."""

    description: str = ""
    checked: bool = False
    """Pre-selected (multi-select only)."""

    disabled: bool = False


class UIComponents(_typing.Protocol):
    """Interactive UI interface used by plugins."""

    async def checkbox_list(
        self, message: str, options: _typing.Sequence[Option]
    ) -> list[str]: ...

    async def radio_list(
        self,
        message: str,
        options: _typing.Sequence[Option],
        default: str | None = None,
    ) -> str: ...

    async def confirm(self, message: str, default: bool = False) -> bool: ...

    async def input(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
    ) -> str: ...


class NonInteractiveUI:
    """
    UI that answers every prompt with its default.

    Used for ``--yes`` runs and whenever no terminal is attached.
    """

    async def checkbox_list(
        self, message: str, options: _typing.Sequence[Option]
    ) -> list[str]:
        return [o.value for o in options if o.checked and not o.disabled]

    async def radio_list(
        self,
        message: str,
        options: _typing.Sequence[Option],
        default: str | None = None,
    ) -> str:
        if default is not None:
            return default
        return options[0].value if options else ""

    async def confirm(self, message: str, default: bool = False) -> bool:
        return default

    async def input(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
    ) -> str:
        return default


class RichUI:
    """
    Terminal UI built on Rich prompts.

    Prompts block on stdin, so each one runs in a worker thread to keep
    the event loop free.
    """

    def __init__(self, console: _rich_console.Console | None = None) -> None:
        self._console = console or _rich_console.Console()

    async def checkbox_list(
        self, message: str, options: _typing.Sequence[Option]
    ) -> list[str]:
        selectable = [o for o in options if not o.disabled]
        self._console.print(f"[bold]{message}[/bold]")
        for i, option in enumerate(selectable, 1):
            mark = "x" if option.checked else " "
            suffix = f" [dim]- {option.description}[/dim]" if option.description else ""
            self._console.print(f"  {i}. [{mark}] {option.name}{suffix}")

        default = ",".join(
            str(i) for i, o in enumerate(selectable, 1) if o.checked
        )
        while True:
            answer = await _asyncio.to_thread(
                _rich_prompt.Prompt.ask,
                "Select (comma-separated numbers)",
                console=self._console,
                default=default,
            )
            picked = _parse_selection(answer or "", len(selectable))
            if picked is not None:
                return [selectable[i].value for i in picked]
            self._console.print("[red]Invalid selection[/red]")

    async def radio_list(
        self,
        message: str,
        options: _typing.Sequence[Option],
        default: str | None = None,
    ) -> str:
        self._console.print(f"[bold]{message}[/bold]")
        for i, option in enumerate(options, 1):
            suffix = f" [dim]- {option.description}[/dim]" if option.description else ""
            self._console.print(f"  {i}. {option.name}{suffix}")

        values = [o.value for o in options]
        default_index = values.index(default) + 1 if default in values else 1
        answer = await _asyncio.to_thread(
            _rich_prompt.IntPrompt.ask,
            "Choice",
            console=self._console,
            choices=[str(i) for i in range(1, len(options) + 1)],
            default=default_index,
        )
        return values[answer - 1]

    async def confirm(self, message: str, default: bool = False) -> bool:
        return await _asyncio.to_thread(
            _rich_prompt.Confirm.ask,
            message,
            console=self._console,
            default=default,
        )

    async def input(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
    ) -> str:
        while True:
            answer = await _asyncio.to_thread(
                _rich_prompt.Prompt.ask,
                message,
                console=self._console,
                default=default,
            )
            if validate is None:
                return answer
            verdict = validate(answer)
            if verdict is True:
                return answer
            error = verdict if isinstance(verdict, str) else "Invalid input"
            self._console.print(f"[red]{error}[/red]")


def _parse_selection(answer: str, count: int) -> list[int] | None:
    """Parse ``"1,3"`` into zero-based indexes; None if invalid."""
    picked: list[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            return None
        index = int(part) - 1
        if index not in picked:
            picked.append(index)
    return picked
