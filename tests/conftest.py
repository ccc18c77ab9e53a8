"""
Shared pytest fixtures for initforge tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import click.testing as _click_testing
import pytest as _pytest

import initforge.config.types as config_types
import initforge.plugins.context as context
import initforge.plugins.registry as registry
import initforge.plugins.types as types
import initforge.ui.prompts as prompts

# Environment keys that should be cleared for isolated tests
ENV_PREFIXES_TO_CLEAR = ("INITFORGE_",)


# =============================================================================
# Test doubles
# =============================================================================


class RecordingLogger:
    """Logger that records every call as ``(level, message)``."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def step(self, number: int, message: str) -> None:
        self.records.append(("step", f"{number}: {message}"))

    def blank(self) -> None:
        self.records.append(("blank", ""))

    def messages(self, level: str | None = None) -> list[str]:
        """Recorded messages, optionally filtered by level."""
        return [m for lvl, m in self.records if level is None or lvl == level]


class ScriptedUI:
    """
    UI that replays scripted answers in order.

    Falls back to the prompt default once the script runs out. Every
    prompt message is recorded in ``asked``.
    """

    def __init__(self, answers: _typing.Sequence[_typing.Any] = ()) -> None:
        self._answers = list(answers)
        self.asked: list[str] = []

    def _next(self, default: _typing.Any) -> _typing.Any:
        return self._answers.pop(0) if self._answers else default

    async def checkbox_list(
        self, message: str, options: _typing.Sequence[prompts.Option]
    ) -> list[str]:
        self.asked.append(message)
        return self._next([o.value for o in options if o.checked])

    async def radio_list(
        self,
        message: str,
        options: _typing.Sequence[prompts.Option],
        default: str | None = None,
    ) -> str:
        self.asked.append(message)
        return self._next(default if default is not None else options[0].value)

    async def confirm(self, message: str, default: bool = False) -> bool:
        self.asked.append(message)
        return self._next(default)

    async def input(
        self,
        message: str,
        default: str = "",
        validate: _typing.Any = None,
    ) -> str:
        self.asked.append(message)
        return self._next(default)


def make_plugin(
    name: str,
    *,
    dependencies: _typing.Sequence[str] = (),
    command_name: str | None = None,
    rules_priority: int = 90,
    **fields: _typing.Any,
) -> types.Plugin:
    """Build a minimal valid plugin; extra keyword args set descriptor fields."""
    meta = types.PluginMeta(
        name=name,
        command_name=command_name or name,
        version="1.0.0",
        description=f"{name} plugin",
        dependencies=tuple(dependencies),
        rules_priority=rules_priority,
    )
    return types.Plugin(meta=meta, **fields)


def enabled(*names: str, **options: dict[str, _typing.Any]) -> dict[str, config_types.PluginConfig]:
    """Enabled run config for each name; ``options`` maps name -> options."""
    return {
        name: config_types.PluginConfig(enabled=True, options=options.get(name, {}))
        for name in names
    }


# =============================================================================
# Fixtures
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory: _pytest.TempPathFactory) -> _typing.Iterator[None]:
    """
    Isolate every test from INITFORGE_* variables and the real user config.

    INITFORGE_CONFIG_DIR points at an empty temporary directory.
    """
    clean = {
        k: v for k, v in _os.environ.items() if not k.startswith(ENV_PREFIXES_TO_CLEAR)
    }
    clean["INITFORGE_CONFIG_DIR"] = str(tmp_path_factory.mktemp("user-config"))
    with _mock.patch.dict(_os.environ, clean, clear=True):
        yield


@_pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@_pytest.fixture
def project_dir(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """An empty project directory."""
    root = tmp_path / "demo-project"
    root.mkdir()
    return root


@_pytest.fixture
def plugin_ctx(project_dir: _pathlib.Path, logger: RecordingLogger) -> context.PluginContext:
    """Plugin context for ``project_dir`` with a recording logger."""
    return context.create_plugin_context(
        project_dir, project_name="demo-project", logger=logger
    )


@_pytest.fixture
def plugin_registry() -> registry.PluginRegistry:
    return registry.PluginRegistry()


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """Click test runner."""
    return _click_testing.CliRunner()
