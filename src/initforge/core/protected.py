"""
Protected files around external init commands.

Some plugins run a third-party init command that may rewrite files the
project already owns. The guard snapshots those files, runs the command,
then reconciles each file's prior content with whatever the command left
on disk, using the strategy the plugin declared.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.constants as constants
import initforge.core.merge as merge
import initforge.core.resource_writer as resource_writer
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.utils.file_ops as file_ops
import initforge.utils.process as process

if _typing.TYPE_CHECKING:
    import initforge.plugins.context as context

_logger = _logging.getLogger(__name__)


class MergeStrategyError(ValueError):
    """Raised when a protected file's strategy cannot be applied."""

    pass


def append_merge(prior: str, new: str) -> str:
    """Prior content first, then the new content."""
    return f"{prior.rstrip()}{constants.DEFAULT_MARKDOWN_SEPARATOR}{new.lstrip()}"


def prepend_merge(prior: str, new: str) -> str:
    """New content first, then the prior content."""
    return f"{new.rstrip()}{constants.DEFAULT_MARKDOWN_SEPARATOR}{prior.lstrip()}"


class ProtectedFileGuard:
    """
    Snapshot, run, reconcile.

    Usage:
        guard = ProtectedFileGuard(plugin, project_root, ctx)
        failures = await guard.snapshot()
        await guard.run_command(plugin.protected_command)
        results = await guard.reconcile()
    """

    def __init__(
        self,
        plugin: types.Plugin,
        project_root: _pathlib.Path | str,
        ctx: context.PluginContext,
        logger: console.Logger | None = None,
    ) -> None:
        self._plugin = plugin
        self._root = _pathlib.Path(project_root)
        self._ctx = ctx
        self._logger = logger or ctx.logger
        self._snapshots: dict[str, str | None] = {}

    @property
    def snapshots(self) -> dict[str, str | None]:
        """Prior content per protected path (None if the file did not exist)."""
        return dict(self._snapshots)

    def _path(self, relative: str) -> _pathlib.Path:
        return self._root / relative

    async def snapshot(self) -> list[resource_writer.WriteResult]:
        """
        Record the current content of every protected file.

        Returns:
            A failure result per file that could not be read.
        """
        self._snapshots = {}
        failures: list[resource_writer.WriteResult] = []
        for protected in self._plugin.protected_files:
            target = self._path(protected.path)
            try:
                if await file_ops.file_exists(target):
                    self._snapshots[protected.path] = await file_ops.read_file(target)
                elif target.exists():
                    raise IsADirectoryError(f"Not a regular file: {target}")
                else:
                    self._snapshots[protected.path] = None
            except Exception as e:
                self._logger.warning(f"    Failed to read {protected.path}: {e}")
                failures.append(self._failure(protected.path, str(e)))
        _logger.debug(
            "Snapshot of %d protected file(s) for %s",
            len(self._snapshots),
            self._plugin.meta.name,
        )
        return failures

    async def run_command(
        self,
        command: str,
        timeout: float = constants.DEFAULT_PROTECTED_COMMAND_TIMEOUT,
    ) -> process.ProcessResult:
        """
        Run the plugin's init command in the project root.

        Raises:
            CommandTimeoutError: If the command times out.
            CommandFailedError: If the command exits non-zero.
        """
        self._logger.info(f"Running: {command}")
        return await process.run_shell(command, cwd=self._root, timeout=timeout)

    async def reconcile(self) -> list[resource_writer.WriteResult]:
        """
        Merge each protected file's prior content with what is on disk now.

        Prior content with nothing (or only whitespace) left on disk is
        restored, including a prior empty file. A file that is new or was
        empty before is kept as the command left it. Otherwise both sides
        are merged per the file's strategy.

        Returns:
            One result per protected file.
        """
        results = []
        for protected in self._plugin.protected_files:
            results.append(await self._reconcile_file(protected))
        return results

    async def restore(self) -> dict[str, str]:
        """
        Put every snapshot back, removing files that did not exist before.

        Returns:
            Error message per path that could not be restored.
        """
        errors: dict[str, str] = {}
        for relative, prior in self._snapshots.items():
            target = self._path(relative)
            try:
                if prior is None:
                    await file_ops.remove_file(target)
                else:
                    await file_ops.write_file(target, prior)
            except Exception as e:
                self._logger.warning(f"    Failed to restore {relative}: {e}")
                errors[relative] = str(e)
        _logger.debug("Restored protected files for %s", self._plugin.meta.name)
        return errors

    def _failure(self, relative: str, error: str) -> resource_writer.WriteResult:
        return resource_writer.WriteResult(
            "protected-file", relative, str(self._path(relative)), False, error
        )

    async def _reconcile_file(
        self, protected: types.ProtectedFile
    ) -> resource_writer.WriteResult:
        target = self._path(protected.path)
        prior = self._snapshots.get(protected.path)
        try:
            current = await file_ops.read_file(target) if await file_ops.file_exists(target) else None

            if prior is None:
                pass
            elif current is None or not current.strip():
                if current != prior:
                    await file_ops.write_file(target, prior)
            elif prior.strip():
                merged = await self._merge(protected, prior, current)
                await file_ops.write_file(target, merged)
        except Exception as e:
            self._logger.warning(f"    Failed to merge {protected.path}: {e}")
            return self._failure(protected.path, str(e))

        self._logger.success(f"    Merged: {protected.path}")
        return resource_writer.WriteResult("protected-file", protected.path, str(target), True)

    async def _merge(self, protected: types.ProtectedFile, prior: str, current: str) -> str:
        strategy = protected.strategy
        if strategy == "markdown":
            return merge.merge_markdown(prior, current)
        if strategy == "json":
            return merge.merge_json(prior, current)
        if strategy == "ignore":
            return merge.merge_ignore(prior, current)
        if strategy == "append":
            return append_merge(prior, current)
        if strategy == "prepend":
            return prepend_merge(prior, current)
        if strategy == "custom":
            if self._plugin.merge_file is None:
                raise MergeStrategyError(
                    f"Plugin '{self._plugin.meta.name}' uses the 'custom' strategy for "
                    f"'{protected.path}' but has no merge_file"
                )
            return await types.resolve(
                self._plugin.merge_file(protected.path, prior, current, self._ctx)
            )
        raise MergeStrategyError(f"Unknown merge strategy: {strategy}")

    async def run(
        self,
        command: str,
        timeout: float = constants.DEFAULT_PROTECTED_COMMAND_TIMEOUT,
    ) -> list[resource_writer.WriteResult]:
        """
        Snapshot, run ``command``, reconcile.

        Nothing here raises. A protected file that cannot be read skips the
        command, since its content could not be put back. A failed command
        restores every snapshot. Either way each protected file gets a
        failure result.
        """
        failures = await self.snapshot()
        if failures:
            failed = {r.name: r for r in failures}
            self._logger.warning(
                f"Skipping init command for {self._plugin.meta.name}: "
                "protected files could not be read"
            )
            return [
                failed.get(p.path) or self._failure(p.path, "init command skipped")
                for p in self._plugin.protected_files
            ]

        try:
            await self.run_command(command, timeout)
        except Exception as e:
            self._logger.warning(
                f"Init command for {self._plugin.meta.name} failed: {e}"
            )
            errors = await self.restore()
            return [
                self._failure(p.path, errors.get(p.path, str(e)))
                for p in self._plugin.protected_files
            ]
        return await self.reconcile()
