"""
External service registration.

Plugins declare services; each one is registered by running the
configured registration command:

    <command> --scope <scope> <name> -- <expanded service command> <args...>

``${PROJECT_ROOT}`` and ``${PROJECT_NAME}`` are expanded before the call.
``$(pwd)`` is left for the shell. A failed or timed-out registration is
recorded and logged; the remaining services are still registered.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.constants as constants
import initforge.core.resource_writer as resource_writer
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.utils.process as process

_logger = _logging.getLogger(__name__)

PROJECT_ROOT_TOKEN = "${PROJECT_ROOT}"
PROJECT_NAME_TOKEN = "${PROJECT_NAME}"


class ServiceWriter:
    """Registers plugin-declared external services."""

    def __init__(
        self,
        logger: console.Logger,
        project_root: _pathlib.Path | str,
        project_name: str,
        *,
        registration_command: str = constants.DEFAULT_REGISTRATION_COMMAND,
        timeout: float = constants.DEFAULT_REGISTRATION_TIMEOUT,
    ) -> None:
        """
        Args:
            logger: Progress logger.
            project_root: Project root, also the working directory for
                registration commands.
            project_name: Substituted for ``${PROJECT_NAME}``.
            registration_command: Command prefix that registers one service.
            timeout: Seconds allowed per registration.
        """
        self._logger = logger
        self._project_root = _pathlib.Path(project_root)
        self._project_name = project_name
        self._registration_command = registration_command
        self._timeout = timeout
        self._rejected: list[resource_writer.WriteResult] = []

    def expand_templates(self, command: str) -> str:
        """Replace the project root and name tokens; shell syntax is kept."""
        return command.replace(PROJECT_ROOT_TOKEN, str(self._project_root)).replace(
            PROJECT_NAME_TOKEN, self._project_name
        )

    def build_add_command(self, service: types.ExternalServiceConfig) -> str:
        """Full registration command line for one service."""
        parts = [
            self._registration_command,
            "--scope",
            service.scope,
            service.name,
            "--",
            self.expand_templates(service.command),
            *service.args,
        ]
        return " ".join(parts)

    @property
    def rejected(self) -> list[resource_writer.WriteResult]:
        """Services whose ``condition`` raised during the last collect."""
        return list(self._rejected)

    def _condition_met(
        self,
        service: types.ExternalServiceConfig,
        plugin_config: types.PluginConfig,
    ) -> bool:
        if service.condition is None:
            return True
        try:
            return bool(service.condition(plugin_config))
        except Exception as e:
            self._logger.warning(f"  Failed to evaluate condition for service {service.name}: {e}")
            self._rejected.append(
                resource_writer.WriteResult(
                    "external-service", service.name, "", False, str(e), service.scope
                )
            )
            return False

    def collect_services(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
    ) -> list[types.ExternalServiceConfig]:
        """
        Services to register, in plugin then declaration order.

        Plugins without an enabled run config are skipped, as are services
        whose ``condition`` rejects the plugin's config. A condition that
        raises is recorded in ``rejected`` and its service skipped.
        """
        self._rejected = []
        services: list[types.ExternalServiceConfig] = []
        for plugin in plugins:
            if not plugin.external_services or not resource_writer.is_active(plugin, configs):
                continue
            plugin_config = configs[plugin.meta.name]
            for service in plugin.external_services:
                if not self._condition_met(service, plugin_config):
                    _logger.debug("Skipping service %s: condition not met", service.name)
                    continue
                services.append(service)
        return services

    async def add_service(
        self, service: types.ExternalServiceConfig
    ) -> resource_writer.WriteResult:
        """Register one service. Failures are returned, never raised."""
        command = self.build_add_command(service)
        try:
            await process.run_shell(command, cwd=self._project_root, timeout=self._timeout)
        except Exception as e:
            self._logger.warning(f"  Failed to register service {service.name}: {e}")
            return resource_writer.WriteResult(
                "external-service", service.name, command, False, str(e), service.scope
            )

        self._logger.success(f"  Registered service: {service.name} ({service.scope})")
        return resource_writer.WriteResult(
            "external-service", service.name, command, True, scope=service.scope
        )

    async def write_all_services(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
    ) -> list[resource_writer.WriteResult]:
        """Register every collected service one at a time and log a tally."""
        return await self.register_services(self.collect_services(plugins, configs))

    async def register_services(
        self, services: _typing.Sequence[types.ExternalServiceConfig]
    ) -> list[resource_writer.WriteResult]:
        """
        Register ``services`` in order.

        Services rejected by the last collect lead the results.
        """
        results = self.rejected
        if not services and not results:
            return results

        self._logger.info("Registering external services...")
        for service in services:
            results.append(await self.add_service(service))

        summary = resource_writer.summarize(results)
        if summary.failed:
            self._logger.warning(f"Service registration: {summary}")
        else:
            self._logger.success(f"Registered {summary.succeeded} service(s)")
        return results
