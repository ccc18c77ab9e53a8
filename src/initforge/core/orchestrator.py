"""
Initialization run orchestration.

One run drives the enabled plugins through the full lifecycle:

    configure -> load -> before_init -> execute -> rules -> resources
    -> gitignore -> services -> protected files -> document -> marker
    -> after_init -> cleanup

Registration, dependency and hook errors are fatal and propagate.
Artifact writes never raise; their results are collected into the
RunReport.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import initforge.config.settings as settings
import initforge.config.types as config_types
import initforge.constants as constants
import initforge.core.assembler as assembler
import initforge.core.gitignore as gitignore
import initforge.core.marker as marker
import initforge.core.output_router as output_router
import initforge.core.protected as protected
import initforge.core.resource_writer as resource_writer
import initforge.core.rules_writer as rules_writer
import initforge.core.service_writer as service_writer
import initforge.core.template_engine as template_engine
import initforge.i18n as i18n
import initforge.plugins.context as context
import initforge.plugins.loader as loader
import initforge.plugins.registry as registry
import initforge.plugins.types as types
import initforge.ui.console as console
import initforge.ui.prompts as prompts
import initforge.utils.file_ops as file_ops

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class RunReport:
    """Everything one run produced."""

    plugins: list[str] = _dataclasses.field(default_factory=list)
    """Loaded plugins in execution order."""

    configs: dict[str, config_types.PluginConfig] = _dataclasses.field(default_factory=dict)
    results: list[resource_writer.WriteResult] = _dataclasses.field(default_factory=list)
    document: _pathlib.Path | None = None
    """Path of the assembled root document, if it was written."""

    @property
    def summary(self) -> resource_writer.WriteSummary:
        return resource_writer.summarize(self.results)

    @property
    def failures(self) -> list[resource_writer.WriteResult]:
        return [r for r in self.results if not r.success]

    def by_type(self, kind: str) -> list[resource_writer.WriteResult]:
        """Results of one artifact type."""
        return [r for r in self.results if r.type == kind]

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        summary = self.summary
        return {
            "plugins": list(self.plugins),
            "results": [r.to_dict() for r in self.results],
            "document": str(self.document) if self.document else None,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
        }


class Orchestrator:
    """Runs one initialization of a project."""

    def __init__(
        self,
        plugin_registry: registry.PluginRegistry,
        config: settings.Settings,
        *,
        run_config: _typing.Mapping[str, config_types.PluginConfig] | None = None,
        logger: console.Logger | None = None,
        ui: prompts.UIComponents | None = None,
        translator: i18n.I18n | None = None,
    ) -> None:
        """
        Args:
            plugin_registry: Registry holding every available plugin.
            config: Settings for this run.
            run_config: Explicit plugin configs; entries override the
                settings-derived ones.
            logger: Progress logger (defaults to a ConsoleLogger).
            ui: Interactive UI (defaults to NonInteractiveUI).
            translator: Localization (defaults to the user language).
        """
        self._registry = plugin_registry
        self._settings = config
        self._logger = logger or console.ConsoleLogger()
        self._ui = ui or prompts.NonInteractiveUI()
        self._i18n = translator or i18n.Translator(config.language.user)
        self._loader = loader.PluginLoader(plugin_registry)

        self._run_config = config.plugin_configs()
        self._run_config.update(run_config or {})

        self._project_root = config.project_root
        self._router = output_router.OutputRouter(
            self._project_root,
            output_router.OutputRoutes.from_config(config.output),
        )
        self._step = 0

    @property
    def loader(self) -> loader.PluginLoader:
        return self._loader

    @property
    def router(self) -> output_router.OutputRouter:
        return self._router

    def create_context(self) -> context.PluginContext:
        """A fresh context for this run (new shared store)."""
        return context.create_plugin_context(
            self._project_root,
            project_name=self._settings.project_name,
            plugin_configs=self._run_config,
            language=self._settings.language,
            logger=self._logger,
            ui=self._ui,
            translator=self._i18n,
        )

    def _next_step(self, message: str) -> None:
        self._step += 1
        self._logger.step(self._step, message)

    async def run(self) -> RunReport:
        """
        Run every phase once.

        Plugins are configured before anything executes, so a plugin its
        configuration flow disables is dropped from the run, and the
        dependency check sees the final configs.

        Raises:
            DependencyError: If the enabled plugins cannot be ordered.
            PluginHookError: If a lifecycle hook fails.
        """
        self._step = 0
        ctx = self.create_context()
        report = RunReport()

        candidates = self._loader.sort_by_dependencies(
            self._registry.get_enabled(self._run_config)
        )
        self._next_step(self._i18n.t("run.configuring"))
        configs = await self.configure(candidates, ctx)
        ctx.config.plugins = dict(configs)
        report.configs = dict(configs)

        plugins = await self._loader.load({**self._run_config, **configs}, ctx)
        report.plugins = [p.meta.name for p in plugins]

        await self._hooks("before_init", ctx)
        await self._hooks("execute", ctx)

        report.results.extend(await self._write_rules(plugins, configs, ctx))
        report.results.extend(await self._write_resources(plugins, configs, ctx))
        report.results.extend(await self._write_gitignore(plugins, configs))
        report.results.extend(await self._write_services(plugins, configs))
        report.results.extend(await self._run_protected(plugins, configs, ctx))

        document_result = await self._write_document(plugins, configs, ctx)
        report.results.append(document_result)
        if document_result.success:
            report.document = _pathlib.Path(document_result.path)
        report.results.append(await self._write_marker())

        await self._hooks("after_init", ctx)
        await self._hooks("cleanup", ctx)

        summary = report.summary
        message = self._i18n.t(
            "run.done", succeeded=summary.succeeded, failed=summary.failed
        )
        if summary.failed:
            self._logger.warning(message)
        else:
            self._logger.success(message)
        return report

    async def configure(
        self,
        plugins: _typing.Sequence[types.Plugin],
        ctx: context.PluginContext,
    ) -> dict[str, config_types.PluginConfig]:
        """
        Produce the run config of every enabled plugin, in dependency order.

        An explicit config (settings or run config file) is used as is.
        Otherwise a plugin that needs configuration is asked through its
        configuration flow, seeing the configs gathered so far; the rest
        get the default config.
        """
        configs: dict[str, config_types.PluginConfig] = {}
        for plugin in plugins:
            name = plugin.meta.name
            explicit = self._run_config.get(name)
            flow = plugin.configuration

            if explicit is not None:
                configs[name] = explicit
            elif flow is not None and flow.needs_configuration:
                config_ctx = context.ConfigurationContext(
                    project_name=ctx.config.project_name,
                    project_root=self._project_root,
                    other_plugins=dict(configs),
                    ui=self._ui,
                    logger=self._logger,
                )
                configs[name] = await types.resolve(flow.configure(config_ctx))
                for line in flow.get_summary(configs[name]):
                    self._logger.info(f"  {line}")
            else:
                configs[name] = config_types.PluginConfig()
            _logger.debug("Config for %s: %s", name, configs[name])
        return configs

    async def _hooks(self, hook_name: str, ctx: context.PluginContext) -> None:
        if not any(p.get_hook(hook_name) for p in self._loader.get_loaded_plugins()):
            return
        self._next_step(self._i18n.t("run.hooks", hook=hook_name))
        await self._loader.execute_hook(hook_name, ctx)

    def _registration_ordered(
        self, plugins: _typing.Sequence[types.Plugin]
    ) -> list[types.Plugin]:
        names = {p.meta.name for p in plugins}
        return [p for p in self._registry.get_all() if p.meta.name in names]

    async def _write_rules(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[resource_writer.WriteResult]:
        self._next_step(self._i18n.t("run.rules"))
        writer = rules_writer.RulesWriter(self._router, self._logger)
        results = [
            await writer.write_project_rules(
                self._settings.project_name, self._settings.project.version
            )
        ]
        # Equal priorities keep registration order
        results.extend(
            await writer.write_all_plugin_rules(
                self._registration_ordered(plugins), configs, ctx
            )
        )
        return results

    async def _write_resources(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[resource_writer.WriteResult]:
        self._next_step(self._i18n.t("run.resources"))
        templates_dir = self._settings.output.templates_dir
        template_loader = template_engine.TemplateLoader(
            _pathlib.Path(templates_dir).expanduser()
            if templates_dir
            else template_engine.get_bundled_templates_dir()
        )
        writer = resource_writer.ResourceWriter(self._router, template_loader, self._logger)
        return await writer.write_all_resources(
            self._registration_ordered(plugins), configs, ctx
        )

    async def _write_gitignore(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
    ) -> list[resource_writer.WriteResult]:
        writer = gitignore.GitignoreWriter(self._logger)
        sections = writer.collect(plugins, configs)
        results = writer.failures
        if not sections and not results:
            return []
        self._next_step(self._i18n.t("run.gitignore"))
        result = await writer.write(self._project_root)
        if result is not None:
            results.append(result)
        return results

    async def _write_services(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
    ) -> list[resource_writer.WriteResult]:
        writer = service_writer.ServiceWriter(
            self._logger,
            self._project_root,
            self._settings.project_name,
            registration_command=self._settings.registration.command,
            timeout=self._settings.registration.timeout,
        )
        services = writer.collect_services(plugins, configs)
        if not services and not writer.rejected:
            return []
        self._next_step(self._i18n.t("run.services"))
        return await writer.register_services(services)

    async def _run_protected(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
        ctx: context.PluginContext,
    ) -> list[resource_writer.WriteResult]:
        results: list[resource_writer.WriteResult] = []
        for plugin in plugins:
            if not plugin.protected_command or not resource_writer.is_active(plugin, configs):
                continue
            guard = protected.ProtectedFileGuard(plugin, self._project_root, ctx, self._logger)
            results.extend(await guard.run(plugin.protected_command))
        return results

    async def _write_document(
        self,
        plugins: _typing.Sequence[types.Plugin],
        configs: resource_writer.PluginConfigs,
        ctx: context.PluginContext,
    ) -> resource_writer.WriteResult:
        document = self._settings.output.document
        self._next_step(self._i18n.t("run.document", document=document))

        template_path = self.template_path()
        target = self._project_root / document
        try:
            content = await assembler.assemble_document(
                template_path,
                assembler.default_variables(self._settings),
                plugins,
                configs,
                ctx,
            )
            await file_ops.write_file(target, content)
        except Exception as e:
            self._logger.warning(f"Failed to assemble {document}: {e}")
            return resource_writer.WriteResult("data-file", document, str(target), False, str(e))

        self._logger.success(f"Generated: {self._router.display_path(target)}")
        return resource_writer.WriteResult("data-file", document, str(target), True)

    def template_path(self) -> _pathlib.Path:
        """Root document template for this run."""
        if self._settings.output.template:
            return _pathlib.Path(self._settings.output.template).expanduser()
        return template_engine.get_bundled_templates_dir() / constants.DEFAULT_TEMPLATE_NAME

    async def _write_marker(self) -> resource_writer.WriteResult:
        base_dir = self._settings.output.project_data
        target = marker.marker_path(self._project_root, base_dir)
        try:
            await marker.create_marker(
                self._project_root, base_dir, self._settings.project_name
            )
        except Exception as e:
            self._logger.warning(f"Failed to write initialization marker: {e}")
            return resource_writer.WriteResult(
                "data-file", constants.MARKER_FILENAME, str(target), False, str(e)
            )
        _logger.debug("Wrote marker %s", target)
        return resource_writer.WriteResult("data-file", constants.MARKER_FILENAME, str(target), True)
