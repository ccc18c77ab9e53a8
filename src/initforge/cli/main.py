"""
Main CLI entry point for initforge.

Provides the command-line interface using Click. The CLI is a thin
wrapper: it loads settings, registers the built-in plugins and hands
off to the orchestrator.
"""

import asyncio as _asyncio
import json as _json
import logging as _logging
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click

import initforge
import initforge.builtin as builtin
import initforge.config as config
import initforge.core.assembler as assembler
import initforge.core.marker as marker
import initforge.core.orchestrator as orchestrator
import initforge.core.template_engine as template_engine
import initforge.i18n as i18n
import initforge.plugins as plugins
import initforge.ui as ui

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _run_async(coro: _typing.Coroutine[_typing.Any, _typing.Any, _typing.Any]) -> _typing.Any:
    """Run an async coroutine synchronously."""
    return _asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    _logging.basicConfig(
        level=_logging.DEBUG if verbose else _logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=_sys.stderr,
    )


def _create_registry() -> plugins.PluginRegistry:
    registry = plugins.PluginRegistry()
    builtin.register_builtin_plugins(registry)
    return registry


async def _keep_existing(
    project_root: _pathlib.Path,
    base_dir: str,
    prompts: ui.UIComponents,
    logger: ui.ConsoleLogger,
    translator: i18n.Translator,
) -> bool:
    """Report an existing initialization; True if it should be kept."""
    if not await marker.is_project_initialized(project_root, base_dir):
        return False

    logger.warning(translator.t("marker.exists"))
    info = await marker.get_marker_info(project_root, base_dir)
    if info is not None:
        if info.project_name:
            logger.info(translator.t("marker.project", name=info.project_name))
        logger.info(translator.t("marker.details", date=info.date, version=info.version))
    return not await prompts.confirm(translator.t("marker.confirm"), False)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(initforge.__version__, "-V", "--version", prog_name="initforge")
@_click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """
    initforge - plugin-driven agent configuration for a project.

    \b
    Examples:
        initforge init                        # Initialize the current directory
        initforge init --target ../app --yes  # Non-interactive, another directory
        initforge plugins list                # Show available plugins
        initforge template check T.md         # Find unhandled placeholders
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


@cli.command()
@_click.option(
    "--target",
    "target",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Project directory to initialize (default: current directory)",
)
@_click.option(
    "--config",
    "config_path",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="YAML file with plugin run configuration",
)
@_click.option(
    "--template",
    "template_path",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Root document template (default: bundled template)",
)
@_click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept defaults without prompting")
@_click.option("--force", is_flag=True, help="Re-initialize a project that was already initialized")
@_click.option("--json", "json_output", is_flag=True, help="Print the run report as JSON")
@_click.pass_context
def init(
    ctx: _click.Context,
    target: _pathlib.Path | None,
    config_path: _pathlib.Path | None,
    template_path: _pathlib.Path | None,
    assume_yes: bool,
    force: bool,
    json_output: bool,
) -> None:
    """
    Initialize agent configuration for a project.

    An already initialized project is kept as is unless --force is given
    or the re-initialization is confirmed interactively.
    """
    project_root = (target or _pathlib.Path.cwd()).resolve()
    project_root.mkdir(parents=True, exist_ok=True)

    try:
        settings = config.Settings.load(project_root)
        run_config = config.load_run_config(config_path) if config_path else None
    except (config.ConfigFileError, ValueError) as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    if ctx.obj.get("verbose"):
        settings.verbose = True
    if template_path is not None:
        settings.output.template = str(template_path.resolve())

    interactive = not assume_yes and _sys.stdin.isatty()
    logger = ui.ConsoleLogger(quiet=json_output)
    translator = i18n.Translator(settings.language.user)
    prompts = ui.RichUI(logger.console) if interactive else ui.NonInteractiveUI()

    base_dir = settings.output.project_data
    if not force and _run_async(
        _keep_existing(project_root, base_dir, prompts, logger, translator)
    ):
        logger.info(translator.t("marker.keeping"))
        if json_output:
            path = marker.marker_path(project_root, base_dir)
            _click.echo(_json.dumps({"skipped": True, "marker": str(path)}, indent=2))
        return

    runner = orchestrator.Orchestrator(
        _create_registry(),
        settings,
        run_config=run_config,
        logger=logger,
        ui=prompts,
        translator=translator,
    )

    try:
        report = _run_async(runner.run())
    except plugins.PluginError as e:
        logger.error(translator.t("run.aborted", error=str(e)))
        raise SystemExit(1) from None

    if json_output:
        _click.echo(_json.dumps(report.to_dict(), indent=2))
    if report.summary.failed:
        raise SystemExit(2)


@cli.group(name="plugins")
def plugins_cmd() -> None:
    """Inspect available plugins."""
    pass


@plugins_cmd.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
def plugins_list(json_output: bool) -> None:
    """List registered plugins in registration order."""
    registry = _create_registry()

    if json_output:
        _click.echo(_json.dumps(registry.to_dict(), indent=2))
        return

    if not registry.count():
        _click.echo(i18n.Translator().t("plugins.none"))
        return

    _click.echo("Available Plugins:")
    for plugin in registry:
        meta = plugin.meta
        star = "*" if meta.recommended else " "
        _click.echo(f"  {star} {meta.name} ({meta.version}) [{meta.rules_priority:02d}]")
        _click.echo(f"      {meta.description}")
        if meta.dependencies:
            _click.echo(f"      Depends on: {', '.join(meta.dependencies)}")


@cli.group(name="template")
def template_cmd() -> None:
    """Work with root document templates."""
    pass


@template_cmd.command(name="check")
@_click.argument(
    "template_path",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
)
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
def template_check(template_path: _pathlib.Path, json_output: bool) -> None:
    """Report placeholders no variable or plugin fills."""
    try:
        text = _run_async(template_engine.load_template(template_path))
    except (OSError, UnicodeDecodeError) as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    registry = _create_registry()
    unhandled = assembler.validate_placeholders(text, registry.get_all())
    translator = i18n.Translator()

    if json_output:
        _click.echo(
            _json.dumps(
                {
                    "template": str(template_path),
                    "placeholders": assembler.extract_placeholders(text),
                    "unhandled": unhandled,
                },
                indent=2,
            )
        )
    elif unhandled:
        _click.echo(translator.t("template.unhandled", names=", ".join(unhandled)))
    else:
        _click.echo(translator.t("template.ok"))

    if unhandled:
        raise SystemExit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
