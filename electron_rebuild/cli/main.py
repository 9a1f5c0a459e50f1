"""Main CLI entry point for electron-rebuild."""

import asyncio
import sys
from pathlib import Path
from typing import NoReturn

import click

from electron_rebuild.cli.display import (
    console,
    create_progress,
    show_banner,
    show_decision,
    show_error,
    show_info,
    show_success,
)
from electron_rebuild.core.config.settings import Settings, get_settings
from electron_rebuild.core.exceptions.errors import ElectronRebuildError, PrebuiltNotFoundError
from electron_rebuild.core.logger.logger import setup_logging
from electron_rebuild.core.process.runner import ProcessRunner
from electron_rebuild.models.rebuild import RebuildRequest
from electron_rebuild.rebuild.abi import ABIProbe, RebuildDecision, RebuildDecisionResult
from electron_rebuild.rebuild.headers import HeaderInstaller
from electron_rebuild.rebuild.prebuilt import (
    locate_electron_prebuilt,
    read_electron_version,
    resolve_electron_executable,
)
from electron_rebuild.rebuild.rebuilder import Rebuilder


def _settings(ctx: click.Context) -> Settings:
    """Settings from --config, or the global ones."""
    obj = ctx.find_root().obj or {}
    return obj.get("settings") or get_settings()


def _prebuilt_dir(electron_prebuilt_dir: str | None, search_from: Path) -> Path | None:
    if electron_prebuilt_dir:
        return Path(electron_prebuilt_dir).resolve()
    return locate_electron_prebuilt(search_from)


def _electron_version(version: str | None, prebuilt_dir: Path | None) -> str:
    """Explicit version, or the one of the located prebuilt."""
    if version:
        return version
    if prebuilt_dir is not None:
        found = read_electron_version(prebuilt_dir)
        if found:
            return found
    raise PrebuiltNotFoundError(
        "Unable to find an Electron version number, pass one with --version",
        search_root=str(prebuilt_dir) if prebuilt_dir else None,
    )


def _fail(title: str, error: Exception) -> NoReturn:
    show_error(title, str(error))
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Override the configured log level",
)
@click.pass_context
def main(ctx: click.Context, version: bool, config_path: str | None, log_level: str | None) -> None:
    """electron-rebuild - Rebuild native Node modules against Electron.

    Run "electron-rebuild rebuild" inside an Electron app to rebuild its
    native dependencies for the installed Electron version.
    """
    if version:
        from electron_rebuild import __version__

        click.echo(f"electron-rebuild version {__version__}")
        return

    ctx.ensure_object(dict)
    if config_path:
        try:
            ctx.obj["settings"] = Settings.from_yaml(Path(config_path))
        except ElectronRebuildError as e:
            _fail("Invalid Configuration", e)

    logging_settings = _settings(ctx).logging
    if log_level:
        logging_settings = logging_settings.model_copy(update={"level": log_level.upper()})
    setup_logging(logging_settings)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.option("--version", "-v", "electron_version", help="Electron version to build against")
@click.option(
    "--module-dir",
    "-m",
    default="node_modules",
    show_default=True,
    type=click.Path(exists=True, file_okay=False),
    help="node_modules directory to rebuild",
)
@click.option("--which-module", "-w", help="Comma-separated modules to rebuild")
@click.option("--electron-prebuilt-dir", "-e", type=click.Path(exists=True, file_okay=False), help="Electron prebuilt package directory")
@click.option("--node-module-version", "-n", help="Electron's module ABI, skips probing Electron")
@click.option("--force", "-f", is_flag=True, help="Rebuild even if Electron's ABI matches Node's")
@click.option("--arch", "-a", help="Target architecture (default: host)")
@click.option("--command", "-c", "npm_command", default="rebuild", show_default=True, help="npm command to run")
@click.option("--dist-url", "-d", help="Header distribution URL")
@click.option("--headers-dir", type=click.Path(file_okay=False), help="Directory headers are cached in")
@click.option("--only-prod", "-p", is_flag=True, help="Leave devDependencies out of the rebuild")
@click.option("--no-optional", is_flag=True, help="Leave optionalDependencies out of the rebuild")
@click.pass_context
def rebuild(
    ctx: click.Context,
    electron_version: str | None,
    module_dir: str,
    which_module: str | None,
    electron_prebuilt_dir: str | None,
    node_module_version: str | None,
    force: bool,
    arch: str | None,
    npm_command: str,
    dist_url: str | None,
    headers_dir: str | None,
    only_prod: bool,
    no_optional: bool,
) -> None:
    """Rebuild native modules for the installed Electron.

    Example:
        electron-rebuild rebuild --module-dir ./node_modules --which-module serialport
    """
    settings = _settings(ctx)
    show_banner()

    modules_path = Path(module_dir).resolve()

    try:
        prebuilt_dir = _prebuilt_dir(electron_prebuilt_dir, modules_path.parent)
        version = _electron_version(electron_version, prebuilt_dir)
    except ElectronRebuildError as e:
        _fail("Electron Not Found", e)

    executable = resolve_electron_executable(prebuilt_dir) if prebuilt_dir else None
    runner = ProcessRunner(timeout=settings.process.timeout)

    async def _rebuild() -> RebuildDecisionResult | None:
        with create_progress() as progress:
            if not force:
                task = progress.add_task("[cyan]Checking module versions...", total=None)
                decision = await RebuildDecision(runner=runner, settings=settings).evaluate(
                    executable,
                    explicit_abi=node_module_version,
                    cwd=modules_path.parent,
                )
                progress.remove_task(task)
                if not decision.rebuild_needed:
                    return decision

            task = progress.add_task(f"[cyan]Installing headers for Electron {version}...", total=None)
            installed_dir = await HeaderInstaller(runner=runner, settings=settings).install(
                version,
                dist_url=dist_url,
                headers_dir=Path(headers_dir) if headers_dir else None,
                arch=arch,
            )
            progress.remove_task(task)

            progress.add_task(f"[cyan]Rebuilding native modules in {modules_path}...", total=None)
            await Rebuilder(runner=runner, settings=settings).rebuild(
                RebuildRequest(
                    version=version,
                    modules_path=modules_path,
                    which_module=which_module,
                    headers_dir=installed_dir,
                    arch=arch,
                    command=npm_command,
                    ignore_dev_deps=only_prod,
                    ignore_optional_deps=no_optional,
                )
            )
        return None

    try:
        decision = asyncio.run(_rebuild())
    except ElectronRebuildError as e:
        _fail("Rebuild Failed", e)

    if decision is not None:
        show_info("Nothing To Do", decision.reason)
        return

    show_success("Rebuild Complete", f"Native modules rebuilt for Electron {version}")


@main.command()
@click.option("--electron-prebuilt-dir", "-e", type=click.Path(exists=True, file_okay=False), help="Electron prebuilt package directory")
@click.option("--node-module-version", "-n", help="Electron's module ABI, skips probing Electron")
@click.pass_context
def check(
    ctx: click.Context,
    electron_prebuilt_dir: str | None,
    node_module_version: str | None,
) -> None:
    """Check whether native modules need rebuilding for Electron."""
    settings = _settings(ctx)
    prebuilt_dir = _prebuilt_dir(electron_prebuilt_dir, Path.cwd())
    executable = resolve_electron_executable(prebuilt_dir) if prebuilt_dir else None

    async def _check() -> RebuildDecisionResult:
        runner = ProcessRunner(timeout=settings.process.timeout)
        return await RebuildDecision(runner=runner, settings=settings).evaluate(
            executable,
            explicit_abi=node_module_version,
        )

    try:
        result = asyncio.run(_check())
    except ElectronRebuildError as e:
        _fail("Check Failed", e)

    show_decision(result)


@main.command()
@click.option("--version", "-v", "electron_version", required=True, help="Electron version")
@click.option("--arch", "-a", help="Target architecture (default: host)")
@click.option("--dist-url", "-d", help="Header distribution URL")
@click.option("--headers-dir", type=click.Path(file_okay=False), help="Directory headers are cached in")
@click.pass_context
def headers(
    ctx: click.Context,
    electron_version: str,
    arch: str | None,
    dist_url: str | None,
    headers_dir: str | None,
) -> None:
    """Install Electron headers without rebuilding anything.

    Example:
        electron-rebuild headers --version 14.0.0 --arch x64
    """
    settings = _settings(ctx)

    async def _install() -> Path:
        runner = ProcessRunner(timeout=settings.process.timeout)
        return await HeaderInstaller(runner=runner, settings=settings).install(
            electron_version,
            dist_url=dist_url,
            headers_dir=Path(headers_dir) if headers_dir else None,
            arch=arch,
        )

    try:
        installed_dir = asyncio.run(_install())
    except ElectronRebuildError as e:
        _fail("Header Install Failed", e)

    show_success("Headers Ready", f"Headers for Electron {electron_version} are in {installed_dir}")


@main.command()
@click.argument("executable", type=click.Path(exists=True, dir_okay=False), required=False)
@click.option("--electron-prebuilt-dir", "-e", type=click.Path(exists=True, file_okay=False), help="Electron prebuilt package directory")
@click.pass_context
def abi(ctx: click.Context, executable: str | None, electron_prebuilt_dir: str | None) -> None:
    """Print the module ABI version of an Electron executable."""
    settings = _settings(ctx)

    target: Path | None = Path(executable) if executable else None
    if target is None:
        prebuilt_dir = _prebuilt_dir(electron_prebuilt_dir, Path.cwd())
        target = resolve_electron_executable(prebuilt_dir) if prebuilt_dir else None
    if target is None:
        _fail("Electron Not Found", PrebuiltNotFoundError("Pass an Electron executable or --electron-prebuilt-dir"))

    try:
        runner = ProcessRunner(timeout=settings.process.timeout)
        module_version = asyncio.run(ABIProbe(runner=runner).query(target))
    except ElectronRebuildError as e:
        _fail("Probe Failed", e)

    console.print(module_version)


if __name__ == "__main__":
    main()
