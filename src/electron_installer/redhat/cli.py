"""The `electron-installer-redhat` command-line interface."""

import importlib.metadata
import logging
from pathlib import Path
import sys
import tomllib
from typing import Any

import click
import structlog

from .exceptions import InstallerError
from .options import resolve_options
from .packaging.builder import DEFAULT_RPMBUILD
from .packaging.orchestrator import InstallerOrchestrator
from .packaging.reader import read_metadata

try:
    __version__ = importlib.metadata.version("electron-installer-redhat")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

CONFIG_TABLE = "electron-installer-redhat"
LOG_LEVEL_ENV = "ELECTRON_INSTALLER_LOG_LEVEL"


def configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )


def load_config(config_path: Path | None) -> dict[str, Any]:
    """
    Reads options from a TOML file. A `[tool.electron-installer-redhat]`
    table is used when present, otherwise the whole document.
    """
    if config_path is None:
        return {}
    with config_path.open("rb") as f:
        data = tomllib.load(f)
    tool = data.get("tool")
    table = tool.get(CONFIG_TABLE) if isinstance(tool, dict) else None
    return dict(table if isinstance(table, dict) else data)


def _cli_overrides(**values: Any) -> dict[str, Any]:
    overrides = {}
    for key, value in values.items():
        if value is None or value == ():
            continue
        overrides[key] = list(value) if isinstance(value, tuple) else value
    return overrides


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="electron-installer-redhat",
    message="%(prog)s version %(version)s",
)
@click.option(
    "--log-level",
    envvar=LOG_LEVEL_ENV,
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Verbosity of the structured log written to stderr.",
)
def cli(log_level: str) -> None:
    """Create a Red Hat package for your Electron app."""
    configure_logging(log_level)


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
    help="TOML file with package options.",
)


@cli.command("package")
@click.argument(
    "src", type=click.Path(exists=True, file_okay=False, resolve_path=True)
)
@click.argument("dest", type=click.Path())
@click.option("--arch", help="Target architecture, e.g. x86_64.")
@click.option("--name", help="Package name. Defaults to package.json `name`.")
@click.option("--product-name", help="Application name shown in menus.")
@click.option("--generic-name", help="Generic application name, e.g. 'Text Editor'.")
@click.option("--description", help="Short package summary.")
@click.option("--product-description", help="Long package description.")
@click.option("--version-string", "version", help="Package version.")
@click.option("--revision", help="Package release number.")
@click.option("--license", "license_", help="Package license.")
@click.option("--homepage", help="Project URL.")
@click.option("--bin", "bin_", help="Executable inside the application directory.")
@click.option(
    "--icon",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="PNG icon for the desktop entry.",
)
@click.option("--requires", multiple=True, help="Runtime dependency (repeatable).")
@click.option("--category", "categories", multiple=True, help="Desktop category (repeatable).")
@click.option("--exclude", multiple=True, help="Glob of application files to leave out (repeatable).")
@config_option
@click.option(
    "--rpmbuild",
    default=DEFAULT_RPMBUILD,
    show_default=True,
    help="The rpmbuild executable to run.",
)
@click.option(
    "--keep-staging",
    is_flag=True,
    help="Keep the staging tree after exit for inspection.",
)
def package_command(
    src: str,
    dest: str,
    config_path: Path | None,
    rpmbuild: str,
    keep_staging: bool,
    license_: str | None,
    bin_: str | None,
    **options: Any,
) -> None:
    """Packages the Electron application in SRC, writing packages to DEST."""
    try:
        config = load_config(config_path)
    except tomllib.TOMLDecodeError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    config.update(_cli_overrides(license=license_, bin=bin_, **options))
    if not config.get("arch"):
        raise click.UsageError(
            "Missing required option 'arch'. Pass --arch or set it in the config file."
        )

    click.echo("🚀 Creating package (this may take a while)...")
    try:
        orchestrator = InstallerOrchestrator(
            src, dest, config, rpmbuild=rpmbuild, keep_staging=keep_staging
        )
        result = orchestrator.build_package()
        for artifact in result.artifacts:
            click.secho(f"✅ Successfully created package {artifact}", fg="green")
        if not result.artifacts:
            click.secho(f"⚠️  rpmbuild produced no packages for {dest}", fg="yellow")
        if keep_staging:
            click.echo(f"Staging tree kept at {result.staging_root}")
    except InstallerError as e:
        click.secho(f"❌ Packaging Failed:\n{e}", fg="red", err=True)
        raise click.Abort() from e


@cli.command("info")
@click.argument(
    "src", type=click.Path(exists=True, file_okay=False, resolve_path=True)
)
@config_option
def info_command(src: str, config_path: Path | None) -> None:
    """Shows the options a package of SRC would be built with."""
    try:
        options = resolve_options(src, "", load_config(config_path), read_metadata(src))
    except (InstallerError, tomllib.TOMLDecodeError) as e:
        click.secho(f"❌ Reading application failed: {e}", fg="red", err=True)
        raise click.Abort() from e

    context = options.template_context()
    for key in ("name", "product_name", "generic_name", "version", "revision",
                "arch", "license", "homepage", "bin", "icon"):
        click.echo(f"  {key}: {context[key] if context[key] is not None else '-'}")
    click.echo(f"  requires: {', '.join(options.requires)}")
    click.echo(f"  categories: {', '.join(options.categories)}")
    click.echo(f"  description:\n{options.product_description}")


main = cli
