"""unit-paths CLI - print the unit search path for a scope."""

import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import NoReturn

import click

from .exceptions import SettingsValidationError
from .exceptions import UnitPathsError
from .models import Scope
from .resolver import PathResolver
from .settings import SettingsManager
from .settings import SettingsTarget
from .settings import default_settings_paths

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "UNIT_PATHS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _setup_logging(level: str) -> None:
    """Configure root logging on stderr; stdout carries only paths."""
    if not isinstance(logging.getLevelName(level), int):
        raise SettingsValidationError(f"Invalid log level '{level}'")
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--system", "scope_flag", flag_value="system", help="Search path of the system manager")
@click.option("--user", "scope_flag", flag_value="user", help="Search path of the calling user's manager")
@click.option("--global", "scope_flag", flag_value="global", help="Search path shared by all user managers")
@click.option("--root", "root", type=click.Path(file_okay=False), help="Operate on an alternative root directory")
@click.option("--split-usr", is_flag=True, help="Also search the legacy /lib vendor directory")
@click.option("--exclude-generated", is_flag=True, help="Leave out generator output directories")
@click.option("--tiers", is_flag=True, help="Show the tier of each directory")
@click.option("--config", "-c", "config_file", type=click.Path(dir_okay=False), help="Settings file path")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for diagnostics on stderr",
)
@click.pass_context
def main(
    ctx: click.Context,
    scope_flag: str | None,
    root: str | None,
    split_usr: bool,
    exclude_generated: bool,
    tiers: bool,
    config_file: str | None,
    log_level: str | None,
):
    """Print the unit search path, one directory per line.

    Directories are listed from highest to lowest precedence.

    Examples:
      unit-paths
      unit-paths --user
      unit-paths --global --root /srv/image
    """
    try:
        settings = SettingsManager(default_settings_paths(Path(config_file) if config_file else None))
        level = log_level or os.environ.get(LOG_LEVEL_ENV_VAR) or settings.get_log_level() or DEFAULT_LOG_LEVEL
        _setup_logging(level.upper())
    except UnitPathsError as e:
        _fail(str(e))

    ctx.obj = settings

    if ctx.invoked_subcommand is not None:
        return

    try:
        scope = Scope(scope_flag) if scope_flag else (settings.get_default_scope() or Scope.SYSTEM)
        options = settings.get_resolve_options()
        options = replace(
            options,
            root_prefix=root if root is not None else options.root_prefix,
            split_usr=split_usr or options.split_usr,
            exclude_generated=exclude_generated or options.exclude_generated,
        )
        logger.debug(f"Resolving {scope.value} scope with {options}")

        resolver = PathResolver(options=options)
        if tiers:
            for candidate in resolver.resolve_candidates(scope):
                click.echo(f"{candidate.tier.value}\t{candidate.path}")
        else:
            for path in resolver.resolve(scope):
                click.echo(path)
    except UnitPathsError as e:
        _fail(str(e))


@main.command(name="set-default-scope")
@click.argument("scope", type=click.Choice([scope.value for scope in Scope]))
@click.option(
    "--user-settings", "target", flag_value="user", default="user", help="Write the user settings file (default)"
)
@click.option("--system-settings", "target", flag_value="system", help="Write the system settings file")
@click.pass_obj
def set_default_scope(settings: SettingsManager, scope: str, target: str):
    """Set the scope used when no scope flag is given.

    Examples:
      unit-paths set-default-scope user
      unit-paths set-default-scope global --system-settings
    """
    settings_target = SettingsTarget(target)
    try:
        settings.set_default_scope(Scope(scope), settings_target)
    except UnitPathsError as e:
        _fail(str(e))

    click.echo(f"Default scope set to '{scope}' in {settings.target_to_path(settings_target)}")


if __name__ == "__main__":
    main()
