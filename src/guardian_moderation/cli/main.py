"""
Main CLI entry point for the Guardian moderation engine.

Provides unified command-line interface with subcommands for the safety
filter, request moderation, blocked searches and configuration.
"""

import logging
from typing import Optional

import click

from ..core.config import Config
from ..core.exceptions import ConfigurationError
from ..core.logging import configure_logging
from .blocked import blocked_commands
from .config import config_commands
from .filter import filter_commands
from .requests import request_commands

logger = logging.getLogger(__name__)


def resolve_log_level(config: Config, verbose: bool, debug: bool) -> str:
    """Pick the log level; -d and -v override the configured one."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return config.monitoring.log_level.upper()


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to a YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(
    ctx: click.Context, config_path: Optional[str], verbose: bool, debug: bool
) -> None:
    """
    Guardian Moderation CLI

    Review kids' content requests, inspect blocked searches and try out the
    search safety filter.
    """
    ctx.ensure_object(dict)

    try:
        config = Config.load(config_path)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        raise click.Abort()

    level = resolve_log_level(config, verbose, debug)
    configure_logging(level, json_format=config.monitoring.structured_logging)
    logger.debug(
        f"Loaded {config.environment.value} configuration, "
        f"data dir {config.storage.data_dir}"
    )

    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug


@cli.group("filter")
def filter_group() -> None:
    """Safety filter commands."""
    pass


@cli.group()
def requests() -> None:
    """Content request moderation commands."""
    pass


@cli.group()
def blocked() -> None:
    """Blocked search commands."""
    pass


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


# Add all commands from each module to their respective groups
for command in filter_commands.commands.values():
    filter_group.add_command(command)
for command in request_commands.commands.values():
    requests.add_command(command)
for command in blocked_commands.commands.values():
    blocked.add_command(command)
for command in config_commands.commands.values():
    config.add_command(command)


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
