"""
Configuration management commands for the Guardian Moderation CLI.

Provides Click-based commands for inspecting and saving configuration.
"""

import json
from typing import Optional

import click
import yaml

from ..core.exceptions import ConfigurationError


@click.group()
def config_commands() -> None:
    """Configuration management commands."""
    pass


@config_commands.command()
@click.option(
    "--format",
    type=click.Choice(["json", "yaml", "table"]),
    default="table",
    help="Output format",
)
@click.option("--section", help="Show specific configuration section")
@click.pass_context
def show(ctx: click.Context, format: str, section: Optional[str]) -> None:
    """Show current configuration."""
    data = ctx.obj["config"].to_dict()

    if section:
        if section not in data or not isinstance(data[section], dict):
            click.echo(f"Unknown section: {section}", err=True)
            raise click.Abort()
        data = data[section]

    if format == "json":
        click.echo(json.dumps(data, indent=2, default=str))
    elif format == "yaml":
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))
    else:
        click.echo("Guardian Moderation Configuration")
        click.echo("=" * 50)
        for key, value in data.items():
            if isinstance(value, dict):
                click.echo(f"\n{key.title()}:")
                for sub_key, sub_value in value.items():
                    click.echo(f"  {sub_key}: {sub_value}")
            else:
                click.echo(f"{key}: {value}")


@config_commands.command()
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.pass_context
def save(ctx: click.Context, file_path: str) -> None:
    """Save current configuration to a YAML file."""
    try:
        ctx.obj["config"].save(file_path)
    except (OSError, ConfigurationError) as e:
        click.echo(f"Error saving configuration: {e}", err=True)
        raise click.Abort()
    click.echo(f"Configuration saved to {file_path}")
