"""CLI entry point for credchain."""

import sys
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from credchain.cli import approve_command, fill_command, parse_url_command, reject_command
from credchain.config.settings import CredentialSettings
from credchain.exceptions import ConfigurationError
from credchain.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/credchain/config.yaml"


@click.group()
@click.option(
    "--config",
    default=None,
    envvar="CREDCHAIN_CONFIG",
    help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if it exists)",
)
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """credchain: resolve credentials through a chain of helper programs."""
    # parse-url is pure and needs no configuration
    if ctx.invoked_subcommand == "parse-url":
        configure_logging(log_level or "WARNING")
        ctx.obj = {"settings": None}
        return

    config_path = Path(config).expanduser() if config else Path(DEFAULT_CONFIG_PATH).expanduser()

    try:
        if config_path.exists():
            settings = CredentialSettings.from_yaml(str(config_path))
        elif config:
            raise ConfigurationError(f"Configuration file not found: {config}")
        else:
            settings = CredentialSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f"Error: Invalid CREDCHAIN_* environment settings: {e}", err=True)
        sys.exit(1)

    configure_logging(log_level or settings.log_level)
    log.debug("settings_loaded", config=str(config_path), helpers=len(settings.helpers))
    ctx.obj = {"settings": settings}


cli.add_command(fill_command)
cli.add_command(approve_command)
cli.add_command(reject_command)
cli.add_command(parse_url_command)


if __name__ == "__main__":
    cli()
