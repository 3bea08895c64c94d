"""Command-line interface commands."""

from credchain.cli.credential import approve_command, fill_command, parse_url_command, reject_command

__all__ = ["approve_command", "fill_command", "parse_url_command", "reject_command"]
