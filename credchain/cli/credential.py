"""CLI commands speaking the credential wire protocol on stdin/stdout.

These commands let shell scripts and other programs drive the resolver the
same way helpers are driven: attributes in, attributes out.

Commands:
    - fill: read a credential description, print the completed credential
    - approve: read a complete credential, tell helpers to store it
    - reject: read a complete credential, tell helpers to erase it
    - parse-url: show how a URL decomposes into credential fields

Example::

    $ printf 'url=https://example.com/repo.git\\n\\n' | credchain fill
    protocol=https
    host=example.com
    path=/repo.git
    username=alice
    password=s3cret
"""

import sys
from typing import NoReturn

import click

from credchain.config.settings import CredentialSettings
from credchain.credentials.protocol import AttributeCodec
from credchain.credentials.record import CREDENTIAL_FIELDS
from credchain.credentials.resolver import CredentialResolver
from credchain.credentials.url import parse_credential_url
from credchain.enums import CredentialState
from credchain.exceptions import CredentialError, ProtocolDecodeError
from credchain.utils.logging_config import get_logger

log = get_logger(__name__)


def _fail(error: CredentialError) -> NoReturn:
    """Report a credential error and exit with status 1."""
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if error.suggestion:
        click.echo(click.style(f"Suggestion: {error.suggestion}", fg="yellow"), err=True)
    sys.exit(1)


def _read_request() -> dict[str, str]:
    """Read attributes from stdin, expanding a url= attribute into fields."""
    try:
        attributes = AttributeCodec.decode(click.get_text_stream("stdin"))
    except ProtocolDecodeError as e:
        _fail(e)

    fields: dict[str, str] = {}
    if "url" in attributes:
        parsed = parse_credential_url(attributes["url"])
        fields.update({key: value for key, value in parsed.items() if value is not None})

    # Explicit attributes win over those taken from url=
    fields.update({key: value for key, value in attributes.items() if key in CREDENTIAL_FIELDS})
    return fields


def _resolver(ctx: click.Context) -> CredentialResolver:
    settings: CredentialSettings = ctx.obj["settings"]
    return CredentialResolver(settings)


@click.command(name="fill")
@click.pass_context
def fill_command(ctx: click.Context) -> None:
    """Fill in a credential and print it.

    Reads key=value attributes (protocol, host, path, username, password, or
    url) from standard input, consults the helper chain, prompts for anything
    still missing, and prints the complete credential.
    """
    resolver = _resolver(ctx)
    try:
        with resolver.create_record(**_read_request()) as record:
            resolver.fill(record)
            click.echo(AttributeCodec.encode(record), nl=False)
    except CredentialError as e:
        log.debug("fill_failed", error=e.message)
        _fail(e)


def _feedback(ctx: click.Context, operation: str) -> None:
    resolver = _resolver(ctx)
    try:
        with resolver.create_record(**_read_request()) as record:
            if not record.complete:
                click.echo(
                    click.style(f"Error: {operation} needs both username and password", fg="red"),
                    err=True,
                )
                sys.exit(1)
            # The caller vouches for this credential; treat it as filled
            record.state = CredentialState.FILLED
            if operation == "approve":
                resolver.approve(record)
            else:
                resolver.reject(record)
    except CredentialError as e:
        _fail(e)


@click.command(name="approve")
@click.pass_context
def approve_command(ctx: click.Context) -> None:
    """Tell helpers a credential worked so they can store it."""
    _feedback(ctx, "approve")


@click.command(name="reject")
@click.pass_context
def reject_command(ctx: click.Context) -> None:
    """Tell helpers a credential failed so they can erase it."""
    _feedback(ctx, "reject")


@click.command(name="parse-url")
@click.argument("url")
def parse_url_command(url: str) -> None:
    """Show the credential fields a URL decomposes into.

    The password, if any, is masked.
    """
    try:
        parts = parse_credential_url(url)
    except CredentialError as e:
        _fail(e)

    for key in CREDENTIAL_FIELDS:
        value = parts[key]
        if value is None:
            continue
        if key == "password":
            value = "*" * len(value)
        click.echo(f"{key}={value}")
