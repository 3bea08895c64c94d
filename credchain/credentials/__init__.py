"""Credential helper building blocks.

This package holds the pieces the resolver is assembled from:

    - CredentialRecord / SecretValue: the credential being resolved
    - AttributeCodec: key=value wire protocol
    - HelperCommandBuilder: helper specifier -> executable command
    - HelperRunner / SubprocessRunner: process execution capability
    - HelperInvoker: one helper, one operation, failures isolated
    - TerminalPrompter / AskpassPrompter: interactive fallback

The resolver itself lives in credchain.credentials.resolver and is exported
from the top-level credchain package.
"""

from credchain.credentials.helpers import (
    AbsolutePathCommand,
    ExecutableCommand,
    HelperCommandBuilder,
    HelperSpecifier,
    NamedHelper,
    ShellSnippet,
    parse_helper_specifier,
)
from credchain.credentials.invoker import HelperInvoker
from credchain.credentials.prompt import AskpassPrompter, Prompter, TerminalPrompter
from credchain.credentials.protocol import AttributeCodec
from credchain.credentials.record import CREDENTIAL_FIELDS, CredentialRecord, SecretValue
from credchain.credentials.runner import HelperResult, HelperRunner, SubprocessRunner
from credchain.credentials.url import parse_credential_url, redact_url

__all__ = [
    # Record
    "CREDENTIAL_FIELDS",
    "CredentialRecord",
    "SecretValue",
    # Protocol
    "AttributeCodec",
    # Helpers
    "AbsolutePathCommand",
    "ExecutableCommand",
    "HelperCommandBuilder",
    "HelperSpecifier",
    "NamedHelper",
    "ShellSnippet",
    "parse_helper_specifier",
    # Execution
    "HelperInvoker",
    "HelperResult",
    "HelperRunner",
    "SubprocessRunner",
    # Prompting
    "AskpassPrompter",
    "Prompter",
    "TerminalPrompter",
    # URLs
    "parse_credential_url",
    "redact_url",
]
