"""Helper specifier parsing and command resolution.

A helper specifier is the configuration string naming one credential helper.
Resolution rules, first match wins:

    1. "!<snippet>"          -> ShellSnippet: the remainder runs in a shell
    2. "/abs/path [args]"    -> AbsolutePathCommand: used verbatim
    3. "<name> [args]"       -> NamedHelper: "<prefix><name> [args]"

Every variant runs through the shell as::

    sh -c '<command line> "$@"' '<command line>' <operation>

so the operation always arrives as the final argument, and shell quoting in
the specifier behaves as the user wrote it.

Example:
    >>> builder = HelperCommandBuilder(prefix="git-credential-")
    >>> builder.build("store --file=/tmp/creds").command_line
    'git-credential-store --file=/tmp/creds'
    >>> builder.build("!echo password=xyz").argv("get")
    ['/bin/sh', '-c', 'echo password=xyz "$@"', 'echo password=xyz', 'get']
"""

import ntpath
import posixpath
import shlex
from dataclasses import dataclass, field

from credchain.enums import HelperOperation
from credchain.exceptions import HelperSpawnError

DEFAULT_HELPER_PREFIX = "git-credential-"
DEFAULT_SHELL = "/bin/sh"


@dataclass(frozen=True)
class ShellSnippet:
    """Shell code run as-is (specifier started with '!')."""

    text: str


@dataclass(frozen=True)
class AbsolutePathCommand:
    """Program addressed by absolute path, bypassing name lookup."""

    path: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class NamedHelper:
    """Helper addressed by short name, resolved by prefixing."""

    name: str
    args: tuple[str, ...] = ()


HelperSpecifier = ShellSnippet | AbsolutePathCommand | NamedHelper


@dataclass(frozen=True)
class ExecutableCommand:
    """A resolved helper ready to be spawned.

    Attributes:
        specifier: Parsed specifier this command came from
        command_line: Shell command line, without the operation
        shell: Shell used to run the command line
    """

    specifier: HelperSpecifier
    command_line: str
    shell: str = field(default=DEFAULT_SHELL)

    @property
    def program(self) -> str | None:
        """Program that will run, or None for shell snippets."""
        if isinstance(self.specifier, AbsolutePathCommand):
            return self.specifier.path
        if isinstance(self.specifier, NamedHelper):
            return self.command_line.split(maxsplit=1)[0]
        return None

    @property
    def label(self) -> str:
        """Short name for logs; shell snippets show only their first word."""
        if self.program is not None:
            return self.program
        first_word = self.command_line.split(maxsplit=1)[0] if self.command_line.strip() else ""
        return f"!{first_word}"

    def argv(self, operation: HelperOperation | str) -> list[str]:
        """Build the argument vector with the operation appended.

        Args:
            operation: Operation name passed as final argument

        Returns:
            Argument list for the process runner
        """
        return [self.shell, "-c", f'{self.command_line} "$@"', self.command_line, str(operation)]

    def __str__(self) -> str:
        return self.command_line


def parse_helper_specifier(specifier: str) -> HelperSpecifier | None:
    """Classify a helper specifier string.

    Args:
        specifier: Raw configured helper string

    Returns:
        Parsed specifier, or None for an empty (no-op) specifier

    Raises:
        HelperSpawnError: If the specifier's shell quoting cannot be parsed
    """
    text = specifier.strip()
    if not text:
        return None

    if text.startswith("!"):
        snippet = text[1:].strip()
        return ShellSnippet(snippet) if snippet else None

    try:
        words = shlex.split(text)
    except ValueError as e:
        raise HelperSpawnError(f"Cannot parse helper specifier: {e}", helper=specifier) from e

    if not words:
        return None

    if _is_absolute(text):
        return AbsolutePathCommand(path=words[0], args=tuple(words[1:]))
    return NamedHelper(name=words[0], args=tuple(words[1:]))


def _is_absolute(text: str) -> bool:
    """Check for a POSIX or Windows absolute path at the start of text."""
    return posixpath.isabs(text) or ntpath.isabs(text)


class HelperCommandBuilder:
    """Turn helper specifier strings into executable commands.

    Attributes:
        prefix: Prepended to named helpers (e.g. 'git-credential-')
        shell: Shell used to execute every helper
    """

    def __init__(self, prefix: str = DEFAULT_HELPER_PREFIX, shell: str = DEFAULT_SHELL) -> None:
        self.prefix = prefix
        self.shell = shell

    def build(self, specifier: str) -> ExecutableCommand | None:
        """Resolve one specifier.

        Args:
            specifier: Raw configured helper string

        Returns:
            Executable command, or None for an empty specifier

        Raises:
            HelperSpawnError: If the specifier cannot be parsed
        """
        parsed = parse_helper_specifier(specifier)
        if parsed is None:
            return None

        if isinstance(parsed, ShellSnippet):
            command_line = parsed.text
        elif isinstance(parsed, AbsolutePathCommand):
            command_line = specifier.strip()
        else:
            command_line = f"{self.prefix}{specifier.strip()}"

        return ExecutableCommand(specifier=parsed, command_line=command_line, shell=self.shell)
