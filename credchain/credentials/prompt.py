"""Interactive fallback used when no helper supplies a complete credential.

Two prompters are provided:
    - TerminalPrompter: asks on the controlling terminal via click
    - AskpassPrompter: runs an askpass program (ssh-askpass style) that
      receives the prompt as its only argument and prints the answer

Both raise PromptUnavailableError when they cannot ask; the resolver turns
that into a FillExhaustedError.
"""

import sys
from typing import Protocol

import click
import structlog

from credchain.credentials.runner import HelperRunner, SubprocessRunner
from credchain.exceptions import HelperError, PromptUnavailableError

log = structlog.get_logger(__name__)


class Prompter(Protocol):
    """Protocol for the interactive acquisition path."""

    def ask(self, prompt: str, *, secret: bool) -> str:
        """Ask the user one question and block until answered.

        Args:
            prompt: Text shown to the user
            secret: True when the answer must not be echoed

        Returns:
            The answer (may be empty)

        Raises:
            PromptUnavailableError: If the user cannot be asked
        """
        ...


class TerminalPrompter:
    """Prompt on the terminal using click.

    Prompts are written to stderr so that stdout stays free for protocol
    output.
    """

    def __init__(self, require_tty: bool = True) -> None:
        self.require_tty = require_tty

    def ask(self, prompt: str, *, secret: bool) -> str:
        if self.require_tty and not sys.stdin.isatty():
            raise PromptUnavailableError(
                "Cannot prompt for credentials: standard input is not a terminal",
                suggestion="Configure a credential helper or an askpass program",
            )
        try:
            answer = click.prompt(
                prompt,
                hide_input=secret,
                default="",
                show_default=False,
                prompt_suffix="",
                err=True,
            )
        except click.exceptions.Abort as e:
            raise PromptUnavailableError("Credential prompt was aborted") from e
        return str(answer)


class AskpassPrompter:
    """Prompt by running an askpass program.

    The program is started with the prompt text as its only argument; the
    first line of its standard output is the answer.

    Attributes:
        program: Askpass program path or name
        runner: Process runner capability
    """

    def __init__(self, program: str, runner: HelperRunner | None = None, timeout: float | None = None) -> None:
        self.program = program
        self.runner: HelperRunner = runner or SubprocessRunner()
        self.timeout = timeout

    def ask(self, prompt: str, *, secret: bool) -> str:
        try:
            result = self.runner.run([self.program, prompt], b"", timeout=self.timeout)
        except HelperError as e:
            raise PromptUnavailableError(
                f"Cannot run askpass program: {e.message}",
                reference=self.program,
            ) from e

        if not result.ok:
            log.warning("askpass_failed", program=self.program, returncode=result.returncode)
            raise PromptUnavailableError(
                f"Askpass program exited with status {result.returncode}",
                reference=self.program,
            )

        try:
            output = result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PromptUnavailableError("Askpass output is not valid UTF-8", reference=self.program) from e
        return output.split("\n", 1)[0].removesuffix("\r")
