"""Process runner capability used to execute credential helpers.

The invoker never spawns processes itself; it goes through a HelperRunner so
tests can substitute a fake that returns canned helper output.

This module offers:
    - HelperRunner: Protocol every runner implements
    - HelperResult: What a finished helper produced
    - SubprocessRunner: Blocking runner built on subprocess.run

Example:
    >>> runner = SubprocessRunner()
    >>> result = runner.run(["/bin/sh", "-c", "cat"], b"host=example.com\\n\\n")
    >>> result.stdout
    b'host=example.com\\n\\n'

Thread Safety:
    SubprocessRunner holds no mutable state. Each call creates an independent
    subprocess, so one runner may serve concurrent resolutions.
"""

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from credchain.exceptions import HelperSpawnError, HelperTimeoutError


@dataclass(frozen=True)
class HelperResult:
    """Outcome of one helper process.

    Attributes:
        returncode: Process exit code
        stdout: Captured standard output (empty when not captured)
    """

    returncode: int
    stdout: bytes = b""

    @property
    def ok(self) -> bool:
        """True when the helper exited with status 0."""
        return self.returncode == 0


class HelperRunner(Protocol):
    """Protocol defining how helper processes are executed.

    Implementations block until the process exits.
    """

    def run(
        self,
        argv: Sequence[str],
        stdin: bytes,
        *,
        capture_output: bool = True,
        timeout: float | None = None,
    ) -> HelperResult:
        """Run a helper to completion.

        Args:
            argv: Program and arguments
            stdin: Bytes written to the process's standard input, which is
                then closed
            capture_output: Capture stdout when True, discard it otherwise
            timeout: Maximum seconds to wait; None waits indefinitely

        Returns:
            Exit code and captured output

        Raises:
            HelperSpawnError: If the process cannot be started
            HelperTimeoutError: If the timeout expires
        """
        ...


class SubprocessRunner:
    """Run helpers with subprocess.run.

    Standard error is inherited so helper diagnostics reach the user.

    Attributes:
        env: Environment for helper processes (None inherits ours)
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self.env = env

    def run(
        self,
        argv: Sequence[str],
        stdin: bytes,
        *,
        capture_output: bool = True,
        timeout: float | None = None,
    ) -> HelperResult:
        command = argv[0] if argv else ""
        try:
            completed = subprocess.run(  # nosec B603 # argv built from configured helpers
                list(argv),
                input=stdin,
                stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
                stderr=None,
                timeout=timeout,
                env=self.env,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run has already killed and reaped the child
            raise HelperTimeoutError(command, timeout or 0.0) from e
        except FileNotFoundError as e:
            raise HelperSpawnError(
                f"Credential helper executable not found: {e.filename or command}",
                helper=command,
                suggestion="Check that the shell and helper program are installed",
            ) from e
        except OSError as e:
            raise HelperSpawnError(f"Cannot start credential helper: {e}", helper=command) from e
        except ValueError as e:
            # exec rejects arguments containing NUL
            raise HelperSpawnError(f"Invalid credential helper command: {e}", helper=command) from e

        return HelperResult(returncode=completed.returncode, stdout=completed.stdout or b"")
