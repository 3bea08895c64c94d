"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest
import structlog
from structlog.testing import capture_logs

from credchain.config.settings import CredentialSettings
from credchain.credentials.runner import HelperResult


@dataclass
class RunnerCall:
    """One recorded helper invocation."""

    argv: list[str]
    stdin: bytes
    capture_output: bool
    timeout: float | None

    @property
    def command_line(self) -> str:
        """Command line the helper was built from (argv[3] of sh -c ... form)."""
        return self.argv[3] if len(self.argv) > 3 else self.argv[0]

    @property
    def operation(self) -> str:
        return self.argv[-1]

    @property
    def request(self) -> str:
        return self.stdin.decode("utf-8")


@dataclass
class FakeRunner:
    """HelperRunner returning canned results keyed by command line.

    A response may be bytes (stdout, exit 0), a HelperResult, or an
    exception instance to raise. Unknown commands exit 0 with no output.
    """

    responses: dict[str, bytes | HelperResult | Exception] = field(default_factory=dict)
    calls: list[RunnerCall] = field(default_factory=list)

    def run(
        self,
        argv: Sequence[str],
        stdin: bytes,
        *,
        capture_output: bool = True,
        timeout: float | None = None,
    ) -> HelperResult:
        call = RunnerCall(list(argv), stdin, capture_output, timeout)
        self.calls.append(call)

        response = self.responses.get(call.command_line, b"")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, HelperResult):
            return response if capture_output else HelperResult(response.returncode)
        return HelperResult(0, response if capture_output else b"")

    @property
    def command_lines(self) -> list[str]:
        return [call.command_line for call in self.calls]


@dataclass
class FakePrompter:
    """Prompter answering from a queue and recording prompts."""

    answers: list[str] = field(default_factory=list)
    prompts: list[tuple[str, bool]] = field(default_factory=list)
    error: Exception | None = None

    def ask(self, prompt: str, *, secret: bool) -> str:
        self.prompts.append((prompt, secret))
        if self.error is not None:
            raise self.error
        return self.answers.pop(0)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner that never spawns processes."""
    return FakeRunner()


@pytest.fixture
def fake_prompter() -> FakePrompter:
    """Prompter with no queued answers."""
    return FakePrompter()


@pytest.fixture
def settings() -> CredentialSettings:
    """Settings with interactive prompting disabled and no helpers."""
    return CredentialSettings(helpers=[], interactive=False)


@pytest.fixture(autouse=True)
def isolate_credchain_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CREDCHAIN_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("CREDCHAIN_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def captured_logs():
    """Capture structlog events emitted during a test."""
    structlog.reset_defaults()
    with capture_logs() as logs:
        yield logs


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()
