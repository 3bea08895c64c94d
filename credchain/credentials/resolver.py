"""Credential resolution over an ordered chain of helpers.

CredentialResolver owns the lifecycle of a CredentialRecord:

    fill     consult every helper with ``get``; later helpers override
             earlier ones; prompt for whatever is still missing
    approve  tell every helper to ``store`` the credential
    reject   tell every helper to ``erase`` it, then forget the secret
    clear    wipe the record

Helpers run strictly one after another. Ordering is part of the contract:
each helper sees the fields accumulated so far and may override them.

Example:
    >>> resolver = CredentialResolver(settings)
    >>> with resolver.record_for_url("https://example.com/repo.git") as record:
    ...     resolver.fill(record)
    ...     ok = authenticate(record.username, record.password)
    ...     resolver.approve(record) if ok else resolver.reject(record)
"""

import structlog

from credchain.config.settings import CredentialSettings
from credchain.credentials.helpers import HelperCommandBuilder
from credchain.credentials.invoker import HelperInvoker
from credchain.credentials.prompt import AskpassPrompter, Prompter, TerminalPrompter
from credchain.credentials.record import CredentialRecord
from credchain.credentials.runner import HelperRunner, SubprocessRunner
from credchain.enums import CredentialState, HelperOperation
from credchain.exceptions import CredentialStateError, FillExhaustedError, PromptUnavailableError

log = structlog.get_logger(__name__)

# Attribute a helper sends to stop the chain
QUIT_ATTRIBUTE = "quit"
QUIT_VALUES = frozenset({"1", "true", "yes", "on"})

HTTP_PROTOCOLS = frozenset({"http", "https"})


class CredentialResolver:
    """Fill, approve, reject and clear credential records.

    Attributes:
        settings: Resolution settings
        invoker: Runs individual helpers
        prompter: Interactive fallback, or None when prompting is disabled
    """

    def __init__(
        self,
        settings: CredentialSettings | None = None,
        runner: HelperRunner | None = None,
        prompter: Prompter | None = None,
        invoker: HelperInvoker | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            settings: Resolution settings (defaults, environment)
            runner: Process runner; tests pass a fake here
            prompter: Interactive fallback. When omitted, one is built from
                settings: askpass if configured, else the terminal if
                interactive, else none.
            invoker: Pre-built invoker, overriding runner
        """
        self.settings = settings or CredentialSettings()
        runner = runner or SubprocessRunner()
        self.invoker = invoker or HelperInvoker(
            runner=runner,
            builder=HelperCommandBuilder(prefix=self.settings.helper_prefix, shell=self.settings.shell),
            timeout=self.settings.helper_timeout,
        )
        self.prompter = prompter if prompter is not None else self._default_prompter(runner)

    def _default_prompter(self, runner: HelperRunner) -> Prompter | None:
        if self.settings.askpass:
            return AskpassPrompter(self.settings.askpass, runner=runner, timeout=self.settings.helper_timeout)
        if self.settings.interactive:
            return TerminalPrompter()
        return None

    # -------------------------------------------------------------------------
    # Record creation
    # -------------------------------------------------------------------------

    def create_record(
        self,
        protocol: str | None = None,
        host: str | None = None,
        path: str | None = None,
        username: str | None = None,
        password: str | None = None,
    ) -> CredentialRecord:
        """Create a record with context fields and the configured helper chain."""
        record = CredentialRecord(
            protocol=protocol,
            host=host,
            path=path,
            username=username,
            password=password,
        )
        self._apply_settings(record)
        return record

    def record_for_url(self, url: str) -> CredentialRecord:
        """Create a record from a URL with the configured helper chain.

        Raises:
            CredentialUrlError: If the URL is malformed
        """
        record = self.from_url(url)
        self._apply_settings(record)
        return record

    @staticmethod
    def from_url(url: str) -> CredentialRecord:
        """Decompose a URL into a record without touching settings.

        Raises:
            CredentialUrlError: If the URL is malformed
        """
        return CredentialRecord.from_url(url)

    def _apply_settings(self, record: CredentialRecord) -> None:
        if not self.settings.use_http_path and (record.protocol or "").lower() in HTTP_PROTOCOLS:
            record.path = None
        record.helpers = self.settings.helpers_for(record)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def fill(self, record: CredentialRecord) -> CredentialRecord:
        """Populate username and password.

        Every helper is asked with ``get`` in declared order and every
        attribute it returns overwrites the record's field. Whatever is still
        missing afterwards is obtained from the prompter.

        Args:
            record: Record in EMPTY, REJECTED or DISPOSED state

        Returns:
            The same record, now FILLED with username and password present

        Raises:
            CredentialStateError: If the record is in another state
            FillExhaustedError: If neither helpers nor the prompter produced
                both fields. Username and password are wiped and the record
                is returned to EMPTY before raising.
        """
        if not record.state.can_fill:
            raise CredentialStateError(f"Cannot fill a credential in state '{record.state}'")

        description = record.describe()
        record.state = CredentialState.FILLING

        try:
            if record.complete:
                log.debug("credential_already_complete", credential=description)
            else:
                self._fill_from_helpers(record)
                if not record.complete:
                    self._fill_from_prompter(record)
        except BaseException:
            record.forget_secrets()
            record.state = CredentialState.EMPTY
            raise

        record.state = CredentialState.FILLED
        log.info("credential_filled", credential=record.describe(), helpers=len(record.helpers))
        return record

    def _fill_from_helpers(self, record: CredentialRecord) -> None:
        if record.username is None and self.settings.username is not None:
            record.username = self.settings.username

        for specifier in record.helpers:
            attributes = self.invoker.invoke(specifier, HelperOperation.GET, record)
            applied = record.apply(attributes)
            if applied:
                log.debug("credential_helper_applied", fields=applied)

            if attributes.get(QUIT_ATTRIBUTE, "").lower() in QUIT_VALUES:
                log.warning("credential_helper_quit", credential=record.describe())
                raise FillExhaustedError(
                    "Credential helper asked to stop credential resolution",
                    missing=record.missing_fields,
                    reference=record.describe(),
                )

    def _fill_from_prompter(self, record: CredentialRecord) -> None:
        missing = record.missing_fields
        if self.prompter is None:
            raise FillExhaustedError(
                "No credential helper supplied a complete credential and prompting is disabled",
                missing=missing,
                reference=record.describe(),
                suggestion="Configure a credential helper, an askpass program, or enable interactive prompts",
            )

        try:
            if record.username is None:
                record.username = self.prompter.ask(f"Username for '{record.describe()}': ", secret=False)
            if record.password is None:
                record.password = self.prompter.ask(f"Password for '{record.describe()}': ", secret=True)
        except PromptUnavailableError as e:
            raise FillExhaustedError(
                f"Could not prompt for credentials: {e.message}",
                missing=missing,
                reference=record.describe(),
                suggestion=e.suggestion,
            ) from e

        if not record.complete:
            raise FillExhaustedError(
                "Prompt did not supply a complete credential",
                missing=record.missing_fields,
                reference=record.describe(),
            )

    def approve(self, record: CredentialRecord) -> None:
        """Tell every helper the credential worked (``store``).

        Best-effort: helper failures are ignored and there is no rollback.
        Approving an already approved record does nothing.

        Raises:
            CredentialStateError: If the record was not filled
        """
        if record.state == CredentialState.APPROVED:
            return
        if record.state != CredentialState.FILLED:
            raise CredentialStateError(f"Cannot approve a credential in state '{record.state}'")

        self._notify(record, HelperOperation.STORE)
        record.state = CredentialState.APPROVED
        log.info("credential_approved", credential=record.describe())

    def reject(self, record: CredentialRecord) -> None:
        """Tell every helper the credential failed (``erase``) and forget it.

        Username and password are cleared; protocol, host and path are kept
        so the record can be filled again.

        Raises:
            CredentialStateError: If the record was not filled
        """
        if not record.state.can_give_feedback:
            raise CredentialStateError(f"Cannot reject a credential in state '{record.state}'")

        description = record.describe()
        try:
            self._notify(record, HelperOperation.ERASE)
        finally:
            record.forget_secrets()
            record.state = CredentialState.REJECTED
        log.info("credential_rejected", credential=description)

    def clear(self, record: CredentialRecord) -> None:
        """Wipe every field and release the helper list. Allowed in any state."""
        record.clear()

    def _notify(self, record: CredentialRecord, operation: HelperOperation) -> None:
        for specifier in record.helpers:
            self.invoker.invoke(specifier, operation, record)
