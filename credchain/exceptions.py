"""Custom exception hierarchy for credchain.

This module defines a structured exception hierarchy that separates helper
failures (which the resolver absorbs so one broken helper never aborts the
chain) from fatal resolution failures (which are surfaced to the caller).

Exception Hierarchy:
    CredChainError (base)
    ├── ConfigurationError
    └── CredentialError
        ├── HelperError
        │   ├── HelperSpawnError
        │   │   └── HelperTimeoutError
        │   └── ProtocolDecodeError
        ├── FillExhaustedError
        ├── CredentialStateError
        ├── PromptUnavailableError
        └── CredentialUrlError

Example Usage:
    >>> from credchain.exceptions import FillExhaustedError
    >>> try:
    ...     resolver.fill(record)
    ... except FillExhaustedError as e:
    ...     print(e.message)
"""


class CredChainError(Exception):
    """Base exception for all credchain errors.

    All custom exceptions inherit from this base class, allowing callers to
    catch every credchain-specific error with a single except clause.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(CredChainError):
    """Configuration-related errors.

    Raised when configuration files are invalid, missing, or contain
    incompatible settings.

    Examples:
        - Configuration file not found
        - Invalid YAML syntax
        - Invalid helper list or URL pattern
    """

    pass


class CredentialError(CredChainError):
    """Credential-related errors.

    This is the base class for credential-specific errors.

    Attributes:
        message: Human-readable error description
        reference: What the error refers to (a helper specifier, a URL, ...)
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: What the error refers to
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


# =============================================================================
# Helper Errors (absorbed by the invoker)
# =============================================================================


class HelperError(CredentialError):
    """Base exception for failures of a single credential helper.

    The invoker catches these; they never escape a fill, approve or reject.

    Attributes:
        helper: Helper specifier or command line that failed
    """

    def __init__(self, message: str, helper: str | None = None, suggestion: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            helper: Helper specifier or command line that failed
            suggestion: Optional suggestion for resolution
        """
        super().__init__(message, reference=helper, suggestion=suggestion)
        self.helper = helper


class HelperSpawnError(HelperError):
    """Helper process could not be started (missing, unexecutable, unparseable)."""

    pass


class HelperTimeoutError(HelperSpawnError):
    """Helper process exceeded the configured timeout and was killed."""

    def __init__(self, helper: str, timeout: float) -> None:
        """Initialize exception.

        Args:
            helper: Helper command line that timed out
            timeout: Timeout in seconds
        """
        super().__init__(f"Credential helper timed out after {timeout}s", helper=helper)
        self.timeout = timeout


class ProtocolDecodeError(HelperError):
    """Helper output could not be decoded as key=value attributes."""

    pass


# =============================================================================
# Resolution Errors (surfaced to the caller)
# =============================================================================


class FillExhaustedError(CredentialError):
    """No helper and no interactive fallback produced a complete credential.

    Fatal to the calling operation: a record is never returned with an absent
    username or password after fill.

    Attributes:
        missing: Names of the fields still absent when resolution gave up
    """

    def __init__(
        self,
        message: str,
        missing: tuple[str, ...] = (),
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            missing: Field names still absent
            reference: Description of the credential being resolved
            suggestion: Optional suggestion for resolution
        """
        super().__init__(message, reference=reference, suggestion=suggestion)
        self.missing = missing


class CredentialStateError(CredentialError):
    """Lifecycle operation called on a record in the wrong state."""

    pass


class PromptUnavailableError(CredentialError):
    """The interactive fallback cannot ask the user (no terminal, askpass failed)."""

    pass


class CredentialUrlError(CredentialError):
    """URL could not be decomposed into credential fields.

    Attributes:
        url: The invalid URL
    """

    def __init__(self, url: str, reason: str | None = None) -> None:
        """Initialize exception.

        Args:
            url: The invalid URL
            reason: Optional reason for the error
        """
        msg = f"Invalid credential URL: {url}"
        if reason:
            msg += f" ({reason})"

        super().__init__(
            msg,
            suggestion="Expected format: protocol://[user[:password]@]host[:port][/path]",
        )
        self.url = url
        self.reason = reason
