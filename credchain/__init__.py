"""credchain: credential resolution over an ordered chain of helper programs.

Example:
    >>> from credchain import CredentialResolver, CredentialSettings
    >>> resolver = CredentialResolver(CredentialSettings(helpers=["store"]))
    >>> record = resolver.record_for_url("https://example.com/repo.git")
    >>> resolver.fill(record)
"""

from credchain.config import CredentialSettings
from credchain.credentials import CredentialRecord, SecretValue
from credchain.credentials.resolver import CredentialResolver
from credchain.enums import CredentialState, HelperOperation
from credchain.exceptions import (
    ConfigurationError,
    CredChainError,
    CredentialError,
    CredentialStateError,
    CredentialUrlError,
    FillExhaustedError,
    HelperError,
    HelperSpawnError,
    HelperTimeoutError,
    PromptUnavailableError,
    ProtocolDecodeError,
)

__version__ = "0.1.0"

__all__ = [
    "CredentialResolver",
    "CredentialSettings",
    "CredentialRecord",
    "SecretValue",
    "CredentialState",
    "HelperOperation",
    # Exceptions
    "CredChainError",
    "ConfigurationError",
    "CredentialError",
    "CredentialStateError",
    "CredentialUrlError",
    "FillExhaustedError",
    "HelperError",
    "HelperSpawnError",
    "HelperTimeoutError",
    "PromptUnavailableError",
    "ProtocolDecodeError",
]
