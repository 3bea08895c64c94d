"""Enumerations for credential lifecycle states and helper operations."""

from enum import Enum


class HelperOperation(str, Enum):
    """Operations sent to a credential helper as its final argument.

    - get: return any known attributes for the described credential
    - store: remember the credential (sent on approve)
    - erase: forget the credential (sent on reject)
    """

    GET = "get"
    STORE = "store"
    ERASE = "erase"

    def __str__(self) -> str:
        return self.value


class CredentialState(str, Enum):
    """Lifecycle states of a CredentialRecord.

    EMPTY -> FILLING -> FILLED -> {APPROVED, REJECTED} -> DISPOSED.
    DISPOSED is reachable from any state via an explicit clear.
    """

    EMPTY = "empty"
    FILLING = "filling"
    FILLED = "filled"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISPOSED = "disposed"

    def __str__(self) -> str:
        return self.value

    @property
    def can_fill(self) -> bool:
        """Whether fill may start from this state."""
        return self in (CredentialState.EMPTY, CredentialState.REJECTED, CredentialState.DISPOSED)

    @property
    def can_give_feedback(self) -> bool:
        """Whether approve/reject may be sent from this state."""
        return self in (CredentialState.FILLED, CredentialState.APPROVED)
